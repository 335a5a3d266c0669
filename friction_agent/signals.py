"""
Keyword heuristics applied to scraped pages and search summaries.

Every check is a lowercase substring test. The lists are tuned against a
handful of real products, so they are approximate by nature.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

TEMPLATE_SIGNALS = (
    "templates", "template", "quick start", "quickstart", "prebuilt",
    "out of the box", "starter kit", "one-click setup", "instant setup",
    "pre-configured", "ready to use", "get started in minutes",
    "no-code", "drag and drop", "plug and play", "turnkey",
)

STRONG_SELF_SERVE_SIGNALS = (
    "sign up", "signup", "free trial", "create account", "register",
    "start your free trial", "create your account", "sign up free",
    "create free account", "start free trial", "try for free",
    "start your free", "get started free", "start for free",
    "sign up now", "register free", "join free", "try it free",
)

SELF_SERVE_URL_PATTERNS = (
    "/signup", "/sign-up", "/register", "/create-account",
    "/trial", "/free-trial", "/get-started", "/start",
    "/join", "/onboarding", "/try",
)

WEAK_SELF_SERVE_SIGNALS = (
    "get started", "start now", "try free", "start building",
    "join waitlist", "get access", "try our",
)

ENTERPRISE_ONLY_SIGNALS = (
    "request pricing", "contact sales", "book a demo", "schedule demo",
    "talk to sales", "request a demo", "get a quote", "request quote",
    "contact us for pricing", "enterprise pricing", "sales team",
    "speak to sales", "schedule a call", "book a call", "get in touch",
    "request a consultation", "schedule a meeting", "talk to an expert",
)

DOC_PATH_PATTERNS = (
    "/docs", "/help", "/guide", "/support", "/learn", "/tutorial",
    "/kb", "/knowledge", "/articles", "/faq", "/academy", "/resources",
)

POSITIVE_REVIEW_WORDS = ("easy", "intuitive", "simple", "quick", "great", "love", "smooth", "straightforward")
NEGATIVE_REVIEW_WORDS = ("difficult", "confusing", "complex", "slow", "frustrating", "hard", "steep learning", "overwhelming")

NAV_COMPLEXITY_SIGNALS = (
    "hard to find", "buried in menus", "too many clicks", "confusing menu",
    "hidden feature", "settings maze", "endless clicks", "too many steps",
)
NAV_SIMPLICITY_SIGNALS = (
    "easy to navigate", "intuitive", "well organized", "minimal clicks",
    "streamlined", "one-click", "easy access", "simple navigation",
)

COGNITIVE_COMPLEXITY_SIGNALS = ("overwhelming", "cluttered", "too many options", "steep learning", "information overload")
COGNITIVE_SIMPLICITY_SIGNALS = ("clean interface", "minimalist", "simple ui", "easy on the eyes", "beginner friendly")

_ENTERPRISE_KINDS = ("enterprise", "crm", "erp")


@dataclass(frozen=True)
class SignupEvidence:
    strong: bool
    url_pattern: bool
    weak: bool
    enterprise_only: bool

    @property
    def has_signup(self) -> bool:
        # Generic CTAs are ambiguous: they only count when no contact-sales language sits beside them.
        return self.strong or self.url_pattern or (self.weak and not self.enterprise_only)


@dataclass(frozen=True)
class ReviewSentiment:
    positive: int
    neutral: int
    negative: int


@dataclass(frozen=True)
class KeywordHits:
    nav_complexity: int
    nav_simplicity: int
    cognitive_complexity: int
    cognitive_simplicity: int
    is_enterprise: bool


def _contains_any(text: str, needles: Iterable[str]) -> bool:
    return any(n in text for n in needles)


def _count_present(text: str, needles: Iterable[str]) -> int:
    return sum(1 for n in needles if n in text)


def round_half_up(value: float) -> int:
    """Round halves towards positive infinity, so -2.5 becomes -2 (``round`` would use banker's rounding)."""
    return math.floor(value + 0.5)


def mentions_templates(text: str | None) -> bool:
    return _contains_any((text or "").lower(), TEMPLATE_SIGNALS)


def detect_signup(page_text: str | None, links: Iterable[str] | None) -> SignupEvidence:
    text = (page_text or "").lower()
    all_links = " ".join(str(link).lower() for link in (links or []))
    return SignupEvidence(
        strong=_contains_any(text, STRONG_SELF_SERVE_SIGNALS),
        url_pattern=_contains_any(all_links, SELF_SERVE_URL_PATTERNS),
        weak=_contains_any(text, WEAK_SELF_SERVE_SIGNALS),
        enterprise_only=_contains_any(text, ENTERPRISE_ONLY_SIGNALS),
    )


def filter_doc_links(links: Iterable[str] | None) -> list[str]:
    return [link for link in (links or []) if _contains_any(link.lower(), DOC_PATH_PATTERNS)]


def review_sentiment(summary: str | None) -> ReviewSentiment:
    """Coarse positive/neutral/negative split from keyword presence.

    The raw buckets (20-80 / 25 / 10-50) are rescaled to percentages; negative
    takes whatever rounding leaves so the three always add up to 100.
    """
    text = (summary or "").lower()
    positive_count = _count_present(text, POSITIVE_REVIEW_WORDS)
    negative_count = _count_present(text, NEGATIVE_REVIEW_WORDS)

    total = max(positive_count + negative_count, 1)
    raw_positive = round_half_up(positive_count / total * 60) + 20
    raw_neutral = 25
    raw_negative = round_half_up(negative_count / total * 40) + 10

    raw_total = raw_positive + raw_neutral + raw_negative
    positive = round_half_up(raw_positive / raw_total * 100)
    neutral = round_half_up(raw_neutral / raw_total * 100)
    return ReviewSentiment(positive=positive, neutral=neutral, negative=100 - positive - neutral)


def count_keyword_hits(text: str | None) -> KeywordHits:
    content = (text or "").lower()
    return KeywordHits(
        nav_complexity=_count_present(content, NAV_COMPLEXITY_SIGNALS),
        nav_simplicity=_count_present(content, NAV_SIMPLICITY_SIGNALS),
        cognitive_complexity=_count_present(content, COGNITIVE_COMPLEXITY_SIGNALS),
        cognitive_simplicity=_count_present(content, COGNITIVE_SIMPLICITY_SIGNALS),
        is_enterprise=any(
            f"{kind} software" in content or f"{kind} solution" in content for kind in _ENTERPRISE_KINDS
        ),
    )
