from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from .models import PhaseScore, Phases
from .products import KnownBaseline
from .signals import KeywordHits, ReviewSentiment, round_half_up

FrictionTier = Literal["high", "medium", "low"]

MAX_RECOMMENDATIONS = 4


@dataclass(frozen=True)
class ScoringInputs:
    baseline: KnownBaseline | None
    is_known_complex: bool
    has_templates: bool
    nav_item_count: int
    nav_depth: int | float
    docs_found: int
    documentation_score: float
    sentiment: ReviewSentiment
    hits: KeywordHits


@dataclass(frozen=True)
class ScoreResult:
    click_tax_score: int
    total_cognitive_load: int
    overall_score: int
    setup_minutes: int
    time_to_value_estimate: str
    friction_tier: FrictionTier
    phases: Phases
    recommendations: list[str] = field(default_factory=list)


def clamp_score(score: float, low: int = 0, high: int = 100) -> int:
    return max(low, min(high, int(score)))


def friction_tier(sentiment: ReviewSentiment) -> FrictionTier:
    if sentiment.negative > sentiment.positive:
        return "high"
    if sentiment.neutral > 35:
        return "medium"
    return "low"


def _nav_item_impact(count: int) -> int:
    if count <= 6:
        return -15
    if count <= 10:
        return 0
    if count <= 15:
        return 15
    return 25


def _nav_depth_impact(depth: int | float) -> int:
    if depth == 1:
        return -10
    if depth == 2:
        return 5
    return 15


def _docs_impact(docs_found: int) -> int:
    if docs_found <= 50:
        return -10
    if docs_found <= 150:
        return 0
    if docs_found <= 400:
        return 10
    return 20


def _baseline_scores(base: KnownBaseline, hits: KeywordHits, tier: FrictionTier) -> tuple[int, int]:
    tier_delta = {"high": 5, "medium": 2, "low": -3}[tier]

    click_tax = base.click_tax_base + hits.nav_complexity * 3 - hits.nav_simplicity * 3 + tier_delta
    cognitive = base.cognitive_base + hits.cognitive_complexity * 3 - hits.cognitive_simplicity * 3 + tier_delta

    click_tax = clamp_score(click_tax, base.click_tax_base - 10, base.click_tax_base + 15)
    cognitive = clamp_score(cognitive, base.cognitive_base - 10, base.cognitive_base + 15)
    return click_tax, cognitive


def _dynamic_scores(inputs: ScoringInputs, tier: FrictionTier) -> tuple[int, int]:
    hits = inputs.hits
    docs_impact = _docs_impact(inputs.docs_found)
    templates_bonus = -20 if inputs.has_templates else 10
    if inputs.is_known_complex:
        enterprise_penalty = 30
    elif hits.is_enterprise:
        enterprise_penalty = 15
    else:
        enterprise_penalty = 0

    click_tax = round_half_up(
        50
        + _nav_item_impact(inputs.nav_item_count)
        + _nav_depth_impact(inputs.nav_depth)
        + docs_impact
        + templates_bonus
        + hits.nav_complexity * 5
        - hits.nav_simplicity * 6
        + {"high": 10, "medium": 5, "low": -5}[tier]
        + enterprise_penalty
    )
    cognitive = round_half_up(
        50
        + docs_impact * 0.5
        + templates_bonus * 0.5
        + hits.cognitive_complexity * 6
        - hits.cognitive_simplicity * 7
        + {"high": 8, "medium": 4, "low": -5}[tier]
        + enterprise_penalty * 0.7
    )
    return click_tax, cognitive


def estimate_setup_minutes(
    has_templates: bool,
    is_known_complex: bool,
    is_enterprise: bool,
    docs_found: int,
    click_tax_score: int,
) -> int:
    minutes = 15
    minutes += 10 if has_templates else 60

    if is_known_complex:
        minutes = minutes * 8 + 480
    elif is_enterprise:
        minutes *= 2

    if docs_found > 500:
        minutes += 240
    elif docs_found > 200:
        minutes += 60
    return minutes + click_tax_score * 2


def format_time_to_value(minutes: int) -> str:
    if minutes < 30:
        return f"~{minutes} min"
    if minutes < 60:
        return f"~{round_half_up(minutes / 5) * 5} min"
    if minutes < 180:
        hours = round_half_up(minutes / 60)
        return f"{hours}-{hours + 1} hours"
    if minutes < 480:
        return f"{minutes // 60}+ hours"
    if minutes < 1440:
        # 8-hour working days
        days = minutes // 480
        return f"{days}-{days + 1} days"
    if minutes < 4320:
        return f"{minutes // 1440}+ days"
    return "1-2+ weeks"


def build_recommendations(
    click_tax_score: int,
    total_cognitive_load: int,
    has_templates: bool,
    sentiment: ReviewSentiment,
    documentation_score: float,
) -> list[str]:
    recommendations: list[str] = []
    if click_tax_score > 60:
        recommendations.append(
            "Consider products with simpler navigation - current choice requires many clicks to accomplish tasks"
        )
    if total_cognitive_load > 60:
        recommendations.append("Interface complexity may slow down your team - look for cleaner alternatives")
    if not has_templates:
        recommendations.append(
            "No built-in templates detected - expect longer setup time or custom configuration"
        )
    if sentiment.negative > sentiment.positive:
        recommendations.append("User reviews indicate friction - research common complaints before committing")
    if documentation_score < 50:
        recommendations.append("Documentation appears limited - support resources may be scarce")

    if not recommendations:
        recommendations.append("Product appears well-designed for ease of use")
    return recommendations[:MAX_RECOMMENDATIONS]


def build_phases(click_tax_score: int, total_cognitive_load: int, tier: FrictionTier) -> Phases:
    if tier == "high":
        signup = PhaseScore(click_tax=6, cognitive_load=28, summary="Complex signup process with multiple steps")
    elif tier == "medium":
        signup = PhaseScore(click_tax=4, cognitive_load=20, summary="Some friction points in signup")
    else:
        signup = PhaseScore(click_tax=2, cognitive_load=12, summary="Straightforward signup with minimal friction")

    if click_tax_score > 70:
        onboarding_summary, daily_summary = "Extensive onboarding required", "High ongoing complexity"
    elif click_tax_score > 40:
        onboarding_summary, daily_summary = "Moderate onboarding process", "Moderate daily friction"
    else:
        onboarding_summary, daily_summary = "Quick and simple onboarding", "Smooth daily usage"

    return Phases(
        signup=signup,
        onboarding=PhaseScore(
            click_tax=round_half_up(click_tax_score * 0.3),
            cognitive_load=round_half_up(total_cognitive_load * 0.4),
            summary=onboarding_summary,
        ),
        constant_use=PhaseScore(
            click_tax=round_half_up(click_tax_score * 0.5),
            cognitive_load=round_half_up(total_cognitive_load * 0.5),
            summary=daily_summary,
        ),
    )


def calculate_scores(inputs: ScoringInputs) -> ScoreResult:
    tier = friction_tier(inputs.sentiment)

    if inputs.baseline is not None:
        click_tax, cognitive = _baseline_scores(inputs.baseline, inputs.hits, tier)
    else:
        click_tax, cognitive = _dynamic_scores(inputs, tier)

    click_tax = clamp_score(click_tax)
    cognitive = clamp_score(cognitive)
    overall = clamp_score(round_half_up(100 - click_tax * 0.5 - cognitive * 0.5))

    minutes = estimate_setup_minutes(
        inputs.has_templates,
        inputs.is_known_complex,
        inputs.hits.is_enterprise,
        inputs.docs_found,
        click_tax,
    )

    return ScoreResult(
        click_tax_score=click_tax,
        total_cognitive_load=cognitive,
        overall_score=overall,
        setup_minutes=minutes,
        time_to_value_estimate=format_time_to_value(minutes),
        friction_tier=tier,
        phases=build_phases(click_tax, cognitive, tier),
        recommendations=build_recommendations(
            click_tax, cognitive, inputs.has_templates, inputs.sentiment, inputs.documentation_score
        ),
    )
