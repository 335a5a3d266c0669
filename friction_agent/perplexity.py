"""
Search-backed answers from the Perplexity chat completions API.
Used to summarise review sites, community threads and help-center coverage for a product.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from .errors import UpstreamFetchFailed

logger = logging.getLogger(__name__)

REVIEW_DOMAINS = ["g2.com", "capterra.com"]
COMMUNITY_DOMAINS = ["reddit.com"]


@dataclass
class SearchAnswer:
    content: str = ""
    citations: list[str] = field(default_factory=list)


def _as_str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, list):
        out: list[str] = []
        for item in value:
            if isinstance(item, dict):
                item = item.get("url")
            if item is None:
                continue
            s = str(item).strip()
            if s:
                out.append(s)
        return out
    return []


def _normalize_completion(raw: Any) -> SearchAnswer:
    """Pull the answer text and citation URLs out of a completion payload.

    Older responses list citations at the top level; newer ones only carry
    ``search_results``. Anything missing or oddly typed degrades to empty.
    """
    if not isinstance(raw, dict):
        return SearchAnswer()

    content = ""
    choices = raw.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        message = choices[0].get("message") or {}
        if isinstance(message, dict):
            content = str(message.get("content") or "").strip()

    citations = _as_str_list(raw.get("citations"))
    if not citations:
        citations = _as_str_list(raw.get("search_results"))
    return SearchAnswer(content=content, citations=citations)


def reviews_prompt(product_name: str) -> str:
    return (
        f"Search G2 and Capterra reviews for {product_name}. Focus on: ease of use, learning curve, "
        "setup time, onboarding experience. Summarize key friction points in 3-4 sentences."
    )


def community_prompt(product_name: str) -> str:
    return (
        f"Search Reddit for {product_name} user experience discussions. Find common complaints about "
        "onboarding, workarounds users mention, feature discoverability issues. Summarize in 3-4 sentences."
    )


def help_center_prompt(product_name: str) -> str:
    return (
        f"Find information about {product_name}'s help center and support options. Include available "
        "channels, response time feedback, self-service options. Summarize in 2-3 sentences."
    )


class PerplexityClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.perplexity.ai",
        model: str = "sonar",
        timeout: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._timeout = timeout
        self._transport = transport

    def ask(self, prompt: str, domains: list[str] | None = None) -> SearchAnswer:
        payload: dict[str, Any] = {
            "model": self._model,
            "messages": [{"role": "user", "content": prompt}],
        }
        if domains:
            payload["search_domain_filter"] = list(domains)

        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                res = client.post(
                    f"{self._base_url}/chat/completions",
                    json=payload,
                    headers={"authorization": f"Bearer {self._api_key}"},
                )
                res.raise_for_status()
                data = res.json()
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamFetchFailed(f"perplexity query failed: {e}") from e

        answer = _normalize_completion(data)
        logger.debug("perplexity answered %d chars, %d citations", len(answer.content), len(answer.citations))
        return answer
