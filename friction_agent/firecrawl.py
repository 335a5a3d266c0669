"""
Thin client for the Firecrawl scraping API (scrape, structured extract, map).

Every method raises ``UpstreamFetchFailed`` on any transport error, non-2xx
status, non-JSON body or ``success: false`` payload; callers decide the
fallback.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from .errors import UpstreamFetchFailed

logger = logging.getLogger(__name__)

NAVIGATION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "mainNavItems": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Top-level main navigation menu items visible in the header/navbar",
        },
        "dropdownMenuItems": {
            "type": "array",
            "items": {"type": "string"},
            "description": "All sub-menu or dropdown items within the main navigation",
        },
        "totalNavDepth": {
            "type": "number",
            "description": "Maximum nesting levels in navigation (1=flat, 2=dropdowns, 3+=mega menus)",
        },
    },
    "required": ["mainNavItems", "dropdownMenuItems", "totalNavDepth"],
}


@dataclass
class ScrapedPage:
    markdown: str = ""
    links: list[str] = field(default_factory=list)


def _link_list(value: Any) -> list[str]:
    # v1 returns plain strings, newer responses return {"url": ...} objects.
    if not isinstance(value, list):
        return []
    out: list[str] = []
    for item in value:
        if isinstance(item, dict):
            item = item.get("url")
        if isinstance(item, str) and item.strip():
            out.append(item.strip())
    return out


class FirecrawlClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.firecrawl.dev",
        timeout: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        logger.debug("firecrawl %s %s", path, payload.get("url"))
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                res = client.post(
                    f"{self._base_url}{path}",
                    json=payload,
                    headers={"authorization": f"Bearer {self._api_key}"},
                )
                res.raise_for_status()
                data = res.json()
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamFetchFailed(f"firecrawl {path} failed: {e}") from e

        if not isinstance(data, dict) or not data.get("success"):
            error = data.get("error") if isinstance(data, dict) else None
            raise UpstreamFetchFailed(f"firecrawl {path} reported failure: {error or 'unknown error'}")
        return data

    def scrape(self, url: str) -> ScrapedPage:
        data = self._post("/v1/scrape", {"url": url, "formats": ["markdown", "links"], "onlyMainContent": True})
        body = data.get("data") or {}
        return ScrapedPage(markdown=str(body.get("markdown") or ""), links=_link_list(body.get("links")))

    def extract(self, url: str, schema: dict[str, Any]) -> dict[str, Any]:
        data = self._post("/v1/scrape", {"url": url, "formats": ["extract"], "extract": {"schema": schema}})
        extracted = (data.get("data") or {}).get("extract")
        if not isinstance(extracted, dict):
            raise UpstreamFetchFailed("firecrawl extract returned no structured data")
        return extracted

    def map_site(self, url: str, limit: int = 500) -> list[str]:
        data = self._post("/v1/map", {"url": url, "limit": limit, "includeSubdomains": False})
        return _link_list(data.get("links"))[:limit]
