from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


# Load environment variables from the repo root .env (so API keys work in local dev)
_HERE = Path(__file__).resolve()
_REPO_ROOT = _HERE.parents[1]
load_dotenv(_REPO_ROOT / ".env", override=False)


@dataclass(frozen=True)
class Settings:
    """Environment-backed settings."""
    firecrawl_api_key: str
    firecrawl_base_url: str
    perplexity_api_key: str
    perplexity_base_url: str
    perplexity_model: str
    upstream_timeout_s: float
    rate_limit_max: int
    rate_limit_window_s: int
    cors_origins: list[str]
    log_level: str

    @property
    def has_credentials(self) -> bool:
        return bool(self.firecrawl_api_key and self.perplexity_api_key)


def _cors_origins(raw: str) -> list[str]:
    raw = raw.strip()
    if not raw:
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()]


def load_settings() -> Settings:
    return Settings(
        firecrawl_api_key=os.getenv("FIRECRAWL_API_KEY", "").strip(),
        firecrawl_base_url=os.getenv("FIRECRAWL_BASE_URL", "https://api.firecrawl.dev").rstrip("/"),
        perplexity_api_key=os.getenv("PERPLEXITY_API_KEY", "").strip(),
        perplexity_base_url=os.getenv("PERPLEXITY_BASE_URL", "https://api.perplexity.ai").rstrip("/"),
        perplexity_model=os.getenv("PERPLEXITY_MODEL", "sonar"),
        upstream_timeout_s=float(os.getenv("FRICTION_UPSTREAM_TIMEOUT_S", "60")),
        rate_limit_max=max(1, int(os.getenv("FRICTION_RATE_LIMIT_MAX", "10"))),
        rate_limit_window_s=max(1, int(os.getenv("FRICTION_RATE_LIMIT_WINDOW_S", "3600"))),
        cors_origins=_cors_origins(os.getenv("FRICTION_CORS_ORIGINS", "*")),
        log_level=os.getenv("FRICTION_LOG_LEVEL", "INFO").upper(),
    )
