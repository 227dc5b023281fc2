from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes"}


@dataclass(slots=True)
class ScoutConfig:
    """Runtime knobs for a run; see ``from_env`` for the variable names."""

    lookback_hours: float = 24
    rss_timeout: float = 10
    html_timeout: float = 5
    html_max_items: int = 20
    similarity_threshold: float = 0.85
    search_lang: str = "sl"
    search_country: str = "SI"
    social_api_key: Optional[str] = None
    require_https: bool = True
    runs_path: str = "./.cache/runs.json"
    usage_log_path: str = "./.cache/usage.jsonl"
    telegram_token: Optional[str] = None

    @classmethod
    def from_env(cls) -> "ScoutConfig":
        return cls(
            lookback_hours=float(os.getenv("SCOUT_LOOKBACK_HOURS", "24")),
            rss_timeout=float(os.getenv("SCOUT_RSS_TIMEOUT", "10")),
            html_timeout=float(os.getenv("SCOUT_HTML_TIMEOUT", "5")),
            html_max_items=int(os.getenv("SCOUT_HTML_MAX_ITEMS", "20")),
            similarity_threshold=float(os.getenv("SCOUT_SIMILARITY_THRESHOLD", "0.85")),
            search_lang=os.getenv("SCOUT_SEARCH_LANG", "sl"),
            search_country=os.getenv("SCOUT_SEARCH_COUNTRY", "SI"),
            social_api_key=os.getenv("SCOUT_SOCIAL_API_KEY") or None,
            require_https=_env_bool("SCOUT_REQUIRE_HTTPS", True),
            runs_path=os.getenv("SCOUT_RUNS_PATH", "./.cache/runs.json"),
            usage_log_path=os.getenv("SCOUT_USAGE_LOG_PATH", "./.cache/usage.jsonl"),
            telegram_token=os.getenv("TELEGRAM_BOT_TOKEN") or None,
        )
