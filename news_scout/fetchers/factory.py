from __future__ import annotations

from typing import Dict, Optional, get_args

from ..models import SourceType
from ..utils.pipeline_config import ScoutConfig
from .base import SourceAdapter
from .html import HTMLAdapter
from .rss import RSSAdapter
from .social import SocialAdapter
from .topic_search import TopicSearchAdapter

_ADAPTER_CLASSES = {
    "rss": RSSAdapter,
    "topic_search": TopicSearchAdapter,
    "html": HTMLAdapter,
    "social": SocialAdapter,
}

# Every declared source type must have an adapter
if set(_ADAPTER_CLASSES) != set(get_args(SourceType)):
    raise ImportError(
        f"Adapter registry out of sync with SourceType: {sorted(_ADAPTER_CLASSES)} "
        f"vs {sorted(get_args(SourceType))}"
    )


def create_adapter(source_type: str, config: Optional[ScoutConfig] = None) -> SourceAdapter:
    """Create the adapter for ``source_type`` configured from ``config``."""
    cfg = config or ScoutConfig.from_env()
    if source_type == "rss":
        return RSSAdapter(timeout=cfg.rss_timeout)
    if source_type == "topic_search":
        return TopicSearchAdapter(
            lang=cfg.search_lang, country=cfg.search_country, timeout=cfg.rss_timeout
        )
    if source_type == "html":
        return HTMLAdapter(
            timeout=cfg.html_timeout,
            max_items=cfg.html_max_items,
            require_https=cfg.require_https,
        )
    if source_type == "social":
        return SocialAdapter(credential=cfg.social_api_key)

    raise ValueError(
        f"Unsupported source type '{source_type}'. Use one of {sorted(_ADAPTER_CLASSES)}."
    )


def create_adapters(config: Optional[ScoutConfig] = None) -> Dict[str, SourceAdapter]:
    """One adapter per source type, shared across the sources of a run."""
    return {source_type: create_adapter(source_type, config) for source_type in _ADAPTER_CLASSES}
