from __future__ import annotations

from dataclasses import replace
from typing import Optional
from urllib.parse import parse_qs, quote, urlparse

from ..models import SourceConfig, SourceType
from ..utils.logging import get_logger
from .base import AdapterResult, SourceAdapter
from .rss import fetch_feed

logger = get_logger("scout.fetchers.topic_search")

SEARCH_BASE_URL = "https://news.google.com/rss/search"


def build_search_url(
    query: str,
    *,
    lang: str = "sl",
    country: str = "SI",
    base_url: str = SEARCH_BASE_URL,
) -> str:
    return f"{base_url}?q={quote(query, safe='')}&hl={lang}&gl={country}&ceid={country}:{lang}"


def unwrap_redirect(url: str) -> Optional[str]:
    """Return the target of an aggregator redirect link carrying a ``url`` param."""
    try:
        params = parse_qs(urlparse(url).query)
    except ValueError:
        return None
    target = (params.get("url") or [None])[0]
    if target and urlparse(target).scheme in ("http", "https"):
        return target
    return None


class TopicSearchAdapter(SourceAdapter):
    """Queries a news aggregator's RSS search with the topic description."""

    source_type: SourceType = "topic_search"

    def __init__(self, *, lang: str = "sl", country: str = "SI", timeout: float = 10) -> None:
        self.lang = lang
        self.country = country
        self.timeout = timeout

    def fetch(self, source: SourceConfig, topic_description: str) -> AdapterResult:
        self._check_type(source)
        feed_url = build_search_url(
            topic_description,
            lang=self.lang,
            country=self.country,
            base_url=source.url or SEARCH_BASE_URL,
        )
        result = fetch_feed(
            feed_url, source_name=source.name, source_type="topic_search", timeout=self.timeout
        )
        unwrapped = 0
        for idx, article in enumerate(result.articles):
            target = unwrap_redirect(article.url)
            if target:
                result.articles[idx] = replace(article, url=target)
                unwrapped += 1
        if unwrapped:
            logger.debug("Unwrapped %d redirect links for %s", unwrapped, source.name)
        return result
