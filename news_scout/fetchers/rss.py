from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

import feedparser
import requests

from ..models import CandidateArticle, SourceConfig, SourceType
from ..utils.logging import get_logger
from .base import DEFAULT_HEADERS, AdapterResult, SourceAdapter

logger = get_logger("scout.fetchers.rss")


def _parse_datetime(entry: dict) -> Optional[datetime]:
    # feedparser normalizes pubDate/published and updated/dc:date to UTC struct_time
    for key in ("published_parsed", "updated_parsed"):
        tm = entry.get(key)
        if tm:
            try:
                return datetime(*tm[:6], tzinfo=timezone.utc)
            except (TypeError, ValueError):
                return None
    return None


def parse_feed(
    content: bytes | str,
    *,
    source_name: str,
    source_type: SourceType = "rss",
) -> List[CandidateArticle]:
    """Parse RSS ``<item>`` or Atom ``<entry>`` elements into candidates.

    Entries missing a title or a link are skipped. Broken markup is tolerated:
    feedparser flags it as ``bozo`` but still returns what it could read.
    """
    parsed = feedparser.parse(content)
    if getattr(parsed, "bozo", False):
        logger.debug(
            "Feed 'bozo' flagged for %s: %s", source_name, getattr(parsed, "bozo_exception", None)
        )

    articles: List[CandidateArticle] = []
    for entry in getattr(parsed, "entries", []) or []:
        title = (entry.get("title") or "").strip()
        link = (entry.get("link") or "").strip()
        if not title or not link:
            continue
        articles.append(
            CandidateArticle(
                title=title,
                url=link,
                published_at=_parse_datetime(entry),
                source_name=source_name,
                source_type=source_type,
            )
        )
    return articles


def fetch_feed(
    feed_url: str,
    *,
    source_name: str,
    source_type: SourceType = "rss",
    timeout: float = 10,
) -> AdapterResult:
    """Download and parse one feed, capturing failures as error strings."""
    result = AdapterResult()
    logger.debug("Fetching feed from %s", feed_url)
    try:
        resp = requests.get(feed_url, headers=DEFAULT_HEADERS, timeout=timeout)
    except requests.RequestException as exc:
        logger.warning("Feed request error for %s: %s", feed_url, exc)
        result.errors.append(f"Fetch failed for {feed_url}: {exc}")
        return result
    if resp.status_code >= 400:
        logger.warning("Feed fetch failed (%s): %s", resp.status_code, feed_url)
        result.errors.append(f"HTTP {resp.status_code} from {feed_url}")
        return result

    try:
        result.articles = parse_feed(resp.content, source_name=source_name, source_type=source_type)
    except Exception as exc:  # noqa: BLE001 - feedparser should not raise, but never trust a feed
        result.errors.append(f"Parse failed for {feed_url}: {exc}")
    logger.info("Fetched %d feed entries from %s", len(result.articles), source_name)
    return result


class RSSAdapter(SourceAdapter):
    source_type: SourceType = "rss"

    def __init__(self, *, timeout: float = 10) -> None:
        self.timeout = timeout

    def fetch(self, source: SourceConfig, topic_description: str) -> AdapterResult:
        self._check_type(source)
        if not source.url:
            return AdapterResult(errors=[f"RSS source {source.name}: no feed URL configured"])
        return fetch_feed(source.url, source_name=source.name, timeout=self.timeout)
