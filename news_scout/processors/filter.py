from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence

from ..models import CandidateArticle, utc_now

PAYWALL_URL_PATTERNS = ("/premium/", "/paywall/", "/subscriber")
# English and Slovenian phrases marking subscriber-only stories
PAYWALL_TITLE_PATTERNS = (
    "subscribers only",
    "subscriber only",
    "premium",
    "naročniki",
    "samo za naročnike",
)


@dataclass(slots=True)
class FilterResult:
    filtered: List[CandidateArticle]
    removed: int


def is_stale(article: CandidateArticle, cutoff: datetime) -> bool:
    # Unknown dates are kept; an article exactly at the cutoff is stale
    return article.published_at is not None and article.published_at <= cutoff


def is_paywalled(article: CandidateArticle) -> bool:
    url_lower = article.url.lower()
    if any(p in url_lower for p in PAYWALL_URL_PATTERNS):
        return True
    title_lower = article.title.lower()
    return any(p in title_lower for p in PAYWALL_TITLE_PATTERNS)


def matches_negative(article: CandidateArticle, keywords: Sequence[str]) -> bool:
    title_lower = article.title.lower()
    return any(kw in title_lower for kw in keywords)


def apply_filters(
    articles: Iterable[CandidateArticle],
    negative_filters: Iterable[str] = (),
    *,
    hours_back: float = 24,
    now: Optional[datetime] = None,
) -> FilterResult:
    """Drop stale, paywalled and blacklisted candidates, preserving order.

    Checks run in a fixed order: recency, paywall URL, paywall title, topic
    negative keywords.
    """
    cutoff = (now or utc_now()) - timedelta(hours=hours_back)
    keywords = [kw.strip().lower() for kw in negative_filters if kw and kw.strip()]

    items = list(articles)
    kept = [
        a
        for a in items
        if not is_stale(a, cutoff) and not is_paywalled(a) and not matches_negative(a, keywords)
    ]
    return FilterResult(filtered=kept, removed=len(items) - len(kept))
