"""Story-level deduplication across sources.

Two passes:

1. Candidates whose URLs canonicalize to the same key are grouped; the group is
   represented by its earliest-dated member.
2. Groups with near-identical titles (trigram Jaccard >= threshold) are merged
   in one greedy left-to-right pass. The pass is not iterated: if A absorbs B,
   a C that resembles only B stays separate.
"""

from __future__ import annotations

import re
from collections import OrderedDict
from typing import FrozenSet, Iterable, List
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from ..models import CandidateArticle, DedupedCandidate

TRACKING_PARAMS = {"ref", "source", "fbclid", "gclid", "mc_cid", "mc_eid"}
TRACKING_PREFIXES = ("utm_",)
SIMILARITY_THRESHOLD = 0.85

_non_title_chars_re = re.compile(r"[^a-zčšžćđ0-9 ]")
_trailing_slash_re = re.compile(r"[\s/]+$")


def _is_tracking_param(key: str) -> bool:
    k = key.lower()
    return k in TRACKING_PARAMS or k.startswith(TRACKING_PREFIXES)


def canonicalize_url(url: str) -> str:
    """Normalize a URL into a dedup key.

    - Lowercase scheme and host, drop leading ``www.`` labels and any userinfo
    - Remove the fragment and tracking query parameters
    - Sort the remaining query parameters
    - Strip trailing slashes and whitespace from the path except for the root path

    Strings that are not absolute URLs come back stripped but unchanged.
    """
    raw = (url or "").strip()
    try:
        parts = urlsplit(raw)
        host = (parts.hostname or "").strip().lower()
        port = parts.port
    except ValueError:
        return raw
    if not parts.scheme or not host:
        return raw

    while host.startswith("www.") and len(host) > 4:
        host = host[4:]
    netloc = f"{host}:{port}" if port else host
    if ":" in host:  # IPv6 literal
        netloc = f"[{host}]:{port}" if port else f"[{host}]"

    path = _trailing_slash_re.sub("", parts.path.strip()) or "/"

    kept = [
        (k, v)
        for k, v in parse_qsl(parts.query, keep_blank_values=True)
        if not _is_tracking_param(k)
    ]
    kept.sort()
    return urlunsplit((parts.scheme.lower(), netloc, path, urlencode(kept), ""))


def trigrams(text: str) -> FrozenSet[str]:
    normalized = _non_title_chars_re.sub("", (text or "").lower()).strip()
    return frozenset(normalized[i : i + 3] for i in range(len(normalized) - 2))


def trigram_similarity(a: FrozenSet[str], b: FrozenSet[str]) -> float:
    """Jaccard similarity of two trigram sets; 0.0 when both are empty."""
    union = len(a | b)
    if union == 0:
        return 0.0
    return len(a & b) / union


def title_similarity(a: str, b: str) -> float:
    return trigram_similarity(trigrams(a), trigrams(b))


def _group_by_canonical_url(articles: Iterable[CandidateArticle]) -> List[DedupedCandidate]:
    groups: "OrderedDict[str, List[CandidateArticle]]" = OrderedDict()
    for article in articles:
        groups.setdefault(canonicalize_url(article.url), []).append(article)

    candidates: List[DedupedCandidate] = []
    for group in groups.values():
        # min() keeps the first of equal keys, so ties go to input order
        rep = min(
            group,
            key=lambda a: (a.published_at is None, a.published_at.timestamp() if a.published_at else 0.0),
        )
        names = list(dict.fromkeys(a.source_name for a in group))
        candidates.append(
            DedupedCandidate(
                title=rep.title,
                url=rep.url,
                published_at=rep.published_at,
                source_name=rep.source_name,
                source_names=names,
            )
        )
    return candidates


def _merge_into(target: DedupedCandidate, other: DedupedCandidate) -> None:
    for name in other.source_names:
        if name not in target.source_names:
            target.source_names.append(name)
    if other.published_at and (
        target.published_at is None or other.published_at < target.published_at
    ):
        target.published_at = other.published_at


def deduplicate_articles(
    articles: Iterable[CandidateArticle],
    *,
    threshold: float = SIMILARITY_THRESHOLD,
) -> List[DedupedCandidate]:
    """Collapse reports of the same story into one candidate per story."""
    candidates = _group_by_canonical_url(articles)
    grams = [trigrams(c.title) for c in candidates]
    merged: set[int] = set()

    for i in range(len(candidates)):
        if i in merged:
            continue
        for j in range(i + 1, len(candidates)):
            if j in merged:
                continue
            if trigram_similarity(grams[i], grams[j]) >= threshold:
                _merge_into(candidates[i], candidates[j])
                merged.add(j)

    return [c for i, c in enumerate(candidates) if i not in merged]
