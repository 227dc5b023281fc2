"""Processing stages: filtering, deduplication and LLM ranking."""

from .filter import FilterResult, apply_filters
from .dedup import canonicalize_url, deduplicate_articles, title_similarity, trigram_similarity, trigrams
from .rank import RankerResult, rank_candidates

__all__ = [
    "FilterResult",
    "apply_filters",
    "canonicalize_url",
    "deduplicate_articles",
    "title_similarity",
    "trigram_similarity",
    "trigrams",
    "RankerResult",
    "rank_candidates",
]
