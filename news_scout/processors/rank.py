from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from ..models import DedupedCandidate, RankedResult, utc_now
from ..utils.logging import get_logger
from .ai import LLMClient
from .ai.parsing import extract_ranked_urls, parse_ranking_response
from .ai.retry import chat_with_retry
from .dedup import canonicalize_url

logger = get_logger("scout.processors.rank")

MAX_RESULTS = 3
AUTO_SELECT_REASON = "auto-selected (≤3 candidates)"

SYSTEM_PROMPT = """You are a news editor. Select exactly 3 articles from the candidate list.

CRITERIA (in order of importance):
1. IMPORTANCE - significance for the topic
2. READING POTENTIAL - will people read the full article?
3. SHAREABILITY - social media potential
4. DIVERSITY - the 3 articles MUST cover 3 different angles of the topic

EXCLUDE: sponsored content, product announcements, listicles, clickbait.
Prefer articles reported by more sources.

Respond with valid JSON only, no markdown:
{"results":[{"url":"...","title":"...","reason":"..."},{"url":"...","title":"...","reason":"..."},{"url":"...","title":"...","reason":"..."}]}"""


@dataclass(slots=True)
class RankerResult:
    results: List[RankedResult] = field(default_factory=list)
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: int = 0
    used_llm: bool = False
    used_fallback: bool = False


def format_time_ago(published_at: Optional[datetime], *, now: Optional[datetime] = None) -> str:
    if published_at is None:
        return "unknown"
    hours = int(((now or utc_now()) - published_at).total_seconds() // 3600)
    if hours < 1:
        return "< 1h ago"
    if hours < 24:
        return f"{hours}h ago"
    return f"{hours // 24}d ago"


def build_user_message(
    candidates: Sequence[DedupedCandidate],
    topic_description: str,
    *,
    now: Optional[datetime] = None,
) -> str:
    lines = [f"Topic: {topic_description}", "", "Candidates:", ""]
    for idx, c in enumerate(candidates, start=1):
        lines.append(f"{idx}. {c.title}")
        lines.append(f"   URL: {c.url}")
        lines.append(f"   Sources: {c.source_count} ({', '.join(c.source_names)})")
        lines.append(f"   Published: {format_time_ago(c.published_at, now=now)}")
        lines.append("")
    return "\n".join(lines)


def restrict_to_candidates(
    results: Sequence[RankedResult], candidates: Sequence[DedupedCandidate]
) -> List[RankedResult]:
    """Keep results that point at a candidate, at most three, no repeats.

    A result matches by exact URL or by canonical URL; either way the
    candidate's own URL is emitted.
    """
    by_url: Dict[str, DedupedCandidate] = {}
    by_canonical: Dict[str, DedupedCandidate] = {}
    for c in candidates:
        by_url.setdefault(c.url, c)
        by_canonical.setdefault(canonicalize_url(c.url), c)

    kept: List[RankedResult] = []
    seen: set[str] = set()
    for r in results:
        cand = by_url.get(r.url) or by_canonical.get(canonicalize_url(r.url))
        if cand is None:
            logger.warning("Dropping ranked URL not among candidates: %s", r.url)
            continue
        if cand.url in seen:
            continue
        seen.add(cand.url)
        kept.append(RankedResult(url=cand.url, title=r.title or cand.title, reason=r.reason))
        if len(kept) >= MAX_RESULTS:
            break
    return kept


def rank_candidates(
    candidates: Sequence[DedupedCandidate],
    topic_description: str,
    model: str,
    *,
    client: Optional[LLMClient] = None,
    now: Optional[datetime] = None,
) -> RankerResult:
    """Select up to three candidates, via the LLM when there is a choice to make.

    Provider failures propagate. A reply that is not the expected JSON falls
    back to picking candidate URLs out of the raw text, and raises only when
    that finds nothing either. Well-formed JSON naming no known candidate
    yields an empty result.
    """
    if len(candidates) <= MAX_RESULTS:
        return RankerResult(
            results=[
                RankedResult(url=c.url, title=c.title, reason=AUTO_SELECT_REASON)
                for c in candidates
            ]
        )
    if client is None:
        raise ValueError("An LLM client is required to rank more than three candidates")

    user_message = build_user_message(candidates, topic_description, now=now)
    reply = chat_with_retry(client, model, SYSTEM_PROMPT, user_message)

    used_fallback = False
    parsed = True
    try:
        results = restrict_to_candidates(parse_ranking_response(reply.text), candidates)
    except ValueError as exc:
        logger.warning("Structured ranking parse failed (%s); extracting URLs from text", exc)
        results = []
        parsed = False
    if not results:
        known = {c.url: c.title for c in candidates}
        results = restrict_to_candidates(
            extract_ranked_urls(reply.text, known, limit=MAX_RESULTS), candidates
        )
        used_fallback = bool(results)
    if not results and not parsed:
        raise ValueError("LLM ranking reply contained no candidate URLs")
    if not results:
        logger.warning("LLM ranking named no known candidates")

    return RankerResult(
        results=results,
        input_tokens=reply.input_tokens,
        output_tokens=reply.output_tokens,
        latency_ms=reply.latency_ms,
        used_llm=True,
        used_fallback=used_fallback,
    )
