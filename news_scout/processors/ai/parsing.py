from __future__ import annotations

import json
import re
from typing import Dict, List

from ...models import RankedResult

FALLBACK_REASON = "selected by LLM (parsed from text)"

_url_re = re.compile(r"https?://[^\s\"'<>\])},]+")
_trailing_punct_re = re.compile(r"[.,;:!?)\]}]+$")


def parse_ranking_response(raw: str) -> List[RankedResult]:
    """Parse and validate the ranker's JSON reply.

    Expected object: ``{"results": [{"url": str, "title": str, "reason": str}, ...]}``.
    Text around the object (prose, code fences) is ignored. Raises ``ValueError``
    on anything else.
    """
    if not raw or not raw.strip():
        raise ValueError("Empty AI response")

    match = re.search(r"\{[\s\S]*\}", raw)
    if not match:
        raise ValueError("No JSON object found in AI response")

    try:
        obj = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in AI response: {exc}") from exc
    if not isinstance(obj, dict):
        raise ValueError("AI response is not a JSON object")

    items = obj.get("results")
    if not isinstance(items, list) or not items:
        raise ValueError("No results array in AI response")

    results: List[RankedResult] = []
    for item in items:
        if not isinstance(item, dict):
            raise ValueError(f"Result entry is not an object: {item!r}")
        url = item.get("url")
        if not isinstance(url, str) or not url.strip():
            raise ValueError(f"Result entry without a url: {item!r}")
        title = item.get("title")
        reason = item.get("reason")
        results.append(
            RankedResult(
                url=url.strip(),
                title=title.strip() if isinstance(title, str) else "",
                reason=reason.strip() if isinstance(reason, str) else "",
            )
        )
    return results


def extract_ranked_urls(raw: str, known: Dict[str, str], *, limit: int = 3) -> List[RankedResult]:
    """Fallback: pick known candidate URLs out of free text, first seen first.

    ``known`` maps candidate URL to its title.
    """
    results: List[RankedResult] = []
    seen: set[str] = set()
    for match in _url_re.findall(raw or ""):
        url = _trailing_punct_re.sub("", match)
        if url in seen:
            continue
        seen.add(url)
        if url in known:
            results.append(RankedResult(url=url, title=known[url], reason=FALLBACK_REASON))
            if len(results) >= limit:
                break
    return results
