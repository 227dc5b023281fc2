from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .source import SourceType


@dataclass(frozen=True, slots=True)
class CandidateArticle:
    title: str
    url: str
    published_at: Optional[datetime]
    source_name: str
    source_type: SourceType


@dataclass(slots=True)
class DedupedCandidate:
    """One story, possibly reported by several sources."""

    title: str
    url: str
    published_at: Optional[datetime]
    source_name: str
    source_names: List[str] = field(default_factory=list)

    @property
    def source_count(self) -> int:
        return len(self.source_names)


@dataclass(slots=True)
class RankedResult:
    url: str
    title: str
    reason: str

    def to_dict(self) -> dict:
        return {"url": self.url, "title": self.title, "reason": self.reason}
