from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Literal, Optional

from .article import RankedResult
from .source import SourceConfig

RunStatus = Literal["running", "done", "error"]
LogPhase = Literal["init", "fetch", "cap", "filter", "dedup", "rank", "notify", "error"]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


@dataclass(slots=True)
class Topic:
    id: str
    name: str
    description: str
    model: str
    negative_filters: List[str] = field(default_factory=list)
    max_sources_per_run: int = 50
    active: bool = True


@dataclass(slots=True)
class Workspace:
    id: str
    topics: List[Topic] = field(default_factory=list)
    sources: List[SourceConfig] = field(default_factory=list)
    recipients: List[str] = field(default_factory=list)


@dataclass(slots=True)
class RunLogEntry:
    timestamp: str
    phase: LogPhase
    message: str

    def to_dict(self) -> dict:
        return {"timestamp": self.timestamp, "phase": self.phase, "message": self.message}


@dataclass(slots=True)
class Run:
    """One execution of the pipeline for one topic.

    A run starts as ``running`` and moves exactly once to ``done`` or ``error``.
    """

    id: str
    workspace_id: str
    topic_id: str
    status: RunStatus = "running"
    result_urls: List[str] = field(default_factory=list)
    result_meta: List[RankedResult] = field(default_factory=list)
    logs: List[RunLogEntry] = field(default_factory=list)
    cost_cents: int = 0
    candidate_count: int = 0
    started_at: datetime = field(default_factory=utc_now)
    finished_at: Optional[datetime] = None
    error_message: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "workspace_id": self.workspace_id,
            "topic_id": self.topic_id,
            "status": self.status,
            "result_urls": list(self.result_urls),
            "result_meta": [r.to_dict() for r in self.result_meta],
            "logs": [e.to_dict() for e in self.logs],
            "cost_cents": self.cost_cents,
            "candidate_count": self.candidate_count,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "error_message": self.error_message,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Run":
        return cls(
            id=data["id"],
            workspace_id=data["workspace_id"],
            topic_id=data["topic_id"],
            status=data.get("status", "running"),
            result_urls=list(data.get("result_urls") or []),
            result_meta=[RankedResult(**r) for r in data.get("result_meta") or []],
            logs=[RunLogEntry(**e) for e in data.get("logs") or []],
            cost_cents=int(data.get("cost_cents") or 0),
            candidate_count=int(data.get("candidate_count") or 0),
            started_at=_parse_ts(data.get("started_at")) or utc_now(),
            finished_at=_parse_ts(data.get("finished_at")),
            error_message=data.get("error_message"),
        )
