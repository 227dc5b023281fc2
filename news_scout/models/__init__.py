"""Typed models used across the application."""

from .source import HtmlSelectors, SourceConfig, SourceType
from .article import CandidateArticle, DedupedCandidate, RankedResult
from .run import LogPhase, Run, RunLogEntry, RunStatus, Topic, Workspace, utc_now

__all__ = [
    "HtmlSelectors",
    "SourceConfig",
    "SourceType",
    "CandidateArticle",
    "DedupedCandidate",
    "RankedResult",
    "LogPhase",
    "Run",
    "RunLogEntry",
    "RunStatus",
    "Topic",
    "Workspace",
    "utc_now",
]
