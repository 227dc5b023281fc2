"""Persistence: workspace configuration, runs and LLM usage."""

from .run_store import JsonRunStore
from .usage_log import UsageLog, UsageRecord
from .workspace_store import WorkspaceStore

__all__ = ["JsonRunStore", "UsageLog", "UsageRecord", "WorkspaceStore"]
