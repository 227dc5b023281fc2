from __future__ import annotations

import copy
from pathlib import Path
from typing import Dict, Iterable, List

from ..models import SourceConfig, Topic, Workspace
from ..utils.config_loader import load_workspaces_config


class WorkspaceStore:
    """Read-only view of workspaces, their topics, sources and recipients."""

    def __init__(self, workspaces: Iterable[Workspace]) -> None:
        self._workspaces: Dict[str, Workspace] = {w.id: w for w in workspaces}

    @classmethod
    def from_yaml(cls, path: Path | str) -> "WorkspaceStore":
        return cls(load_workspaces_config(path))

    def workspace(self, workspace_id: str) -> Workspace:
        try:
            return self._workspaces[workspace_id]
        except KeyError:
            raise LookupError(f"Workspace {workspace_id} not found") from None

    def get_topic(self, workspace_id: str, topic_id: str) -> Topic:
        for topic in self.workspace(workspace_id).topics:
            if topic.id == topic_id:
                return copy.deepcopy(topic)
        raise LookupError(f"Topic {topic_id} not found in workspace {workspace_id}")

    def active_sources(self, workspace_id: str) -> List[SourceConfig]:
        """Snapshot of the workspace's active sources at call time."""
        return [copy.deepcopy(s) for s in self.workspace(workspace_id).sources if s.active]

    def recipients(self, workspace_id: str) -> List[str]:
        return list(dict.fromkeys(self.workspace(workspace_id).recipients))
