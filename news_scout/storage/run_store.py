from __future__ import annotations

import json
import os
import tempfile
import threading
import uuid
from pathlib import Path
from typing import Dict, Optional

from ..models import Run
from ..utils.logging import get_logger

logger = get_logger("scout.storage.runs")


class JsonRunStore:
    """Runs persisted in a single JSON file keyed by run id.

    Every ``save`` rewrites the file through a temporary file and an atomic
    rename, so a crash mid-write never leaves a truncated store behind.
    """

    def __init__(self, path: Path | str = "./.cache/runs.json") -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, dict]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        if not isinstance(data, dict):
            raise ValueError(f"Run store {self.path} is not a JSON object")
        return data

    def _write(self, data: Dict[str, dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".runs-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def create(self, workspace_id: str, topic_id: str) -> Run:
        run = Run(id=uuid.uuid4().hex, workspace_id=workspace_id, topic_id=topic_id)
        self.save(run)
        logger.info("Created run %s for topic %s", run.id, topic_id)
        return run

    def get(self, run_id: str) -> Optional[Run]:
        with self._lock:
            raw = self._load().get(run_id)
        return Run.from_dict(raw) if raw else None

    def save(self, run: Run) -> None:
        with self._lock:
            data = self._load()
            data[run.id] = run.to_dict()
            self._write(data)

