from __future__ import annotations

import logging
from typing import Iterable, List

from ..models import LogPhase, RunLogEntry, utc_now
from ..utils.logging import get_logger

logger = get_logger("scout.run")


class RunLog:
    """Ordered, append-only log of one run, mirrored to the application log."""

    def __init__(self, run_id: str = "", entries: Iterable[RunLogEntry] = ()) -> None:
        self.run_id = run_id
        self.entries: List[RunLogEntry] = list(entries)

    def add(self, phase: LogPhase, message: str, *, level: int = logging.INFO) -> RunLogEntry:
        entry = RunLogEntry(timestamp=utc_now().isoformat(), phase=phase, message=message)
        self.entries.append(entry)
        logger.log(level, "run=%s [%s] %s", self.run_id or "-", phase, message)
        return entry

    def messages(self, phase: LogPhase | None = None) -> List[str]:
        return [e.message for e in self.entries if phase is None or e.phase == phase]

    def __len__(self) -> int:
        return len(self.entries)
