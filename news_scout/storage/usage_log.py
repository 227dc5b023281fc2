from __future__ import annotations

import json
import threading
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import List

from ..models import utc_now


@dataclass(slots=True)
class UsageRecord:
    provider: str
    model: str
    input_tokens: int
    output_tokens: int
    latency_ms: int
    workspace_id: str
    run_id: str
    cost_cents: int = 0
    timestamp: str = field(default_factory=lambda: utc_now().isoformat())


class UsageLog:
    """Append-only JSON-lines sink for LLM usage records."""

    def __init__(self, path: Path | str = "./.cache/usage.jsonl") -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def record(self, entry: UsageRecord) -> None:
        line = json.dumps(asdict(entry), ensure_ascii=False)
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")

    def read_all(self) -> List[UsageRecord]:
        if not self.path.exists():
            return []
        with self.path.open("r", encoding="utf-8") as f:
            return [UsageRecord(**json.loads(line)) for line in f if line.strip()]
