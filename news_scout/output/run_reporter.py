from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from ..models import Run


@dataclass(slots=True)
class RunReport:
    run_id: str
    status: str
    candidates: int
    selected: List[str] = field(default_factory=list)
    cost_cents: int = 0
    source_errors: int = 0
    error_message: str | None = None

    @classmethod
    def from_run(cls, run: Run) -> "RunReport":
        return cls(
            run_id=run.id,
            status=run.status,
            candidates=run.candidate_count,
            selected=[f"{r.title} <{r.url}>" for r in run.result_meta],
            cost_cents=run.cost_cents,
            # per-source fetch lines are either "[name] N articles" or an error
            source_errors=sum(
                1
                for e in run.logs
                if e.phase == "fetch" and e.message.startswith("[") and not e.message.endswith(" articles")
            ),
            error_message=run.error_message,
        )

    def to_text(self) -> str:
        lines = [
            f"Run {self.run_id}: {self.status}",
            f"- Candidates considered: {self.candidates}",
            f"- Source errors: {self.source_errors}",
            f"- Cost: {self.cost_cents}¢",
        ]
        if self.error_message:
            lines.append(f"- Error: {self.error_message}")
        for idx, item in enumerate(self.selected, start=1):
            lines.append(f"  {idx}. {item}")
        return "\n".join(lines) + "\n"
