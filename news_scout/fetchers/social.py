from __future__ import annotations

from typing import Optional

from ..models import SourceConfig, SourceType
from .base import AdapterResult, SourceAdapter


class SocialAdapter(SourceAdapter):
    """Placeholder for a social-platform source.

    The credential is passed in explicitly; without one the source is skipped
    with a descriptive error. No platform integration exists yet, so a
    configured credential still yields no articles.
    """

    source_type: SourceType = "social"

    def __init__(self, *, credential: Optional[str] = None) -> None:
        self.credential = credential

    def fetch(self, source: SourceConfig, topic_description: str) -> AdapterResult:
        self._check_type(source)
        if not self.credential:
            return AdapterResult(
                errors=[f"social adapter: no credential configured, skipping {source.name}"]
            )
        return AdapterResult(errors=[f"social adapter: not implemented for {source.name}"])
