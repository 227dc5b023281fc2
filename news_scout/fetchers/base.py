from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List

from ..models import CandidateArticle, SourceConfig, SourceType

DEFAULT_HEADERS: Dict[str, str] = {
    "User-Agent": "NewsScout/1.0 (+https://github.com/news-scout)",
    "Accept": "application/rss+xml, application/atom+xml, text/html;q=0.9, */*;q=0.8",
}


@dataclass(slots=True)
class AdapterResult:
    articles: List[CandidateArticle] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


class SourceAdapter(ABC):
    """Turns one source configuration into candidate articles.

    Network and parse failures are reported in ``AdapterResult.errors``;
    ``fetch`` only raises when it is handed a source it cannot serve.
    """

    source_type: SourceType

    @abstractmethod
    def fetch(self, source: SourceConfig, topic_description: str) -> AdapterResult:
        """Return articles and non-fatal errors for ``source``."""

    def _check_type(self, source: SourceConfig) -> None:
        if source.type != self.source_type:
            raise ValueError(
                f"{type(self).__name__} requires a source of type '{self.source_type}', "
                f"got '{source.type}'"
            )
