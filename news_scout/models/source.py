from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

SourceType = Literal["rss", "topic_search", "html", "social"]


@dataclass(slots=True)
class HtmlSelectors:
    """CSS selectors used to scrape a list page."""

    list: str
    title: str
    link: str
    date: Optional[str] = None


@dataclass(slots=True)
class SourceConfig:
    """Configuration for a content source in a workspace."""

    name: str
    type: SourceType
    url: Optional[str] = None
    selectors: Optional[HtmlSelectors] = None
    active: bool = True
