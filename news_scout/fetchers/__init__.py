"""Source adapters: RSS/Atom, topic search, HTML list pages and a social stub."""

from .base import AdapterResult, SourceAdapter
from .factory import create_adapter, create_adapters
from .html import HTMLAdapter
from .rss import RSSAdapter
from .social import SocialAdapter
from .topic_search import TopicSearchAdapter

__all__ = [
    "AdapterResult",
    "SourceAdapter",
    "create_adapter",
    "create_adapters",
    "HTMLAdapter",
    "RSSAdapter",
    "SocialAdapter",
    "TopicSearchAdapter",
]
