"""Top-level package for News Scout.

Topic-driven news discovery: fetch candidates from configured sources, filter
stale and paywalled items, merge duplicate coverage, rank with an LLM, record
the run and notify subscribers.
"""

__all__ = []
