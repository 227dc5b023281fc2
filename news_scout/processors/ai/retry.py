from __future__ import annotations

import os
import time
from typing import Callable, TypeVar

import requests

from .base import ChatResult, LLMClient
from ...utils.logging import get_logger

T = TypeVar("T")
logger = get_logger("scout.ai.retry")

# Client errors other than rate limiting will not improve on retry
_RETRYABLE_STATUS = {408, 429, 500, 502, 503, 504}


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, requests.HTTPError):
        status = getattr(exc.response, "status_code", None)
        return status is None or status in _RETRYABLE_STATUS
    return isinstance(exc, requests.RequestException)


def with_retries(fn: Callable[[], T], *, retries: int = 2, backoff: float = 1.5) -> T:
    # Environment overrides: AI_RETRIES, AI_BACKOFF
    env_retries = os.getenv("AI_RETRIES")
    if env_retries is not None and env_retries.strip().isdigit():
        retries = int(env_retries)
    env_backoff = os.getenv("AI_BACKOFF")
    if env_backoff:
        try:
            backoff = float(env_backoff)
        except ValueError:
            logger.warning("Ignoring invalid AI_BACKOFF=%r", env_backoff)

    for attempt in range(retries + 1):
        try:
            return fn()
        except Exception as exc:
            if attempt >= retries or not _is_retryable(exc):
                raise
            sleep_s = backoff ** attempt
            logger.warning(
                "LLM call failed (attempt %s/%s): %s; retrying in %.1fs",
                attempt + 1,
                retries + 1,
                exc,
                sleep_s,
            )
            time.sleep(sleep_s)
    raise AssertionError("unreachable")


def chat_with_retry(client: LLMClient, model: str, system_prompt: str, user_message: str) -> ChatResult:
    return with_retries(lambda: client.chat(model, system_prompt, user_message))
