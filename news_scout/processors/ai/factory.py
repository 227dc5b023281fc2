from __future__ import annotations

import os
from typing import Optional

from .base import LLMClient


def create_llm_client(*, backend: Optional[str] = None) -> LLMClient:
    """Create a chat client based on SCOUT_LLM_BACKEND env or explicit value.

    Supported values: "openai" (default), "gemini" or "ollama".
    """
    selected = (backend or os.environ.get("SCOUT_LLM_BACKEND", "openai")).lower()

    if selected == "openai":
        from .openai import OpenAIClient  # lazy import

        return OpenAIClient()
    if selected == "gemini":
        from .gemini import GeminiClient  # lazy import

        return GeminiClient()
    if selected == "ollama":
        from .ollama import OllamaClient  # lazy import

        return OllamaClient()

    raise ValueError(
        f"Unsupported SCOUT_LLM_BACKEND '{selected}'. Use 'openai', 'gemini' or 'ollama'."
    )
