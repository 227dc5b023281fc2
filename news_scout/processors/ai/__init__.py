"""LLM chat backends (OpenAI, Gemini, Ollama) and response parsing."""

from .base import ChatResult, LLMClient
from .factory import create_llm_client

__all__ = ["ChatResult", "LLMClient", "create_llm_client"]
