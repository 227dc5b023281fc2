from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(slots=True)
class ChatResult:
    text: str
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: int = 0


class LLMClient(ABC):
    """Abstract chat client: one system instruction plus one user message."""

    provider: str = "unknown"

    @abstractmethod
    def chat(self, model: str, system_prompt: str, user_message: str) -> ChatResult:
        """Return the model's plain-text reply with token usage and latency."""
