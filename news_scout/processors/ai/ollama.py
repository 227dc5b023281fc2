from __future__ import annotations

import os
import time

import requests

from .base import ChatResult, LLMClient


class OllamaClient(LLMClient):
    """HTTP client for Ollama's chat API.

    Environment:
      - OLLAMA_HOST (default: http://localhost:11434)
    """

    provider = "ollama"

    def __init__(self, *, host: str | None = None, timeout: int = 120) -> None:
        self.host = (host or os.environ.get("OLLAMA_HOST", "http://localhost:11434")).rstrip("/")
        self.timeout = timeout

    def chat(self, model: str, system_prompt: str, user_message: str) -> ChatResult:
        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
            "stream": False,
            "options": {"temperature": 0.2},
        }
        start = time.perf_counter()
        resp = requests.post(f"{self.host}/api/chat", json=payload, timeout=self.timeout)
        resp.raise_for_status()
        data = resp.json()
        return ChatResult(
            text=(data.get("message") or {}).get("content", "").strip(),
            input_tokens=int(data.get("prompt_eval_count") or 0),
            output_tokens=int(data.get("eval_count") or 0),
            latency_ms=int((time.perf_counter() - start) * 1000),
        )
