from __future__ import annotations

import os
import time

import requests

from .base import ChatResult, LLMClient


class OpenAIClient(LLMClient):
    """HTTP client for OpenAI-compatible chat completions.

    Environment:
      - OPENAI_API_KEY (required)
      - OPENAI_BASE_URL (default: https://api.openai.com/v1)
    """

    provider = "openai"

    def __init__(
        self, *, api_key: str | None = None, base_url: str | None = None, timeout: int = 60
    ) -> None:
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not self.api_key:
            raise RuntimeError("OPENAI_API_KEY is required for OpenAI backend")
        self.base_url = (
            base_url or os.environ.get("OPENAI_BASE_URL", "https://api.openai.com/v1")
        ).rstrip("/")
        self.timeout = timeout

    def chat(self, model: str, system_prompt: str, user_message: str) -> ChatResult:
        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
            "response_format": {"type": "json_object"},
        }
        start = time.perf_counter()
        resp = requests.post(
            f"{self.base_url}/chat/completions",
            headers={"Authorization": f"Bearer {self.api_key}"},
            json=payload,
            timeout=self.timeout,
        )
        resp.raise_for_status()
        data = resp.json()
        choices = data.get("choices") or []
        text = ((choices[0].get("message") or {}).get("content") or "") if choices else ""
        usage = data.get("usage") or {}
        return ChatResult(
            text=text.strip(),
            input_tokens=int(usage.get("prompt_tokens") or 0),
            output_tokens=int(usage.get("completion_tokens") or 0),
            latency_ms=int((time.perf_counter() - start) * 1000),
        )
