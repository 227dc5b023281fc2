from __future__ import annotations

import os
import time

import requests

from .base import ChatResult, LLMClient


class GeminiClient(LLMClient):
    """HTTP client for Gemini via the Google AI Studio API.

    Environment:
      - GOOGLE_API_KEY (required)
    """

    provider = "gemini"

    def __init__(self, *, api_key: str | None = None, timeout: int = 60) -> None:
        self.api_key = api_key or os.environ.get("GOOGLE_API_KEY")
        if not self.api_key:
            raise RuntimeError("GOOGLE_API_KEY is required for Gemini backend")
        self.timeout = timeout

    def chat(self, model: str, system_prompt: str, user_message: str) -> ChatResult:
        url = f"https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
        payload = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": user_message}]}],
            "generationConfig": {"temperature": 0.2, "responseMimeType": "application/json"},
        }
        start = time.perf_counter()
        resp = requests.post(
            url, params={"key": self.api_key}, json=payload, timeout=self.timeout
        )
        resp.raise_for_status()
        data = resp.json()

        text = ""
        candidates = data.get("candidates") or []
        if candidates:
            parts = candidates[0].get("content", {}).get("parts") or []
            text = "".join(p.get("text", "") for p in parts).strip()
        usage = data.get("usageMetadata") or {}
        return ChatResult(
            text=text,
            input_tokens=int(usage.get("promptTokenCount") or 0),
            output_tokens=int(usage.get("candidatesTokenCount") or 0),
            latency_ms=int((time.perf_counter() - start) * 1000),
        )
