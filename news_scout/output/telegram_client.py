from __future__ import annotations

import os
from typing import Optional

import requests

from ..utils.logging import get_logger

logger = get_logger("scout.output.telegram")

API_BASE = "https://api.telegram.org"


class TelegramError(RuntimeError):
    """Raised when Telegram refuses or fails to deliver a message."""


class TelegramClient:
    """Minimal Bot API sender used for run notifications."""

    def __init__(
        self,
        *,
        token: Optional[str] = None,
        dry_run: bool = False,
        timeout: float = 10,
    ) -> None:
        self.token = token or os.environ.get("TELEGRAM_BOT_TOKEN")
        if not self.token and not dry_run:
            raise RuntimeError("TELEGRAM_BOT_TOKEN not set and dry_run=False")
        self.dry_run = dry_run
        self.timeout = timeout

    def _post(self, payload: dict) -> dict:
        resp = requests.post(
            f"{API_BASE}/bot{self.token}/sendMessage", json=payload, timeout=self.timeout
        )
        try:
            data = resp.json()
        except ValueError:
            resp.raise_for_status()
            raise TelegramError(f"Non-JSON response from Telegram (HTTP {resp.status_code})")
        return data

    def send(self, chat_id: str, text: str, parse_mode: Optional[str] = "HTML") -> Optional[int]:
        """Send ``text`` to ``chat_id`` and return the message id.

        When Telegram rejects the message (usually a markup error) it is sent
        once more as plain text.
        """
        if self.dry_run:
            logger.info("[DRY-RUN] Would send to %s (%s): %s", chat_id, parse_mode, text)
            return None

        payload = {"chat_id": chat_id, "text": text, "disable_web_page_preview": True}
        if parse_mode:
            payload["parse_mode"] = parse_mode
        try:
            data = self._post(payload)
        except requests.RequestException as exc:
            raise TelegramError(f"sendMessage to {chat_id} failed: {exc}") from exc

        if not data.get("ok"):
            description = data.get("description", "unknown error")
            if parse_mode:
                logger.warning(
                    "Telegram rejected %s message to %s (%s); retrying as plain text",
                    parse_mode,
                    chat_id,
                    description,
                )
                return self.send(chat_id, text, None)
            raise TelegramError(f"sendMessage to {chat_id} rejected: {description}")

        message_id = (data.get("result") or {}).get("message_id")
        logger.info("Sent Telegram message %s to %s", message_id, chat_id)
        return message_id
