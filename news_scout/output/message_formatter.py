from __future__ import annotations

import html
from typing import Sequence

from ..models import RankedResult


def escape_html(text: str) -> str:
    return html.escape(text or "", quote=True)


def format_results_message(topic_name: str, results: Sequence[RankedResult]) -> str:
    """Render ranked results as a Telegram HTML message."""
    lines = [f"<b>News Scout: {escape_html(topic_name)}</b>", ""]
    for idx, r in enumerate(results, start=1):
        lines.append(f'{idx}. <a href="{escape_html(r.url)}">{escape_html(r.title)}</a>')
        if r.reason:
            lines.append(f"<i>{escape_html(r.reason)}</i>")
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"
