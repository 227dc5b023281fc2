from __future__ import annotations

from typing import Dict, Mapping, Optional, Tuple

# USD per 1M tokens: (input, output)
DEFAULT_PRICING: Dict[str, Tuple[float, float]] = {
    "gpt-4o": (2.5, 10.0),
    "gpt-4o-mini": (0.15, 0.6),
    "gpt-5-mini": (0.25, 2.0),
    "gpt-5.2": (1.75, 14.0),
    "gemini-2.0-flash": (0.1, 0.4),
    "gemini-2.5-flash": (0.3, 2.5),
    "claude-sonnet-4-5-20250929": (3.0, 15.0),
}


def estimate_cost_cents(
    model: str,
    input_tokens: int,
    output_tokens: int,
    *,
    pricing: Optional[Mapping[str, Tuple[float, float]]] = None,
) -> int:
    """Estimated cost in cents, rounded to an integer. Unknown models cost 0."""
    table = pricing if pricing is not None else DEFAULT_PRICING
    rates = table.get(model)
    if rates is None:
        return 0
    input_rate, output_rate = rates
    dollars = (max(0, input_tokens) * input_rate + max(0, output_tokens) * output_rate) / 1_000_000
    return int(round(dollars * 100))
