"""
Purpose: Token math & cost estimation.
Central pricing logic so the controller and UI do not duplicate calculations.
"""

from __future__ import annotations

from typing import Optional

from ..models import Price, UsageSummary


PRICE_TABLE = {
    "gpt-5-mini": Price(0.25, 2.00),
    "gpt-4o-mini": Price(0.15, 0.60),
    "gpt-4o": Price(2.50, 10.00),
    "gpt-4.1-mini": Price(0.40, 1.60),
}


def estimate_cost(model: Optional[str], tokens_in: int, tokens_out: int) -> float:
    p = PRICE_TABLE.get(model or "", Price(0.0, 0.0))
    return (tokens_in / 1000000) * p.input_per_1M + (
        tokens_out / 1000000
    ) * p.output_per_1M


class UsageMeter:
    """Sums token usage across the collaborator calls of one invocation."""

    def __init__(self) -> None:
        self.tokens_in = 0
        self.tokens_out = 0
        self.model: Optional[str] = None

    def add(self, meta: Optional[dict], *, model: Optional[str] = None) -> None:
        meta = meta or {}
        self.tokens_in += int(meta.get("tokens_in", 0) or 0)
        self.tokens_out += int(meta.get("tokens_out", 0) or 0)
        self.model = model or meta.get("model") or self.model

    def summary(self) -> UsageSummary:
        return UsageSummary(
            model=self.model,
            tokens_in=self.tokens_in,
            tokens_out=self.tokens_out,
            estimated_cost_usd=estimate_cost(self.model, self.tokens_in, self.tokens_out),
        )
