"""
Domain service: Rule-based recommendation policy.

Classifies an instrument's latest percent change into BUY / SELL / HOLD
with a target price, confidence, timeframe and rationale.

    change > 15          SELL  75  x0.90  1M
    5 < change <= 15     HOLD  65  x1.05  3M
    change < -5          BUY   70  x1.15  6M
    -5 <= change <= 5    random draw r:
        r > 0.6          BUY   60  x1.10  3M
        0.3 < r <= 0.6   HOLD  55  x1.02  1M
        r <= 0.3         SELL  50  x0.95  1M

The thresholds are placeholder policy, not a tuned model.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from bazaarlens.domain.market.entities import Action
from bazaarlens.domain.market.ports import RandomSource

DEFAULT_PRICE = 1000.0
DEFAULT_CHANGE_PERCENT = 0.0


@dataclass(frozen=True)
class RecommendationDecision:
    """Outcome of the policy for one instrument."""

    action: Action
    confidence: int
    target_price: float
    timeframe: str
    rationale: str


def round_price(value: float) -> float:
    """Round half-up to two decimals."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class RecommendationPolicy:
    """Domain service mapping price momentum to a recommendation.

    The random source is consulted only for moves within +-5%.
    """

    def __init__(self, random_source: RandomSource) -> None:
        self._random = random_source

    def decide(
        self, price: Optional[float], change_percent: Optional[float]
    ) -> RecommendationDecision:
        """Return the recommendation for the given latest price and change.

        Args:
            price: Latest price. None or non-positive falls back to 1000.
            change_percent: Latest percent change. None falls back to 0.
        """
        change = change_percent if change_percent is not None else DEFAULT_CHANGE_PERCENT
        base = price if price is not None and price > 0 else DEFAULT_PRICE

        if change > 15:
            return self._build(
                Action.SELL, 75, base * 0.9, "1M",
                "Strong upward movement suggests potential overvaluation",
            )
        if change > 5:
            return self._build(
                Action.HOLD, 65, base * 1.05, "3M",
                "Good momentum, maintain position",
            )
        if change < -5:
            return self._build(
                Action.BUY, 70, base * 1.15, "6M",
                "Oversold condition, potential recovery",
            )

        r = self._random.random()
        if r > 0.6:
            return self._build(
                Action.BUY, 60, base * 1.1, "3M",
                "Stable fundamentals, growth potential",
            )
        if r > 0.3:
            return self._build(
                Action.HOLD, 55, base * 1.02, "1M",
                "Neutral outlook, monitor closely",
            )
        return self._build(
            Action.SELL, 50, base * 0.95, "1M",
            "Weak momentum, consider reducing position",
        )

    @staticmethod
    def _build(
        action: Action, confidence: int, target: float, timeframe: str, rationale: str
    ) -> RecommendationDecision:
        return RecommendationDecision(
            action=action,
            confidence=confidence,
            target_price=round_price(target),
            timeframe=timeframe,
            rationale=rationale,
        )
