"""
Domain service: Market snapshot summary.

Summarises the latest tick of every instrument into breadth figures.
"""

from dataclasses import dataclass
from typing import Optional

from bazaarlens.domain.market.entities import PriceTick


@dataclass(frozen=True)
class MarketSummary:
    """Breadth of the current market snapshot.

    Attributes:
        total_instruments: Instruments with at least one tick.
        avg_change_percent: Mean percent change, None for an empty snapshot.
        gainers: Instruments whose latest change is positive.
        losers: Instruments whose latest change is negative.
        total_volume: Sum of latest volumes.
    """

    total_instruments: int
    avg_change_percent: Optional[float]
    gainers: int
    losers: int
    total_volume: int


def summarize(latest_ticks: list[PriceTick]) -> MarketSummary:
    """Build a MarketSummary from one latest tick per instrument."""
    if not latest_ticks:
        return MarketSummary(
            total_instruments=0,
            avg_change_percent=None,
            gainers=0,
            losers=0,
            total_volume=0,
        )

    changes = [t.change_percent or 0.0 for t in latest_ticks]
    return MarketSummary(
        total_instruments=len(latest_ticks),
        avg_change_percent=sum(changes) / len(changes),
        gainers=sum(1 for c in changes if c > 0),
        losers=sum(1 for c in changes if c < 0),
        total_volume=sum(t.volume or 0 for t in latest_ticks),
    )
