"""
Domain service: Market index computation.

Two kinds of index:
    - composite: unweighted mean of the latest instrument prices, scaled.
    - synthetic: a random walk anchored to a fixed base value.

The composite deliberately keeps its simplifications: it averages whatever
latest ticks it is given (the caller caps them, in no defined order) and
produces nothing when there are none.
"""

from dataclasses import dataclass
from typing import Optional

from bazaarlens.domain.market.entities import PriceTick

COMPOSITE_SCALE = 100.0
COMPOSITE_INSTRUMENT_CAP = 50


@dataclass(frozen=True)
class SyntheticIndex:
    """An index simulated from a fixed anchor rather than from instruments."""

    symbol: str
    base_value: float
    volatility: float


DEFAULT_SYNTHETIC_INDICES: tuple[SyntheticIndex, ...] = (
    SyntheticIndex(symbol="SENSEX", base_value=72836.0, volatility=0.015),
    SyntheticIndex(symbol="BANKNIFTY", base_value=48789.0, volatility=0.02),
    SyntheticIndex(symbol="USDINR", base_value=83.42, volatility=0.005),
)


@dataclass(frozen=True)
class IndexValues:
    value: float
    change_amount: float
    change_percent: float


def composite_index(
    ticks: list[PriceTick], scale: float = COMPOSITE_SCALE
) -> Optional[IndexValues]:
    """Average price and percent change over ``ticks``, scaled.

    Returns:
        None when ``ticks`` is empty, so the caller skips the write.
    """
    if not ticks:
        return None

    avg_price = sum(t.price for t in ticks) / len(ticks)
    avg_change = sum((t.change_percent or 0.0) for t in ticks) / len(ticks)
    change_amount = avg_price * (avg_change / 100)

    return IndexValues(
        value=avg_price * scale,
        change_amount=change_amount * scale,
        change_percent=avg_change,
    )


def walk_index(index: SyntheticIndex, r: float) -> IndexValues:
    """One step of a synthetic index for the uniform draw ``r``.

    The walk is re-anchored to ``base_value`` every time, so values stay
    within +-volatility/2 of the base.
    """
    change = (r - 0.5) * index.volatility
    return IndexValues(
        value=index.base_value * (1 + change),
        change_amount=index.base_value * change,
        change_percent=change * 100,
    )
