"""
Domain entities for the market bounded context.

Entities represent core business objects with identity and lifecycle.
They contain no framework imports and no IO operations.
Timestamps are timezone-aware UTC.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class Action(Enum):
    """Recommendation action."""

    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


@dataclass(frozen=True)
class Instrument:
    """A tradable security tracked by the simulator."""

    symbol: str
    name: str
    sector: Optional[str] = None
    industry: Optional[str] = None
    market_cap: Optional[float] = None
    pe_ratio: Optional[float] = None
    dividend_yield: Optional[float] = None
    id: Optional[int] = None


@dataclass(frozen=True)
class PriceTick:
    """One timestamped price observation for an instrument.

    Ticks are append-only. The latest tick of an instrument is the one
    with the greatest ``recorded_at``, ties broken by the greatest ``id``.
    """

    instrument_id: int
    price: float
    change_amount: float
    change_percent: float
    volume: int
    high: float
    low: float
    open_price: float
    close_price: float
    recorded_at: datetime
    id: Optional[int] = None
    symbol: Optional[str] = None


@dataclass(frozen=True)
class MarketIndex:
    """A composite market indicator. Updated in place, no history."""

    symbol: str
    name: str
    value: float
    change_amount: Optional[float]
    change_percent: Optional[float]
    updated_at: Optional[datetime]
    id: Optional[int] = None


@dataclass(frozen=True)
class IndexUpdate:
    """New values for an index row, written by symbol.

    ``name`` is only used when the row does not exist yet.
    """

    symbol: str
    value: float
    change_amount: float
    change_percent: float
    updated_at: datetime
    name: Optional[str] = None


@dataclass(frozen=True)
class Recommendation:
    """A generated buy/sell/hold signal for an instrument."""

    instrument_id: int
    action: Action
    target_price: float
    confidence: int
    timeframe: str
    rationale: str
    created_at: datetime
    id: Optional[int] = None


@dataclass(frozen=True)
class RecommendationCandidate:
    """An instrument lacking a fresh recommendation, with its latest price.

    ``price`` and ``change_percent`` are None when the instrument has no tick.
    """

    instrument_id: int
    symbol: str
    name: str
    price: Optional[float]
    change_percent: Optional[float]
