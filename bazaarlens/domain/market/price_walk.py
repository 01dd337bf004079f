"""
Domain service: Synthetic price random walk.

Pure business logic for fabricating the next price tick of an instrument.
No framework imports. No IO. Randomness comes from the RandomSource port.

Each step:
    random_change = (r - 0.5) * volatility
    new_price     = max(last * (1 + drift + random_change), min_price)
    change_pct    = (new_price - last) / last * 100

Instruments without history are seeded around a static base price instead.
"""

import math
from dataclasses import dataclass

from bazaarlens.domain.market.ports import RandomSource

DEFAULT_VOLATILITY = 0.02
DEFAULT_DRIFT = 0.0001
MIN_PRICE = 1.0
BASE_VOLUME = 1_000_000

# Known symbols start near their real-world quote.
BASE_PRICES: dict[str, float] = {
    "RELIANCE": 2845.0,
    "TCS": 3567.0,
    "INFY": 1789.0,
    "HDFC": 1645.0,
    "ICICIBANK": 1200.0,
    "ITC": 450.0,
    "SBIN": 650.0,
    "BHARTIARTL": 1200.0,
    "AXISBANK": 1100.0,
    "ASIANPAINT": 3200.0,
}


@dataclass(frozen=True)
class TickValues:
    """Numeric content of a generated tick, without identity or timestamp."""

    price: float
    change_amount: float
    change_percent: float
    volume: int
    high: float
    low: float
    open_price: float
    close_price: float


class PriceWalk:
    """Domain service producing synthetic ticks.

    Args:
        random_source: Uniform [0, 1) draws.
        volatility: Width of the uniform daily swing (0.02 = +-1%).
        drift: Constant upward bias added every step.
        min_price: Floor applied to every new price.
        base_volume: Volume of an unchanged price before jitter.
    """

    def __init__(
        self,
        random_source: RandomSource,
        volatility: float = DEFAULT_VOLATILITY,
        drift: float = DEFAULT_DRIFT,
        min_price: float = MIN_PRICE,
        base_volume: int = BASE_VOLUME,
    ) -> None:
        self._random = random_source
        self._volatility = volatility
        self._drift = drift
        self._min_price = min_price
        self._base_volume = base_volume

    def base_price(self, symbol: str) -> float:
        """Return the seed price for a symbol, random in [1000, 3000) if unknown."""
        known = BASE_PRICES.get(symbol.upper())
        if known is not None:
            return known
        return 1000.0 + self._random.random() * 2000.0

    def step(self, last_price: float) -> TickValues:
        """Advance ``last_price`` by one bounded random step.

        Draws two values: one for the price move, one for volume jitter.
        """
        random_change = (self._random.random() - 0.5) * self._volatility
        new_price = max(last_price * (1 + self._drift + random_change), self._min_price)

        change_amount = new_price - last_price
        change_percent = change_amount / last_price * 100

        volume_multiplier = 1 + abs(change_percent) / 10
        jitter = 0.8 + self._random.random() * 0.4
        volume = math.floor(self._base_volume * volume_multiplier * jitter)

        return TickValues(
            price=new_price,
            change_amount=change_amount,
            change_percent=change_percent,
            volume=volume,
            high=max(new_price, last_price),
            low=min(new_price, last_price),
            open_price=last_price,
            close_price=new_price,
        )

    def seed(self, symbol: str) -> TickValues:
        """Fabricate a first tick: +-5% around the base price, +-2.5% change."""
        base = self.base_price(symbol)
        price = max(base + (self._random.random() - 0.5) * base * 0.1, self._min_price)
        change_amount = (self._random.random() - 0.5) * price * 0.05
        change_percent = change_amount / price * 100
        volume = math.floor(self._random.random() * 10_000_000) + 100_000
        high = price + self._random.random() * price * 0.02
        low = price - self._random.random() * price * 0.02

        return TickValues(
            price=price,
            change_amount=change_amount,
            change_percent=change_percent,
            volume=volume,
            high=high,
            low=low,
            open_price=price - change_amount,
            close_price=price,
        )
