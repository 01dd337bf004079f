"""
Adapters: wall clock and pseudo-random source.

Production implementations of the Clock and RandomSource ports.
Tests substitute fixed clocks and scripted draws.
"""

import random
from datetime import datetime, timezone
from typing import Optional

from bazaarlens.domain.market.ports import Clock, RandomSource


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class PythonRandomSource(RandomSource):
    """Uniform draws from ``random.Random``.

    Args:
        seed: Optional seed for reproducible simulation runs.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def random(self) -> float:
        return self._rng.random()
