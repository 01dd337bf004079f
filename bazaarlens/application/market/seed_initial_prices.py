"""
Use case: Give every unpriced instrument a first tick.

Runs at service start-up so the dashboard has prices before the first
trading-hours cycle. Instruments that already have history are untouched.
"""

import logging

from bazaarlens.application.market.dtos import SimulationCycleResult
from bazaarlens.application.market.simulate_prices import build_tick
from bazaarlens.domain.market.ports import (
    Clock,
    InstrumentRepository,
    PriceTickRepository,
)
from bazaarlens.domain.market.price_walk import PriceWalk

logger = logging.getLogger(__name__)


class SeedInitialPricesUseCase:
    """Seeds cold-start ticks for instruments without any price history."""

    def __init__(
        self,
        instrument_repo: InstrumentRepository,
        tick_repo: PriceTickRepository,
        price_walk: PriceWalk,
        clock: Clock,
    ) -> None:
        self._instrument_repo = instrument_repo
        self._tick_repo = tick_repo
        self._walk = price_walk
        self._clock = clock

    def execute(self) -> SimulationCycleResult:
        seeded = 0
        failed: list[str] = []

        for instrument in self._instrument_repo.list_all():
            try:
                if self._tick_repo.get_latest(instrument.id) is not None:
                    continue
                values = self._walk.seed(instrument.symbol)
                self._tick_repo.add(build_tick(instrument.id, values, self._clock.now()))
            except Exception:
                logger.exception("Initial price seeding failed for %s", instrument.symbol)
                failed.append(instrument.symbol)
                continue
            seeded += 1

        if seeded:
            logger.info("Seeded initial prices for %d instruments.", seeded)
        return SimulationCycleResult(
            ticks_inserted=seeded, seeded=seeded, failed_symbols=failed
        )
