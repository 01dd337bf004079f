"""
Use case: Advance every instrument by one synthetic price tick.

Input:  optional symbols to restrict the cycle to (default: whole catalog)
Output: SimulationCycleResult
Side effects: Appends one PriceTick per instrument.
Failure cases: An unknown requested symbol raises InstrumentNotFoundError
               before any tick is written. Errors on one instrument
               are logged and skipped; listing the catalog itself
               failing aborts the cycle.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional, Sequence

from bazaarlens.application.market.dtos import SimulationCycleResult
from bazaarlens.domain.market.entities import Instrument, PriceTick
from bazaarlens.domain.market.errors import InstrumentNotFoundError
from bazaarlens.domain.market.ports import (
    Clock,
    InstrumentRepository,
    PriceTickRepository,
)
from bazaarlens.domain.market.price_walk import PriceWalk, TickValues

logger = logging.getLogger(__name__)


def next_timestamp(now: datetime, previous: Optional[PriceTick]) -> datetime:
    """Return ``now``, nudged past the previous tick if the clock has not moved on.

    Keeps the latest tick of an instrument strictly newer than the one before.
    """
    if previous is not None and now <= previous.recorded_at:
        return previous.recorded_at + timedelta(microseconds=1)
    return now


def build_tick(
    instrument_id: int, values: TickValues, recorded_at: datetime
) -> PriceTick:
    return PriceTick(
        instrument_id=instrument_id,
        price=values.price,
        change_amount=values.change_amount,
        change_percent=values.change_percent,
        volume=values.volume,
        high=values.high,
        low=values.low,
        open_price=values.open_price,
        close_price=values.close_price,
        recorded_at=recorded_at,
    )


class SimulatePricesUseCase:
    """Orchestrates one price simulation cycle.

    For each instrument, walks from its latest stored price, or seeds a
    first tick when it has none (or a stored price that is not positive).
    """

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

    def execute(self, symbols: Optional[Sequence[str]] = None) -> SimulationCycleResult:
        """Run the cycle.

        Args:
            symbols: Restrict the cycle to these instruments. Defaults to
                the whole catalog.

        Returns:
            Counts of inserted and seeded ticks and the symbols that failed.

        Raises:
            InstrumentNotFoundError: If a requested symbol is not in the catalog.
        """
        if symbols:
            instruments = [self._resolve(symbol) for symbol in symbols]
        else:
            instruments = self._instrument_repo.list_all()
        inserted = 0
        seeded = 0
        failed: list[str] = []

        for instrument in instruments:
            try:
                was_seeded = self._advance(instrument)
            except Exception:
                logger.exception("Price simulation failed for %s", instrument.symbol)
                failed.append(instrument.symbol)
                continue
            inserted += 1
            seeded += int(was_seeded)

        logger.info(
            "Price cycle: %d ticks inserted (%d seeded), %d failed.",
            inserted,
            seeded,
            len(failed),
        )
        return SimulationCycleResult(
            ticks_inserted=inserted, seeded=seeded, failed_symbols=failed
        )

    def _resolve(self, symbol: str) -> Instrument:
        instrument = self._instrument_repo.get_by_symbol(symbol.upper())
        if instrument is None:
            raise InstrumentNotFoundError(symbol)
        return instrument

    def _advance(self, instrument: Instrument) -> bool:
        previous = self._tick_repo.get_latest(instrument.id)

        if previous is None or not previous.price or previous.price <= 0:
            values = self._walk.seed(instrument.symbol)
            was_seeded = True
        else:
            values = self._walk.step(previous.price)
            was_seeded = False

        recorded_at = next_timestamp(self._clock.now(), previous)
        self._tick_repo.add(build_tick(instrument.id, values, recorded_at))
        return was_seeded
