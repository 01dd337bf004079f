"""
Use case: Recompute market index rows after a price cycle.

Input:  none (reads latest ticks)
Output: IndexAggregationResult
Side effects: Upserts one row per index; no history is kept.
Failure cases: Each index is written independently; a failed write is
               logged and the remaining indices are still updated.
"""

import logging
from typing import Callable, Iterable

from bazaarlens.application.market.dtos import IndexAggregationResult
from bazaarlens.domain.market.entities import IndexUpdate
from bazaarlens.domain.market.index_walk import (
    COMPOSITE_INSTRUMENT_CAP,
    COMPOSITE_SCALE,
    DEFAULT_SYNTHETIC_INDICES,
    IndexValues,
    SyntheticIndex,
    composite_index,
    walk_index,
)
from bazaarlens.domain.market.ports import (
    Clock,
    MarketIndexRepository,
    PriceTickRepository,
    RandomSource,
)

logger = logging.getLogger(__name__)


class AggregateIndicesUseCase:
    """Updates the composite benchmark and the synthetic indices.

    The composite averages the latest tick of at most ``instrument_cap``
    instruments, taken in whatever order the store returns them. With no
    priced instruments it is skipped for the cycle.
    """

    def __init__(
        self,
        tick_repo: PriceTickRepository,
        index_repo: MarketIndexRepository,
        random_source: RandomSource,
        clock: Clock,
        composite_symbol: str = "NIFTY50",
        instrument_cap: int = COMPOSITE_INSTRUMENT_CAP,
        scale: float = COMPOSITE_SCALE,
        synthetic_indices: Iterable[SyntheticIndex] = DEFAULT_SYNTHETIC_INDICES,
    ) -> None:
        self._tick_repo = tick_repo
        self._index_repo = index_repo
        self._random = random_source
        self._clock = clock
        self._composite_symbol = composite_symbol
        self._instrument_cap = instrument_cap
        self._scale = scale
        self._synthetic = tuple(synthetic_indices)

    def execute(self) -> IndexAggregationResult:
        updated: list[str] = []
        skipped: list[str] = []
        failed: list[str] = []

        def record(symbol: str, compute: Callable[[], IndexValues | None]) -> None:
            try:
                values = compute()
                if values is None:
                    logger.info("No priced instruments; %s not updated.", symbol)
                    skipped.append(symbol)
                    return
                self._index_repo.upsert(
                    IndexUpdate(
                        symbol=symbol,
                        value=values.value,
                        change_amount=values.change_amount,
                        change_percent=values.change_percent,
                        updated_at=self._clock.now(),
                    )
                )
            except Exception:
                logger.exception("Index update failed for %s", symbol)
                failed.append(symbol)
                return
            updated.append(symbol)

        record(self._composite_symbol, self._compute_composite)
        for index in self._synthetic:
            record(index.symbol, lambda index=index: walk_index(index, self._random.random()))

        logger.debug("Indices updated: %s", updated)
        return IndexAggregationResult(updated=updated, skipped=skipped, failed=failed)

    def _compute_composite(self) -> IndexValues | None:
        ticks = self._tick_repo.get_latest_per_instrument(limit=self._instrument_cap)
        return composite_index(ticks, scale=self._scale)
