"""
Use case: Bootstrap the store with the default catalog.

Creates missing tables, then inserts the default instruments and index
rows that are not present yet. Safe to run repeatedly.
"""

import logging
from typing import Iterable

from bazaarlens.application.market.dtos import CatalogSeedResult
from bazaarlens.domain.market.catalog import (
    DEFAULT_INDICES,
    DEFAULT_INSTRUMENTS,
    IndexSeed,
)
from bazaarlens.domain.market.entities import IndexUpdate, Instrument
from bazaarlens.domain.market.ports import (
    Clock,
    InstrumentRepository,
    MarketIndexRepository,
    StorageMaintenance,
)

logger = logging.getLogger(__name__)


class SeedCatalogUseCase:
    """Creates the schema and the default instruments and indices."""

    def __init__(
        self,
        maintenance: StorageMaintenance,
        instrument_repo: InstrumentRepository,
        index_repo: MarketIndexRepository,
        clock: Clock,
        instruments: Iterable[Instrument] = DEFAULT_INSTRUMENTS,
        indices: Iterable[IndexSeed] = DEFAULT_INDICES,
    ) -> None:
        self._maintenance = maintenance
        self._instrument_repo = instrument_repo
        self._index_repo = index_repo
        self._clock = clock
        self._instruments = tuple(instruments)
        self._indices = tuple(indices)

    def execute(self) -> CatalogSeedResult:
        self._maintenance.ensure_schema()

        instruments_added = 0
        for instrument in self._instruments:
            if self._instrument_repo.get_by_symbol(instrument.symbol) is None:
                self._instrument_repo.add(instrument)
                instruments_added += 1

        existing = {index.symbol for index in self._index_repo.list_all()}
        indices_added = 0
        for seed in self._indices:
            if seed.symbol in existing:
                continue
            self._index_repo.upsert(
                IndexUpdate(
                    symbol=seed.symbol,
                    name=seed.name,
                    value=seed.value,
                    change_amount=seed.change_amount,
                    change_percent=seed.change_percent,
                    updated_at=self._clock.now(),
                )
            )
            indices_added += 1

        logger.info(
            "Catalog seeded: %d instruments, %d indices added.",
            instruments_added,
            indices_added,
        )
        return CatalogSeedResult(
            instruments_added=instruments_added, indices_added=indices_added
        )
