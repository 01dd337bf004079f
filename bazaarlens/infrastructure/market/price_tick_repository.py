"""
Adapter: Price tick repository.

Implements PriceTickRepository port over the ``stock_prices`` table.
Appends simulated ticks and resolves the latest tick per instrument.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, insert, select
from sqlalchemy.engine import Engine

from bazaarlens.domain.market.entities import PriceTick
from bazaarlens.domain.market.ports import PriceTickRepository
from bazaarlens.infrastructure.market.database import (
    from_storage,
    to_storage,
    translate_errors,
)
from bazaarlens.infrastructure.market.schema import (
    instruments,
    latest_ticks_subquery,
    price_ticks,
)

logger = logging.getLogger(__name__)


def _row_to_tick(row) -> PriceTick:
    return PriceTick(
        id=row["id"],
        instrument_id=row["stock_id"],
        symbol=row.get("symbol"),
        price=row["price"],
        change_amount=row["change_amount"],
        change_percent=row["change_percent"],
        volume=row["volume"] or 0,
        high=row["high"],
        low=row["low"],
        open_price=row["open_price"],
        close_price=row["close_price"],
        recorded_at=from_storage(row["timestamp"]),
    )


class PriceTickRepositoryAdapter(PriceTickRepository):
    """Concrete adapter for the append-only price history.

    "Latest" always means greatest timestamp, then greatest id.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def get_latest(self, instrument_id: int) -> Optional[PriceTick]:
        query = (
            select(price_ticks, instruments.c.symbol)
            .join(instruments, instruments.c.id == price_ticks.c.stock_id)
            .where(price_ticks.c.stock_id == instrument_id)
            .order_by(price_ticks.c.timestamp.desc(), price_ticks.c.id.desc())
            .limit(1)
        )
        with translate_errors("get latest tick"):
            with self._engine.connect() as conn:
                row = conn.execute(query).mappings().first()
        return _row_to_tick(row) if row else None

    def get_latest_per_instrument(self, limit: Optional[int] = None) -> list[PriceTick]:
        latest = latest_ticks_subquery()
        query = select(latest, instruments.c.symbol).join(
            instruments, instruments.c.id == latest.c.stock_id
        )
        if limit is not None:
            query = query.limit(limit)

        with translate_errors("get latest ticks"):
            with self._engine.connect() as conn:
                rows = conn.execute(query).mappings().all()
        return [_row_to_tick(row) for row in rows]

    def add(self, tick: PriceTick) -> PriceTick:
        """Append a tick.

        Raises:
            IntegrityViolationError: If the instrument does not exist.
        """
        stmt = insert(price_ticks).values(
            stock_id=tick.instrument_id,
            price=tick.price,
            change_amount=tick.change_amount,
            change_percent=tick.change_percent,
            volume=tick.volume,
            high=tick.high,
            low=tick.low,
            open_price=tick.open_price,
            close_price=tick.close_price,
            timestamp=to_storage(tick.recorded_at),
        )
        with translate_errors("insert price tick"):
            with self._engine.begin() as conn:
                result = conn.execute(stmt)
                tick_id = result.inserted_primary_key[0]
        return replace(tick, id=tick_id)

    def purge_older_than(self, cutoff: datetime) -> int:
        stmt = delete(price_ticks).where(price_ticks.c.timestamp < to_storage(cutoff))
        with translate_errors("purge price ticks"):
            with self._engine.begin() as conn:
                deleted = conn.execute(stmt).rowcount
        logger.debug("Deleted %d ticks older than %s.", deleted, cutoff.isoformat())
        return deleted
