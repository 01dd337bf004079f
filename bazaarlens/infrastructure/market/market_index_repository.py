"""
Adapter: Market index repository.

Implements MarketIndexRepository port over the ``market_indices`` table.
Rows are overwritten in place by symbol.
"""

from sqlalchemy import insert, select
from sqlalchemy import update as sql_update
from sqlalchemy.engine import Engine

from bazaarlens.domain.market.entities import IndexUpdate, MarketIndex
from bazaarlens.domain.market.ports import MarketIndexRepository
from bazaarlens.infrastructure.market.database import (
    from_storage,
    to_storage,
    translate_errors,
)
from bazaarlens.infrastructure.market.schema import market_indices


class MarketIndexRepositoryAdapter(MarketIndexRepository):
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def upsert(self, index_update: IndexUpdate) -> None:
        """Update the row for ``index_update.symbol`` or insert it.

        Update-then-insert inside one transaction keeps the statement
        portable across SQLite and PostgreSQL.
        """
        values = {
            "value": index_update.value,
            "change_amount": index_update.change_amount,
            "change_percent": index_update.change_percent,
            "updated_at": to_storage(index_update.updated_at),
        }
        with translate_errors("upsert market index"):
            with self._engine.begin() as conn:
                result = conn.execute(
                    sql_update(market_indices)
                    .where(market_indices.c.symbol == index_update.symbol)
                    .values(**values)
                )
                if result.rowcount == 0:
                    conn.execute(
                        insert(market_indices).values(
                            symbol=index_update.symbol,
                            name=index_update.name or index_update.symbol,
                            **values,
                        )
                    )

    def list_all(self) -> list[MarketIndex]:
        query = select(market_indices).order_by(market_indices.c.id)
        with translate_errors("list market indices"):
            with self._engine.connect() as conn:
                rows = conn.execute(query).mappings().all()
        return [
            MarketIndex(
                id=row["id"],
                symbol=row["symbol"],
                name=row["name"],
                value=row["value"],
                change_amount=row["change_amount"],
                change_percent=row["change_percent"],
                updated_at=from_storage(row["updated_at"]),
            )
            for row in rows
        ]
