"""
Adapter: Instrument repository.

Implements InstrumentRepository port over the ``stocks`` table.
"""

from typing import Optional

from sqlalchemy import insert, select
from sqlalchemy.engine import Engine

from bazaarlens.domain.market.entities import Instrument
from bazaarlens.domain.market.ports import InstrumentRepository
from bazaarlens.infrastructure.market.database import translate_errors
from bazaarlens.infrastructure.market.schema import instruments


def _row_to_instrument(row) -> Instrument:
    return Instrument(
        id=row["id"],
        symbol=row["symbol"],
        name=row["name"],
        sector=row["sector"],
        industry=row["industry"],
        market_cap=row["market_cap"],
        pe_ratio=row["pe_ratio"],
        dividend_yield=row["dividend_yield"],
    )


class InstrumentRepositoryAdapter(InstrumentRepository):
    """Reads and extends the instrument catalog."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def list_all(self) -> list[Instrument]:
        query = select(instruments).order_by(instruments.c.id)
        with translate_errors("list instruments"):
            with self._engine.connect() as conn:
                rows = conn.execute(query).mappings().all()
        return [_row_to_instrument(row) for row in rows]

    def get_by_symbol(self, symbol: str) -> Optional[Instrument]:
        query = select(instruments).where(instruments.c.symbol == symbol)
        with translate_errors("get instrument"):
            with self._engine.connect() as conn:
                row = conn.execute(query).mappings().first()
        return _row_to_instrument(row) if row else None

    def add(self, instrument: Instrument) -> Instrument:
        """Insert an instrument.

        Raises:
            IntegrityViolationError: If the symbol already exists.
        """
        stmt = insert(instruments).values(
            symbol=instrument.symbol,
            name=instrument.name,
            sector=instrument.sector,
            industry=instrument.industry,
            market_cap=instrument.market_cap,
            pe_ratio=instrument.pe_ratio,
            dividend_yield=instrument.dividend_yield,
        )
        with translate_errors("add instrument"):
            with self._engine.begin() as conn:
                result = conn.execute(stmt)
                instrument_id = result.inserted_primary_key[0]

        return Instrument(
            id=instrument_id,
            symbol=instrument.symbol,
            name=instrument.name,
            sector=instrument.sector,
            industry=instrument.industry,
            market_cap=instrument.market_cap,
            pe_ratio=instrument.pe_ratio,
            dividend_yield=instrument.dividend_yield,
        )
