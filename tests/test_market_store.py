"""
Tests for the SQLAlchemy market store adapters.

Every test gets a fresh in-memory SQLite database with foreign keys on.
Validates latest-tick resolution, index upsert, candidate selection,
timestamp round-trips and error translation.
"""

from datetime import timedelta, timezone

import pytest
from sqlalchemy import func, select

from conftest import make_tick

from bazaarlens.core.config import Settings
from bazaarlens.domain.market.entities import (
    Action,
    IndexUpdate,
    Instrument,
    Recommendation,
)
from bazaarlens.domain.market.errors import (
    IntegrityViolationError,
    StorageUnavailableError,
)
from bazaarlens.infrastructure.market.database import (
    create_db_engine,
    from_storage,
    to_storage,
)
from bazaarlens.infrastructure.market.instrument_repository import (
    InstrumentRepositoryAdapter,
)
from bazaarlens.infrastructure.market.schema import market_indices
from bazaarlens.infrastructure.market.storage_maintenance import (
    StorageMaintenanceAdapter,
)


def _recommendation(instrument_id, created_at, confidence=75) -> Recommendation:
    return Recommendation(
        instrument_id=instrument_id,
        action=Action.SELL,
        target_price=900.0,
        confidence=confidence,
        timeframe="1M",
        rationale="Strong upward movement suggests potential overvaluation",
        created_at=created_at,
    )


# ══════════════════════════════════════════════════════════════════════
# Engine helpers
# ══════════════════════════════════════════════════════════════════════


class TestEngineHelpers:
    def test_storage_round_trip_is_utc(self, clock):
        stored = to_storage(clock.now())

        assert stored.tzinfo is None
        assert from_storage(stored) == clock.now()
        assert from_storage(stored).tzinfo == timezone.utc

    def test_from_storage_passes_none(self):
        assert from_storage(None) is None

    def test_postgres_scheme_is_normalised(self):
        engine = create_db_engine("postgres://user:pw@localhost:5432/bazaar")
        assert engine.dialect.name == "postgresql"
        assert engine.url.drivername == "postgresql+psycopg2"
        engine.dispose()

    @pytest.mark.parametrize(
        "dsn",
        [
            "postgresql://user:pw@localhost:5432/bazaar",
            "postgresql+psycopg2://user:pw@localhost:5432/bazaar",
        ],
    )
    def test_postgresql_urls_use_psycopg2(self, dsn):
        engine = create_db_engine(dsn)
        assert engine.url.drivername == "postgresql+psycopg2"
        engine.dispose()

    def test_default_settings_dsn_builds_psycopg2_engine(self):
        engine = create_db_engine(Settings(database_url=None).get_database_dsn())
        assert engine.url.drivername == "postgresql+psycopg2"
        engine.dispose()

    def test_missing_schema_is_storage_unavailable(self):
        engine = create_db_engine("sqlite://")
        with pytest.raises(StorageUnavailableError):
            InstrumentRepositoryAdapter(engine).list_all()
        engine.dispose()


# ══════════════════════════════════════════════════════════════════════
# Instruments
# ══════════════════════════════════════════════════════════════════════


class TestInstrumentRepository:
    def test_add_and_lookup(self, instrument_repo, instruments):
        found = instrument_repo.get_by_symbol("TCS")

        assert found == instruments[1]
        assert found.id is not None
        assert instrument_repo.get_by_symbol("NOPE") is None

    def test_list_all_is_ordered_by_id(self, instrument_repo, instruments):
        assert [i.symbol for i in instrument_repo.list_all()] == ["RELIANCE", "TCS"]

    def test_duplicate_symbol_is_integrity_violation(self, instrument_repo, instruments):
        with pytest.raises(IntegrityViolationError):
            instrument_repo.add(Instrument("TCS", "Duplicate"))


# ══════════════════════════════════════════════════════════════════════
# Price ticks
# ══════════════════════════════════════════════════════════════════════


class TestPriceTickRepository:
    """Tests for the append-only tick history."""

    def test_get_latest_without_history(self, tick_repo, instruments):
        assert tick_repo.get_latest(instruments[0].id) is None

    def test_get_latest_prefers_newest_timestamp(self, tick_repo, instruments, clock):
        instrument_id = instruments[0].id
        tick_repo.add(make_tick(instrument_id, 12.0, clock.now()))
        tick_repo.add(make_tick(instrument_id, 11.0, clock.now() - timedelta(seconds=30)))

        latest = tick_repo.get_latest(instrument_id)

        assert latest.price == 12.0
        assert latest.symbol == "RELIANCE"
        assert latest.recorded_at == clock.now()

    def test_timestamp_tie_broken_by_highest_id(self, tick_repo, instruments, clock):
        instrument_id = instruments[0].id
        first = tick_repo.add(make_tick(instrument_id, 10.0, clock.now()))
        second = tick_repo.add(make_tick(instrument_id, 20.0, clock.now()))

        assert second.id > first.id
        assert tick_repo.get_latest(instrument_id).id == second.id

        (latest,) = [t for t in tick_repo.get_latest_per_instrument() if t.instrument_id == instrument_id]
        assert latest.id == second.id

    def test_latest_per_instrument_returns_one_row_each(self, tick_repo, instruments, clock):
        for instrument in instruments:
            for offset in range(3):
                tick_repo.add(make_tick(instrument.id, 100.0 + offset, clock.now() + timedelta(seconds=offset)))

        latest = tick_repo.get_latest_per_instrument()

        assert len(latest) == 2
        assert {t.price for t in latest} == {102.0}
        assert {t.symbol for t in latest} == {"RELIANCE", "TCS"}

    def test_latest_per_instrument_honours_limit(self, tick_repo, instruments, clock):
        for instrument in instruments:
            tick_repo.add(make_tick(instrument.id, 50.0, clock.now()))

        assert len(tick_repo.get_latest_per_instrument(limit=1)) == 1

    def test_tick_for_unknown_instrument_is_integrity_violation(self, tick_repo, clock):
        with pytest.raises(IntegrityViolationError):
            tick_repo.add(make_tick(999, 10.0, clock.now()))

    def test_purge_is_strictly_older_than_cutoff(self, tick_repo, instruments, clock):
        instrument_id = instruments[0].id
        cutoff = clock.now() - timedelta(days=30)
        tick_repo.add(make_tick(instrument_id, 1.0, cutoff - timedelta(microseconds=1)))
        tick_repo.add(make_tick(instrument_id, 2.0, cutoff))

        assert tick_repo.purge_older_than(cutoff) == 1
        assert tick_repo.get_latest(instrument_id).price == 2.0


# ══════════════════════════════════════════════════════════════════════
# Market indices
# ══════════════════════════════════════════════════════════════════════


class TestMarketIndexRepository:
    def test_upsert_inserts_then_updates(self, engine, index_repo, clock):
        index_repo.upsert(IndexUpdate("SENSEX", 72000.0, 10.0, 0.01, clock.now(), name="SENSEX"))
        clock.advance(seconds=30)
        index_repo.upsert(IndexUpdate("SENSEX", 73000.0, -5.0, -0.2, clock.now()))

        (index,) = index_repo.list_all()
        assert index.value == 73000.0
        assert index.change_amount == -5.0
        assert index.change_percent == -0.2
        assert index.updated_at == clock.now()

        with engine.connect() as conn:
            assert conn.execute(select(func.count()).select_from(market_indices)).scalar_one() == 1

    def test_insert_without_name_uses_symbol(self, index_repo, clock):
        index_repo.upsert(IndexUpdate("NIFTY50", 22000.0, 0.0, 0.0, clock.now()))
        assert index_repo.list_all()[0].name == "NIFTY50"

    def test_update_keeps_existing_name(self, index_repo, clock):
        index_repo.upsert(IndexUpdate("USDINR", 83.4, 0.0, 0.0, clock.now(), name="USD/INR"))
        index_repo.upsert(IndexUpdate("USDINR", 83.5, 0.1, 0.12, clock.now()))
        assert index_repo.list_all()[0].name == "USD/INR"


# ══════════════════════════════════════════════════════════════════════
# Recommendations
# ══════════════════════════════════════════════════════════════════════


class TestRecommendationRepository:
    """Tests for candidate selection and constraints."""

    def test_add_returns_id(self, recommendation_repo, instruments, clock):
        saved = recommendation_repo.add(_recommendation(instruments[0].id, clock.now()))
        assert saved.id is not None
        assert saved.action is Action.SELL

    def test_candidates_carry_latest_price(self, recommendation_repo, tick_repo, instruments, clock):
        tick_repo.add(make_tick(instruments[0].id, 10.0, clock.now() - timedelta(minutes=1), change_percent=1.0))
        tick_repo.add(make_tick(instruments[0].id, 12.0, clock.now(), change_percent=20.0))

        candidates = recommendation_repo.find_candidates(clock.now() - timedelta(days=7), limit=10)
        by_symbol = {c.symbol: c for c in candidates}

        assert by_symbol["RELIANCE"].price == 12.0
        assert by_symbol["RELIANCE"].change_percent == 20.0
        assert by_symbol["TCS"].price is None
        assert by_symbol["TCS"].change_percent is None

    def test_fresh_recommendation_excludes_instrument(self, recommendation_repo, instruments, clock):
        recommendation_repo.add(_recommendation(instruments[0].id, clock.now() - timedelta(days=1)))

        candidates = recommendation_repo.find_candidates(clock.now() - timedelta(days=7), limit=10)

        assert [c.symbol for c in candidates] == ["TCS"]

    def test_old_recommendation_keeps_instrument_eligible(self, recommendation_repo, instruments, clock):
        recommendation_repo.add(_recommendation(instruments[0].id, clock.now() - timedelta(days=8)))

        candidates = recommendation_repo.find_candidates(clock.now() - timedelta(days=7), limit=10)

        assert {c.symbol for c in candidates} == {"RELIANCE", "TCS"}

    def test_limit(self, recommendation_repo, instruments, clock):
        assert len(recommendation_repo.find_candidates(clock.now(), limit=1)) == 1

    def test_confidence_out_of_range_is_integrity_violation(self, recommendation_repo, instruments, clock):
        with pytest.raises(IntegrityViolationError):
            recommendation_repo.add(_recommendation(instruments[0].id, clock.now(), confidence=150))


# ══════════════════════════════════════════════════════════════════════
# Maintenance
# ══════════════════════════════════════════════════════════════════════


class TestStorageMaintenance:
    def test_ensure_schema_is_idempotent(self, maintenance, instruments, instrument_repo):
        maintenance.ensure_schema()
        assert len(instrument_repo.list_all()) == 2

    def test_compact_keeps_data(self, maintenance, tick_repo, instruments, clock):
        tick_repo.add(make_tick(instruments[0].id, 10.0, clock.now()))

        maintenance.compact()

        assert tick_repo.get_latest(instruments[0].id).price == 10.0

    def test_compact_on_file_database(self, tmp_path):
        engine = create_db_engine(f"sqlite:///{tmp_path / 'market.db'}")
        maintenance = StorageMaintenanceAdapter(engine)
        maintenance.ensure_schema()
        maintenance.compact()
        engine.dispose()
