"""
Shared fixtures for the market tests.

Repository tests run against a fresh in-memory SQLite database per test.
Clock and random source are replaced with deterministic fakes.
"""

from datetime import datetime, timedelta, timezone

import pytest

from bazaarlens.domain.market.entities import Instrument, PriceTick
from bazaarlens.domain.market.ports import Clock, JobScheduler, RandomSource
from bazaarlens.infrastructure.market.database import create_db_engine
from bazaarlens.infrastructure.market.instrument_repository import (
    InstrumentRepositoryAdapter,
)
from bazaarlens.infrastructure.market.market_index_repository import (
    MarketIndexRepositoryAdapter,
)
from bazaarlens.infrastructure.market.price_tick_repository import (
    PriceTickRepositoryAdapter,
)
from bazaarlens.infrastructure.market.recommendation_repository import (
    RecommendationRepositoryAdapter,
)
from bazaarlens.infrastructure.market.schema import metadata
from bazaarlens.infrastructure.market.session_repository import SessionRepositoryAdapter
from bazaarlens.infrastructure.market.storage_maintenance import (
    StorageMaintenanceAdapter,
)

# Monday 2024-01-15 10:30 in Asia/Kolkata.
MARKET_OPEN_UTC = datetime(2024, 1, 15, 5, 0, tzinfo=timezone.utc)


class FixedClock(Clock):
    """Clock frozen at a given instant until advanced."""

    def __init__(self, now: datetime = MARKET_OPEN_UTC) -> None:
        self._now = now

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs) -> None:
        self._now = self._now + timedelta(**kwargs)


class SequenceRandom(RandomSource):
    """Returns scripted draws in order; fails loudly when exhausted."""

    def __init__(self, values) -> None:
        self._values = list(values)
        self.calls = 0

    def random(self) -> float:
        if self.calls >= len(self._values):
            raise AssertionError("random source exhausted")
        value = self._values[self.calls]
        self.calls += 1
        return value


class ConstantRandom(RandomSource):
    def __init__(self, value: float = 0.5) -> None:
        self._value = value

    def random(self) -> float:
        return self._value


class FakeScheduler(JobScheduler):
    """Records registered jobs instead of running them."""

    def __init__(self) -> None:
        self.jobs: dict = {}
        self.started = False
        self.shutdown_calls = 0

    @property
    def running(self) -> bool:
        return self.started

    def add_job(self, name, func, schedule, timezone) -> None:
        self.jobs[name] = (func, schedule, timezone)

    def start(self) -> None:
        self.started = True

    def shutdown(self) -> None:
        self.shutdown_calls += 1
        self.jobs = {}
        self.started = False

    def get_jobs(self) -> list[dict]:
        return [{"id": name, "trigger": schedule} for name, (_, schedule, _) in self.jobs.items()]


def make_tick(
    instrument_id: int,
    price: float,
    recorded_at: datetime,
    change_percent: float = 0.0,
    volume: int = 1_000,
) -> PriceTick:
    return PriceTick(
        instrument_id=instrument_id,
        price=price,
        change_amount=price * change_percent / 100,
        change_percent=change_percent,
        volume=volume,
        high=price,
        low=price,
        open_price=price,
        close_price=price,
        recorded_at=recorded_at,
    )


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def instrument_repo(engine) -> InstrumentRepositoryAdapter:
    return InstrumentRepositoryAdapter(engine)


@pytest.fixture
def tick_repo(engine) -> PriceTickRepositoryAdapter:
    return PriceTickRepositoryAdapter(engine)


@pytest.fixture
def index_repo(engine) -> MarketIndexRepositoryAdapter:
    return MarketIndexRepositoryAdapter(engine)


@pytest.fixture
def recommendation_repo(engine) -> RecommendationRepositoryAdapter:
    return RecommendationRepositoryAdapter(engine)


@pytest.fixture
def session_repo(engine) -> SessionRepositoryAdapter:
    return SessionRepositoryAdapter(engine)


@pytest.fixture
def maintenance(engine) -> StorageMaintenanceAdapter:
    return StorageMaintenanceAdapter(engine)


@pytest.fixture
def instruments(instrument_repo) -> list[Instrument]:
    """Two catalog instruments with database ids."""
    return [
        instrument_repo.add(Instrument("RELIANCE", "Reliance Industries Ltd", "Oil & Gas")),
        instrument_repo.add(Instrument("TCS", "Tata Consultancy Services", "Technology")),
    ]
