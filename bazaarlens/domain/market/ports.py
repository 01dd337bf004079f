"""
Port interfaces (ABCs) for the market bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Optional

from bazaarlens.domain.market.entities import (
    IndexUpdate,
    Instrument,
    MarketIndex,
    PriceTick,
    Recommendation,
    RecommendationCandidate,
)


class InstrumentRepository(ABC):
    """Port for the instrument catalog."""

    @abstractmethod
    def list_all(self) -> list[Instrument]:
        """Return every instrument in the catalog."""
        raise NotImplementedError

    @abstractmethod
    def get_by_symbol(self, symbol: str) -> Optional[Instrument]:
        """Return the instrument with this symbol, or None."""
        raise NotImplementedError

    @abstractmethod
    def add(self, instrument: Instrument) -> Instrument:
        """Persist a new instrument and return it with its id."""
        raise NotImplementedError


class PriceTickRepository(ABC):
    """Port for the append-only price history."""

    @abstractmethod
    def get_latest(self, instrument_id: int) -> Optional[PriceTick]:
        """Return the latest tick of one instrument, or None if it has none."""
        raise NotImplementedError

    @abstractmethod
    def get_latest_per_instrument(self, limit: Optional[int] = None) -> list[PriceTick]:
        """Return exactly one latest tick per priced instrument.

        Args:
            limit: Optional cap on the number of instruments returned.
                No ordering between instruments is guaranteed.
        """
        raise NotImplementedError

    @abstractmethod
    def add(self, tick: PriceTick) -> PriceTick:
        """Append a tick and return it with its id."""
        raise NotImplementedError

    @abstractmethod
    def purge_older_than(self, cutoff: datetime) -> int:
        """Delete ticks recorded strictly before ``cutoff``.

        Returns:
            Number of rows deleted.
        """
        raise NotImplementedError


class MarketIndexRepository(ABC):
    """Port for market index rows."""

    @abstractmethod
    def upsert(self, index_update: IndexUpdate) -> None:
        """Overwrite the index row with this symbol, creating it if absent."""
        raise NotImplementedError

    @abstractmethod
    def list_all(self) -> list[MarketIndex]:
        """Return every index row."""
        raise NotImplementedError


class RecommendationRepository(ABC):
    """Port for persisting recommendations and finding who needs one."""

    @abstractmethod
    def add(self, recommendation: Recommendation) -> Recommendation:
        """Append a recommendation and return it with its id."""
        raise NotImplementedError

    @abstractmethod
    def find_candidates(
        self, stale_before: datetime, limit: int
    ) -> list[RecommendationCandidate]:
        """Return instruments with no recommendation created at or after ``stale_before``.

        Args:
            stale_before: Recommendations older than this no longer count.
            limit: Maximum number of candidates. Selection order is arbitrary.
        """
        raise NotImplementedError


class SessionRepository(ABC):
    """Port for user session housekeeping."""

    @abstractmethod
    def purge_expired(self, now: datetime) -> int:
        """Delete sessions whose ``expires_at`` is before ``now``."""
        raise NotImplementedError


class StorageMaintenance(ABC):
    """Port for schema bootstrap and storage compaction."""

    @abstractmethod
    def ensure_schema(self) -> None:
        """Create missing tables and indexes."""
        raise NotImplementedError

    @abstractmethod
    def compact(self) -> None:
        """Reclaim space and refresh planner statistics."""
        raise NotImplementedError


class Clock(ABC):
    """Port for the current time."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time as a timezone-aware UTC datetime."""
        raise NotImplementedError


class RandomSource(ABC):
    """Port for uniform random draws."""

    @abstractmethod
    def random(self) -> float:
        """Return a float uniformly drawn from [0, 1)."""
        raise NotImplementedError


class JobScheduler(ABC):
    """Port for registering recurring jobs."""

    @property
    @abstractmethod
    def running(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def add_job(
        self, name: str, func: Callable[[], object], schedule: str, timezone: str
    ) -> None:
        """Register ``func`` under ``name`` on a crontab-style schedule.

        Args:
            name: Unique job identifier. Re-adding a name replaces the job.
            func: Zero-argument callable.
            schedule: Five crontab fields, or six with leading seconds.
            timezone: IANA timezone the schedule is interpreted in.

        Raises:
            InvalidScheduleError: If the schedule or timezone is invalid.
        """
        raise NotImplementedError

    @abstractmethod
    def start(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def shutdown(self) -> None:
        """Stop scheduling and drop registered jobs.

        Jobs already running are not interrupted. The scheduler can be
        started again once jobs are re-added.
        """
        raise NotImplementedError

    @abstractmethod
    def get_jobs(self) -> list[dict]:
        """Return id, name, next run and trigger of each registered job."""
        raise NotImplementedError
