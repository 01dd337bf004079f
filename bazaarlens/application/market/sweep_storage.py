"""
Use case: Maintenance sweep.

Steps:
    - purge_stale_ticks: delete ticks older than the retention period.
    - purge_expired_sessions: delete sessions past their expiry.
    - compact_storage: VACUUM / ANALYZE.

Each step is independent. A failing step is logged and reported in the
result; the remaining steps still run.
"""

import logging
from datetime import timedelta
from typing import Iterable, Optional

from bazaarlens.application.market.dtos import SweepResult
from bazaarlens.domain.market.errors import UnknownTaskError
from bazaarlens.domain.market.ports import (
    Clock,
    PriceTickRepository,
    SessionRepository,
    StorageMaintenance,
)

logger = logging.getLogger(__name__)

STEP_PURGE_TICKS = "purge_stale_ticks"
STEP_PURGE_SESSIONS = "purge_expired_sessions"
STEP_COMPACT = "compact_storage"
ALL_STEPS = (STEP_PURGE_TICKS, STEP_PURGE_SESSIONS, STEP_COMPACT)


class MaintenanceSweepUseCase:
    """Bounds storage growth and reclaims expired session state."""

    def __init__(
        self,
        tick_repo: PriceTickRepository,
        session_repo: SessionRepository,
        maintenance: StorageMaintenance,
        clock: Clock,
        retention_days: int = 30,
    ) -> None:
        self._tick_repo = tick_repo
        self._session_repo = session_repo
        self._maintenance = maintenance
        self._clock = clock
        self._retention = timedelta(days=retention_days)

    def execute(self, steps: Optional[Iterable[str]] = None) -> SweepResult:
        """Run the requested steps, all of them by default.

        Raises:
            UnknownTaskError: If a step name is not recognised. Nothing runs.
        """
        requested = tuple(steps) if steps is not None else ALL_STEPS
        for step in requested:
            if step not in ALL_STEPS:
                raise UnknownTaskError(step, list(ALL_STEPS))

        purged_ticks: Optional[int] = None
        purged_sessions: Optional[int] = None
        compacted = False
        failed: dict[str, str] = {}

        if STEP_PURGE_TICKS in requested:
            try:
                cutoff = self._clock.now() - self._retention
                purged_ticks = self._tick_repo.purge_older_than(cutoff)
                logger.info("Cleaned up %d old price records.", purged_ticks)
            except Exception as exc:
                logger.exception("Purging old price records failed.")
                failed[STEP_PURGE_TICKS] = str(exc)

        if STEP_PURGE_SESSIONS in requested:
            try:
                purged_sessions = self._session_repo.purge_expired(self._clock.now())
                if purged_sessions:
                    logger.info("Cleaned up %d expired sessions.", purged_sessions)
            except Exception as exc:
                logger.exception("Purging expired sessions failed.")
                failed[STEP_PURGE_SESSIONS] = str(exc)

        if STEP_COMPACT in requested:
            try:
                self._maintenance.compact()
                compacted = True
                logger.info("Database maintenance completed.")
            except Exception as exc:
                logger.exception("Database maintenance failed.")
                failed[STEP_COMPACT] = str(exc)

        return SweepResult(
            purged_ticks=purged_ticks,
            purged_sessions=purged_sessions,
            compacted=compacted,
            failed_steps=failed,
        )
