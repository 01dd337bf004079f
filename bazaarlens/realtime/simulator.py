"""
Market simulator service.

Runs the market use cases on recurring schedules:
- **price_cycle** (every 30 s): simulate prices, then aggregate indices.
  A no-op outside the trading window.
- **recommendations** (daily 06:00): recommend stale instruments.
- **purge_stale_ticks** (daily 02:00), **purge_expired_sessions**
  (every 6 h), **compact_storage** (Sunday 03:00): maintenance sweep.
- **market_stats** (hourly in trading hours): log a market summary.

Every task runs inside a wrapper that records a TaskResult and logs
failures, so no exception reaches the scheduler thread. Cycles write
row by row; a reader may see a snapshot that is only partly updated.
"""

import logging
import threading
import time
from dataclasses import asdict, dataclass, field, is_dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

from bazaarlens.application.market.aggregate_indices import AggregateIndicesUseCase
from bazaarlens.application.market.generate_recommendations import (
    GenerateRecommendationsUseCase,
)
from bazaarlens.application.market.seed_initial_prices import SeedInitialPricesUseCase
from bazaarlens.application.market.simulate_prices import SimulatePricesUseCase
from bazaarlens.application.market.summarize_market import SummarizeMarketUseCase
from bazaarlens.application.market.sweep_storage import (
    STEP_COMPACT,
    STEP_PURGE_SESSIONS,
    STEP_PURGE_TICKS,
    MaintenanceSweepUseCase,
)
from bazaarlens.domain.market.ports import Clock, JobScheduler
from bazaarlens.domain.market.trading_window import TradingWindow

logger = logging.getLogger(__name__)


class TaskStatus(Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class TaskResult:
    """Result of a scheduled task execution."""

    task_name: str
    status: TaskStatus
    started_at: str
    finished_at: str | None = None
    duration_seconds: float = 0.0
    details: dict = field(default_factory=dict)
    error: str | None = None


class _Skip(Exception):
    """Internal signal: the task decided not to run."""


class MarketSimulator:
    """Explicit, constructible simulator service.

    All collaborators are injected so tests can substitute a fixed clock,
    scripted randomness (inside the use cases) and a fake scheduler.

    Usage:
        simulator = MarketSimulator(...)
        simulator.start()                # seed prices, register and start jobs
        simulator.run_now("price_cycle") # trigger a task immediately
        simulator.stop()                 # no further cycles are scheduled
    """

    def __init__(
        self,
        *,
        simulate_prices: SimulatePricesUseCase,
        aggregate_indices: AggregateIndicesUseCase,
        generate_recommendations: GenerateRecommendationsUseCase,
        sweep_storage: MaintenanceSweepUseCase,
        summarize_market: SummarizeMarketUseCase,
        seed_prices: SeedInitialPricesUseCase,
        scheduler: JobScheduler,
        clock: Clock,
        trading_window: TradingWindow,
        schedules: dict[str, str],
        timezone_name: str = "Asia/Kolkata",
        seed_on_start: bool = True,
        max_history: int = 200,
    ) -> None:
        self._simulate_prices = simulate_prices
        self._aggregate_indices = aggregate_indices
        self._generate_recommendations = generate_recommendations
        self._sweep_storage = sweep_storage
        self._summarize_market = summarize_market
        self._seed_prices = seed_prices
        self._scheduler = scheduler
        self._clock = clock
        self._window = trading_window
        self._schedules = dict(schedules)
        self._timezone_name = timezone_name
        self._seed_on_start = seed_on_start
        self._max_history = max_history

        self._running = False
        self._task_history: list[TaskResult] = []
        self._lock = threading.Lock()

        self._task_map: dict[str, Callable[[], TaskResult]] = {
            "price_cycle": self.run_price_cycle,
            "recommendations": self._task_recommendations,
            "purge_stale_ticks": lambda: self._task_sweep(STEP_PURGE_TICKS),
            "purge_expired_sessions": lambda: self._task_sweep(STEP_PURGE_SESSIONS),
            "compact_storage": lambda: self._task_sweep(STEP_COMPACT),
            "market_stats": self._task_market_stats,
            "seed_prices": self._task_seed_prices,
        }

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def task_history(self) -> list[TaskResult]:
        with self._lock:
            return list(self._task_history)

    @property
    def task_names(self) -> list[str]:
        return list(self._task_map)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Seed missing prices, register every scheduled job and start.

        Raises:
            InvalidScheduleError: If a configured schedule cannot be parsed.
                Nothing is started in that case.
        """
        if self._running:
            logger.warning("Market simulator already running.")
            return

        if self._seed_on_start:
            self._task_seed_prices()

        for name, schedule in self._schedules.items():
            if name not in self._task_map:
                logger.warning("No task named %s; schedule ignored.", name)
                continue
            self._scheduler.add_job(
                name, self._job(name), schedule, self._timezone_name
            )

        self._scheduler.start()
        self._running = True
        logger.info("Market simulator started.")

    def stop(self) -> None:
        """Stop scheduling new cycles. A cycle already running completes."""
        if not self._running:
            return
        self._scheduler.shutdown()
        self._running = False
        logger.info("Market simulator stopped.")

    def run_now(self, task_name: str) -> TaskResult:
        """Execute a named task immediately (blocking).

        Args:
            task_name: One of ``task_names``.

        Returns:
            TaskResult with execution details.
        """
        fn = self._task_map.get(task_name)
        if fn is None:
            return TaskResult(
                task_name=task_name,
                status=TaskStatus.FAILED,
                started_at=_utc_now_iso(),
                error=f"Unknown task: {task_name}. "
                      f"Available: {list(self._task_map.keys())}",
            )
        return fn()

    def _job(self, name: str) -> Callable[[], None]:
        def run() -> None:
            self._task_map[name]()

        return run

    # ------------------------------------------------------------------
    # Task implementations
    # ------------------------------------------------------------------

    def run_price_cycle(self, force: bool = False) -> TaskResult:
        """Simulate prices then aggregate indices.

        Args:
            force: Run even when the trading window is closed.
        """

        def cycle() -> dict:
            if not force and not self._window.is_open(self._clock.now()):
                raise _Skip("outside trading window")
            prices = self._simulate_prices.execute()
            indices = self._aggregate_indices.execute()
            return {"prices": _details(prices), "indices": _details(indices)}

        return self._run_task("price_cycle", cycle)

    def _task_recommendations(self) -> TaskResult:
        return self._run_task(
            "recommendations", lambda: _details(self._generate_recommendations.execute())
        )

    def _task_sweep(self, step: str) -> TaskResult:
        def sweep() -> dict:
            result = self._sweep_storage.execute(steps=[step])
            if result.failed_steps:
                raise RuntimeError(result.failed_steps[step])
            return _details(result)

        return self._run_task(step, sweep)

    def _task_market_stats(self) -> TaskResult:
        return self._run_task(
            "market_stats", lambda: _details(self._summarize_market.execute())
        )

    def _task_seed_prices(self) -> TaskResult:
        return self._run_task(
            "seed_prices", lambda: _details(self._seed_prices.execute())
        )

    def _run_task(self, name: str, body: Callable[[], dict]) -> TaskResult:
        start = time.monotonic()
        started_at = _utc_now_iso()
        try:
            details = body()
            task_result = TaskResult(
                task_name=name,
                status=TaskStatus.COMPLETED,
                started_at=started_at,
                finished_at=_utc_now_iso(),
                duration_seconds=round(time.monotonic() - start, 3),
                details=details,
            )
        except _Skip as skip:
            logger.debug("Task %s skipped: %s", name, skip)
            task_result = TaskResult(
                task_name=name,
                status=TaskStatus.SKIPPED,
                started_at=started_at,
                finished_at=_utc_now_iso(),
                details={"reason": str(skip)},
            )
        except Exception as exc:
            logger.exception("Scheduled task %s failed.", name)
            task_result = TaskResult(
                task_name=name,
                status=TaskStatus.FAILED,
                started_at=started_at,
                finished_at=_utc_now_iso(),
                duration_seconds=round(time.monotonic() - start, 3),
                error=str(exc),
            )

        self._record_result(task_result)
        return task_result

    def _record_result(self, result: TaskResult) -> None:
        with self._lock:
            self._task_history.append(result)
            if len(self._task_history) > self._max_history:
                self._task_history = self._task_history[-self._max_history:]

    # ------------------------------------------------------------------
    # Status & introspection
    # ------------------------------------------------------------------

    def get_scheduled_jobs(self) -> list[dict]:
        return self._scheduler.get_jobs()

    def get_status(self) -> dict:
        """Return the service status summary."""
        recent = self.task_history[-10:]
        return {
            "running": self._running,
            "trading_window_open": self._window.is_open(self._clock.now()),
            "jobs": self.get_scheduled_jobs(),
            "recent_tasks": [
                {
                    "task": r.task_name,
                    "status": r.status.value,
                    "duration": r.duration_seconds,
                    "started_at": r.started_at,
                }
                for r in recent
            ],
        }


def _details(result: object) -> dict:
    return asdict(result) if is_dataclass(result) else {"result": result}


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
