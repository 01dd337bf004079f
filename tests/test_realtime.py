"""
Tests for the real-time market simulation service.

Covers:
- build_cron_trigger (five and six field crontabs, invalid input)
- APSchedulerJobScheduler (lifecycle, job listing)
- MarketSimulator (trading window gate, task execution, status, history)
- TaskResult / TaskStatus
"""

import threading
from datetime import datetime, timezone
from unittest.mock import MagicMock
from zoneinfo import ZoneInfo

import pytest

from conftest import FakeScheduler, FixedClock

from bazaarlens.application.market.dtos import (
    IndexAggregationResult,
    SimulationCycleResult,
    SweepResult,
)
from bazaarlens.core.config import Settings
from bazaarlens.domain.market.errors import InvalidScheduleError
from bazaarlens.domain.market.trading_window import TradingWindow
from bazaarlens.infrastructure.market.job_scheduler import (
    APSchedulerJobScheduler,
    build_cron_trigger,
)
from bazaarlens.realtime.simulator import MarketSimulator, TaskResult, TaskStatus

KOLKATA = ZoneInfo("Asia/Kolkata")


def _make_simulator(clock=None, scheduler=None, **overrides):
    """Return a MarketSimulator wired to mocked use cases and its mocks."""
    mocks = {
        "simulate_prices": MagicMock(),
        "aggregate_indices": MagicMock(),
        "generate_recommendations": MagicMock(),
        "sweep_storage": MagicMock(),
        "summarize_market": MagicMock(),
        "seed_prices": MagicMock(),
    }
    mocks["simulate_prices"].execute.return_value = SimulationCycleResult(2, 0)
    mocks["aggregate_indices"].execute.return_value = IndexAggregationResult(
        updated=["NIFTY50", "SENSEX"]
    )
    mocks["sweep_storage"].execute.return_value = SweepResult(purged_ticks=4)
    mocks["seed_prices"].execute.return_value = SimulationCycleResult(0, 0)
    schedules = overrides.pop("schedules", None) or Settings().job_schedules()
    mocks.update(overrides)

    simulator = MarketSimulator(
        **mocks,
        scheduler=scheduler or FakeScheduler(),
        clock=clock or FixedClock(),
        trading_window=TradingWindow(),
        schedules=schedules,
    )
    return simulator, mocks


# =====================================================================
# Cron triggers
# =====================================================================

class TestBuildCronTrigger:
    """Tests for crontab parsing into APScheduler triggers."""

    def test_five_field_schedule(self):
        trigger = build_cron_trigger("0 6 * * *", "Asia/Kolkata")
        now = datetime(2024, 1, 15, 7, 0, tzinfo=KOLKATA)

        assert trigger.get_next_fire_time(None, now) == datetime(2024, 1, 16, 6, 0, tzinfo=KOLKATA)

    def test_six_field_schedule_has_seconds(self):
        trigger = build_cron_trigger("*/30 * * * * *", "Asia/Kolkata")
        now = datetime(2024, 1, 15, 10, 0, 5, tzinfo=KOLKATA)

        assert trigger.get_next_fire_time(None, now) == datetime(2024, 1, 15, 10, 0, 30, tzinfo=KOLKATA)

    def test_named_weekday(self):
        trigger = build_cron_trigger("0 3 * * sun", "Asia/Kolkata")
        monday = datetime(2024, 1, 15, 12, 0, tzinfo=KOLKATA)

        assert trigger.get_next_fire_time(None, monday) == datetime(2024, 1, 21, 3, 0, tzinfo=KOLKATA)

    def test_hour_range_on_weekdays(self):
        trigger = build_cron_trigger("0 9-16 * * mon-fri", "Asia/Kolkata")
        friday_evening = datetime(2024, 1, 19, 17, 0, tzinfo=KOLKATA)

        assert trigger.get_next_fire_time(None, friday_evening) == datetime(
            2024, 1, 22, 9, 0, tzinfo=KOLKATA
        )

    @pytest.mark.parametrize(
        "schedule", ["", "   ", "not a cron", "* * *", "61 * * * *", "* * * * * * *"]
    )
    def test_invalid_schedule(self, schedule):
        with pytest.raises(InvalidScheduleError):
            build_cron_trigger(schedule, "Asia/Kolkata")

    def test_invalid_timezone(self):
        with pytest.raises(InvalidScheduleError):
            build_cron_trigger("0 6 * * *", "Nowhere/City")


class TestAPSchedulerJobScheduler:
    """Tests for the APScheduler adapter lifecycle."""

    def test_add_start_and_shutdown(self):
        scheduler = APSchedulerJobScheduler(timezone="Asia/Kolkata")
        scheduler.add_job("recommendations", lambda: None, "0 6 * * *", "Asia/Kolkata")

        scheduler.start()
        try:
            assert scheduler.running
            jobs = scheduler.get_jobs()
            assert [job["id"] for job in jobs] == ["recommendations"]
            assert jobs[0]["next_run"] != "None"
        finally:
            scheduler.shutdown()

        assert not scheduler.running

    def test_re_adding_replaces_job(self):
        scheduler = APSchedulerJobScheduler()
        scheduler.start()
        try:
            scheduler.add_job("price_cycle", lambda: None, "*/30 * * * * *", "Asia/Kolkata")
            scheduler.add_job("price_cycle", lambda: None, "0 * * * *", "Asia/Kolkata")

            assert len(scheduler.get_jobs()) == 1
        finally:
            scheduler.shutdown()

    def test_invalid_schedule_is_rejected(self):
        scheduler = APSchedulerJobScheduler()
        with pytest.raises(InvalidScheduleError):
            scheduler.add_job("bad", lambda: None, "every minute", "Asia/Kolkata")

    def test_restart_after_shutdown_runs_jobs_again(self):
        scheduler = APSchedulerJobScheduler()
        fired = threading.Event()

        scheduler.add_job("heartbeat", fired.set, "* * * * * *", "Asia/Kolkata")
        scheduler.start()
        try:
            assert fired.wait(timeout=3)
        finally:
            scheduler.shutdown()
        assert scheduler.get_jobs() == []

        fired.clear()
        scheduler.add_job("heartbeat", fired.set, "* * * * * *", "Asia/Kolkata")
        scheduler.start()
        try:
            assert scheduler.running
            assert fired.wait(timeout=3)
        finally:
            scheduler.shutdown()

    def test_shutdown_when_stopped_is_safe(self):
        APSchedulerJobScheduler().shutdown()


# =====================================================================
# MarketSimulator
# =====================================================================

class TestMarketSimulator:
    """Tests for the scheduler-driven simulator service."""

    def test_initial_state(self):
        simulator, _ = _make_simulator()
        assert not simulator.is_running
        assert simulator.task_history == []

    def test_start_seeds_and_registers_jobs(self):
        scheduler = FakeScheduler()
        simulator, mocks = _make_simulator(scheduler=scheduler)

        simulator.start()

        assert simulator.is_running
        assert scheduler.started
        mocks["seed_prices"].execute.assert_called_once()
        assert set(scheduler.jobs) == {
            "price_cycle",
            "recommendations",
            "purge_stale_ticks",
            "market_stats",
            "purge_expired_sessions",
            "compact_storage",
        }
        _, schedule, tz = scheduler.jobs["price_cycle"]
        assert schedule == "*/30 * * * * *"
        assert tz == "Asia/Kolkata"

    def test_start_twice_is_noop(self):
        simulator, mocks = _make_simulator()
        simulator.start()
        simulator.start()
        mocks["seed_prices"].execute.assert_called_once()

    def test_stop_shuts_scheduler_down(self):
        scheduler = FakeScheduler()
        simulator, _ = _make_simulator(scheduler=scheduler)
        simulator.start()

        simulator.stop()
        simulator.stop()

        assert not simulator.is_running
        assert scheduler.shutdown_calls == 1

    def test_restart_with_apscheduler_keeps_jobs_firing(self):
        fired = threading.Event()
        summarize = MagicMock()
        summarize.execute.side_effect = lambda: fired.set()
        simulator, _ = _make_simulator(
            scheduler=APSchedulerJobScheduler(),
            summarize_market=summarize,
            schedules={"market_stats": "* * * * * *"},
        )

        simulator.start()
        try:
            assert fired.wait(timeout=3)
        finally:
            simulator.stop()

        fired.clear()
        simulator.start()
        try:
            assert simulator.is_running
            assert fired.wait(timeout=3)
        finally:
            simulator.stop()

        assert all(r.status == TaskStatus.COMPLETED for r in simulator.task_history)

    def test_price_cycle_inside_window(self):
        simulator, mocks = _make_simulator()

        result = simulator.run_now("price_cycle")

        assert result.status == TaskStatus.COMPLETED
        mocks["simulate_prices"].execute.assert_called_once()
        mocks["aggregate_indices"].execute.assert_called_once()
        assert result.details["prices"]["ticks_inserted"] == 2
        assert result.details["indices"]["updated"] == ["NIFTY50", "SENSEX"]

    def test_price_cycle_outside_window_is_skipped(self):
        # Saturday 10:00 IST
        clock = FixedClock(datetime(2024, 1, 20, 4, 30, tzinfo=timezone.utc))
        simulator, mocks = _make_simulator(clock=clock)

        result = simulator.run_price_cycle()

        assert result.status == TaskStatus.SKIPPED
        mocks["simulate_prices"].execute.assert_not_called()
        mocks["aggregate_indices"].execute.assert_not_called()

    def test_forced_price_cycle_ignores_window(self):
        clock = FixedClock(datetime(2024, 1, 20, 4, 30, tzinfo=timezone.utc))
        simulator, mocks = _make_simulator(clock=clock)

        result = simulator.run_price_cycle(force=True)

        assert result.status == TaskStatus.COMPLETED
        mocks["simulate_prices"].execute.assert_called_once()

    def test_failing_task_is_captured(self):
        simulator, mocks = _make_simulator()
        mocks["simulate_prices"].execute.side_effect = RuntimeError("db gone")

        result = simulator.run_now("price_cycle")

        assert result.status == TaskStatus.FAILED
        assert result.error == "db gone"
        mocks["aggregate_indices"].execute.assert_not_called()
        assert simulator.task_history[-1] is result

    def test_run_unknown_task(self):
        simulator, _ = _make_simulator()
        result = simulator.run_now("nonexistent_task")

        assert result.status == TaskStatus.FAILED
        assert "Unknown task" in result.error

    def test_sweep_task_runs_single_step(self):
        simulator, mocks = _make_simulator()

        result = simulator.run_now("purge_stale_ticks")

        assert result.status == TaskStatus.COMPLETED
        mocks["sweep_storage"].execute.assert_called_once_with(steps=["purge_stale_ticks"])
        assert result.details["purged_ticks"] == 4

    def test_failed_sweep_step_marks_task_failed(self):
        simulator, mocks = _make_simulator()
        mocks["sweep_storage"].execute.return_value = SweepResult(
            failed_steps={"compact_storage": "database is locked"}
        )

        result = simulator.run_now("compact_storage")

        assert result.status == TaskStatus.FAILED
        assert result.error == "database is locked"

    def test_registered_job_runs_task(self):
        scheduler = FakeScheduler()
        simulator, mocks = _make_simulator(scheduler=scheduler)
        simulator.start()

        func, _, _ = scheduler.jobs["market_stats"]
        func()

        mocks["summarize_market"].execute.assert_called_once()
        assert simulator.task_history[-1].task_name == "market_stats"

    def test_history_is_bounded(self):
        simulator, _ = _make_simulator()
        simulator._max_history = 3
        for _ in range(5):
            simulator.run_now("recommendations")

        assert len(simulator.task_history) == 3

    def test_get_status(self):
        scheduler = FakeScheduler()
        simulator, _ = _make_simulator(scheduler=scheduler)
        simulator.start()
        simulator.run_now("market_stats")

        status = simulator.get_status()

        assert status["running"] is True
        assert status["trading_window_open"] is True
        assert len(status["jobs"]) == 6
        assert status["recent_tasks"][-1]["task"] == "market_stats"


class TestTaskResult:
    def test_task_result_fields(self):
        result = TaskResult(
            task_name="price_cycle",
            status=TaskStatus.COMPLETED,
            started_at=datetime.now(timezone.utc).isoformat(),
            duration_seconds=0.2,
        )

        assert result.details == {}
        assert result.error is None

    def test_task_status_values(self):
        assert TaskStatus.SKIPPED.value == "skipped"
        assert TaskStatus.FAILED.value == "failed"
