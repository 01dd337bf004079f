"""
Adapter: APScheduler-backed job scheduler.

Implements the JobScheduler port with a BackgroundScheduler. Schedules
are crontab strings: five fields (minute hour day month day_of_week),
or six with a leading seconds field for sub-minute jobs.

Day-of-week fields follow APScheduler numbering (0 = Monday); prefer
names such as ``mon-fri`` or ``sun``.
"""

import logging
from typing import Callable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from bazaarlens.domain.market.errors import InvalidScheduleError
from bazaarlens.domain.market.ports import JobScheduler

logger = logging.getLogger(__name__)


def build_cron_trigger(schedule: str, timezone: str) -> CronTrigger:
    """Parse a five- or six-field crontab string into a CronTrigger.

    Raises:
        InvalidScheduleError: On a wrong field count, a bad field value
            or an unknown timezone.
    """
    if not schedule or not schedule.strip():
        raise InvalidScheduleError(schedule or "", "schedule is required")

    try:
        tz = ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidScheduleError(schedule, f"unknown timezone '{timezone}'") from exc

    fields = schedule.split()
    try:
        if len(fields) == 5:
            return CronTrigger.from_crontab(schedule.strip(), timezone=tz)
        if len(fields) == 6:
            second, minute, hour, day, month, day_of_week = fields
            return CronTrigger(
                second=second,
                minute=minute,
                hour=hour,
                day=day,
                month=month,
                day_of_week=day_of_week,
                timezone=tz,
            )
    except ValueError as exc:
        raise InvalidScheduleError(schedule, str(exc)) from exc

    raise InvalidScheduleError(
        schedule, "expected 5 fields 'min hour day month dow' or 6 with leading seconds"
    )


class APSchedulerJobScheduler(JobScheduler):
    """Runs registered jobs on a background thread pool.

    Each job coalesces missed runs and never overlaps with itself.
    A BackgroundScheduler cannot be restarted once shut down, so
    ``shutdown`` swaps in a fresh one; jobs must be added again before
    the next ``start``.
    """

    def __init__(self, timezone: str = "Asia/Kolkata", misfire_grace_time: int = 30) -> None:
        self._timezone = ZoneInfo(timezone)
        self._misfire_grace_time = misfire_grace_time
        self._scheduler = self._build_scheduler()

    def _build_scheduler(self) -> BackgroundScheduler:
        return BackgroundScheduler(
            timezone=self._timezone,
            job_defaults={
                "coalesce": True,
                "max_instances": 1,
                "misfire_grace_time": self._misfire_grace_time,
            },
        )

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def add_job(
        self, name: str, func: Callable[[], object], schedule: str, timezone: str
    ) -> None:
        trigger = build_cron_trigger(schedule, timezone)
        self._scheduler.add_job(
            func,
            trigger=trigger,
            id=name,
            name=name,
            replace_existing=True,
        )
        logger.info("Job added: %s (%s, %s)", name, schedule, timezone)

    def start(self) -> None:
        if self._scheduler.running:
            logger.warning("Scheduler already running.")
            return
        self._scheduler.start()
        logger.info("APScheduler started with %d jobs.", len(self._scheduler.get_jobs()))

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            self._scheduler = self._build_scheduler()
            logger.info("APScheduler shut down.")

    def get_jobs(self) -> list[dict]:
        return [
            {
                "id": job.id,
                "name": job.name,
                "next_run": str(getattr(job, "next_run_time", None)),
                "trigger": str(job.trigger),
            }
            for job in self._scheduler.get_jobs()
        ]
