"""
Trading window value object.

Price simulation only runs on configured weekdays within a local-hour
range, e.g. Monday to Friday, 09:00 <= hour < 16:00 in Asia/Kolkata.
"""

from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from bazaarlens.domain.market.errors import InvalidScheduleError

_WEEKDAYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")


def parse_weekdays(days_expr: str) -> frozenset[int]:
    """Parse ``"mon-fri"`` or ``"mon,wed,fri"`` into ``datetime.weekday()`` numbers.

    Raises:
        InvalidScheduleError: On an unknown day name or an empty expression.
    """
    days: set[int] = set()
    for part in days_expr.lower().split(","):
        part = part.strip()
        if not part:
            continue
        try:
            if "-" in part:
                first, last = (p.strip() for p in part.split("-", 1))
                start, end = _WEEKDAYS.index(first), _WEEKDAYS.index(last)
                if start > end:
                    raise ValueError("range runs backwards")
                days.update(range(start, end + 1))
            else:
                days.add(_WEEKDAYS.index(part))
        except ValueError as exc:
            raise InvalidScheduleError(days_expr, str(exc)) from exc

    if not days:
        raise InvalidScheduleError(days_expr, "no trading days")
    return frozenset(days)


@dataclass(frozen=True)
class TradingWindow:
    """Weekday and local-hour gate for the price simulator.

    Attributes:
        timezone: IANA timezone the hours are expressed in.
        weekdays: Allowed ``datetime.weekday()`` values (Monday is 0).
        open_hour: First hour (inclusive) of the session.
        close_hour: Hour (exclusive) at which the session ends.
    """

    timezone: str = "Asia/Kolkata"
    weekdays: frozenset[int] = frozenset(range(5))
    open_hour: int = 9
    close_hour: int = 16

    def __post_init__(self) -> None:
        if not 0 <= self.open_hour < self.close_hour <= 24:
            raise InvalidScheduleError(
                f"{self.open_hour}-{self.close_hour}", "hours must satisfy 0 <= open < close <= 24"
            )
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise InvalidScheduleError(self.timezone, "unknown timezone") from exc

    @classmethod
    def from_config(
        cls, timezone: str, days: str, open_hour: int, close_hour: int
    ) -> "TradingWindow":
        return cls(
            timezone=timezone,
            weekdays=parse_weekdays(days),
            open_hour=open_hour,
            close_hour=close_hour,
        )

    def is_open(self, moment: datetime) -> bool:
        """Return True if ``moment`` (timezone-aware) falls inside the window."""
        local = moment.astimezone(ZoneInfo(self.timezone))
        return (
            local.weekday() in self.weekdays
            and self.open_hour <= local.hour < self.close_hour
        )
