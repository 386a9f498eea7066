import dataclasses
from datetime import date, datetime, time, timedelta

from questlog.core.types import Instant

__all__ = ["Calendar"]


def _as_datetime(instant: Instant) -> datetime:
    if isinstance(instant, datetime):
        return instant
    return datetime.combine(instant, time.min)


@dataclasses.dataclass(frozen=True)
class Calendar:
    """Day and week arithmetic in the host's local calendar.

    week_start is an ISO weekday (1=Monday .. 7=Sunday) and must not change
    for the lifetime of a store, otherwise weekly anchors stop lining up.
    """

    week_start: int = 1

    def __post_init__(self) -> None:
        if not 1 <= self.week_start <= 7:
            raise ValueError(f"week_start must be an ISO weekday 1..7, got {self.week_start}")

    def start_of_day(self, instant: Instant) -> datetime:
        return datetime.combine(_as_datetime(instant).date(), time.min)

    def day(self, instant: Instant) -> date:
        return _as_datetime(instant).date()

    def weekday(self, instant: Instant) -> int:
        return _as_datetime(instant).isoweekday()

    def start_of_week(self, instant: Instant) -> datetime:
        back = (self.weekday(instant) - self.week_start) % 7
        return self.start_of_day(instant) - timedelta(days=back)

    def add_days(self, day: date, n: int) -> date:
        if isinstance(day, datetime):
            day = day.date()
        return day + timedelta(days=n)
