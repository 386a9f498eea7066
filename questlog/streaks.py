from collections.abc import Callable
from datetime import date

from .anchors import day_anchor
from .core.types import Instant
from .lib.calendar import Calendar

__all__ = ["current_streak"]


def current_streak(is_done: Callable[[date], bool], as_of: Instant, calendar: Calendar) -> int:
    """Consecutive completed days ending on the day of `as_of`.

    Day anchors are used whatever the quest's recurrence, so a weekly
    quest only streaks on the days its week anchor falls on.
    """
    streak = 0
    day = day_anchor(as_of, calendar)
    while is_done(day):
        streak += 1
        day = calendar.add_days(day, -1)
    return streak
