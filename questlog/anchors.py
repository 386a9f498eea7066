from datetime import date, datetime

from .core.models import Daily, OneTime, Quest, Recurrence, Scheduled, Weekly
from .core.types import Instant
from .lib.calendar import Calendar

__all__ = ["anchor", "anchor_for", "day_anchor", "week_anchor"]

_DEFAULT_CALENDAR = Calendar()


def day_anchor(instant: Instant, calendar: Calendar = _DEFAULT_CALENDAR) -> date:
    return calendar.start_of_day(instant).date()


def week_anchor(instant: Instant, calendar: Calendar = _DEFAULT_CALENDAR) -> date:
    return calendar.start_of_week(instant).date()


def anchor(
    instant: Instant,
    recurrence: Recurrence,
    due: datetime | None = None,
    calendar: Calendar = _DEFAULT_CALENDAR,
) -> date:
    """Occurrence key a completion recorded at `instant` belongs to.

    One-time quests are keyed on their due day no matter when they are
    ticked off. Without a due date the instant itself is used.
    """
    match recurrence:
        case OneTime():
            return day_anchor(due if due is not None else instant, calendar)
        case Daily() | Scheduled():
            return day_anchor(instant, calendar)
        case Weekly():
            return week_anchor(instant, calendar)
    raise TypeError(f"unknown recurrence: {recurrence!r}")


def anchor_for(quest: Quest, instant: Instant, calendar: Calendar = _DEFAULT_CALENDAR) -> date:
    return anchor(instant, quest.recurrence, quest.due, calendar)
