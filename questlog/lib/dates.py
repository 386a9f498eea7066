from datetime import datetime, time, timedelta

from dateutil import parser as dateutil_parser
from dateutil.parser import ParserError

from . import clock

END_OF_DAY = time(23, 59, 59)

_DAY_ALIASES = {
    "monday": "mon",
    "tuesday": "tue",
    "wednesday": "wed",
    "thursday": "thu",
    "friday": "fri",
    "saturday": "sat",
    "sunday": "sun",
}
_DAY_MAP = {"mon": 0, "tue": 1, "wed": 2, "thu": 3, "fri": 4, "sat": 5, "sun": 6}


def parse_due(due_str: str) -> datetime | None:
    """Parses a due string ('today', 'tomorrow', 'fri', 'YYYY-MM-DD', ...).

    A bare day means the end of that day; an explicit time is kept.
    """
    due_lower = due_str.strip().lower()
    today = clock.today()

    if due_lower == "today":
        return datetime.combine(today, END_OF_DAY)
    if due_lower == "tomorrow":
        return datetime.combine(today + timedelta(days=1), END_OF_DAY)
    due_lower = _DAY_ALIASES.get(due_lower, due_lower)
    if due_lower in _DAY_MAP:
        days_ahead = (_DAY_MAP[due_lower] - today.weekday() + 7) % 7
        return datetime.combine(today + timedelta(days=days_ahead), END_OF_DAY)
    try:
        parsed = dateutil_parser.parse(due_str, default=datetime(today.year, today.month, today.day))
    except (ParserError, ValueError, OverflowError):
        return None
    if parsed.time() == time.min and ":" not in due_str:
        return datetime.combine(parsed.date(), END_OF_DAY)
    return parsed
