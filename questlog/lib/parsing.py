from questlog.core.errors import ValidationError
from questlog.core.models import Daily, OneTime, Recurrence, Scheduled, Weekly

_WEEKDAY_NAMES = {"mon": 1, "tue": 2, "wed": 3, "thu": 4, "fri": 5, "sat": 6, "sun": 7}
_WEEKDAY_ALIASES = {
    "monday": "mon",
    "tuesday": "tue",
    "wednesday": "wed",
    "thursday": "thu",
    "friday": "fri",
    "saturday": "sat",
    "sunday": "sun",
}
_SIMPLE = {
    "once": OneTime,
    "one-time": OneTime,
    "daily": Daily,
    "weekly": Weekly,
}


def validate_title(title: str) -> None:
    """Raises ValidationError for an empty or whitespace-only title."""
    if not title or not title.strip():
        raise ValidationError("Title cannot be empty or whitespace-only")


def _weekday(part: str, value: str) -> int:
    if part.isdigit():
        return int(part)
    name = _WEEKDAY_ALIASES.get(part, part)
    if name not in _WEEKDAY_NAMES:
        raise ValidationError(f"unknown recurrence '{value}'")
    return _WEEKDAY_NAMES[name]


def parse_recurrence(value: str) -> Recurrence:
    """'once', 'daily', 'weekly', or a weekday list like 'mon,wed,fri' / '1,3,5'."""
    key = value.strip().lower()
    if key in _SIMPLE:
        return _SIMPLE[key]()
    days = {_weekday(part.strip(), value) for part in key.split(",") if part.strip()}
    return Scheduled(frozenset(days))


def describe_recurrence(recurrence: Recurrence) -> str:
    names = {v: k for k, v in _WEEKDAY_NAMES.items()}
    match recurrence:
        case OneTime():
            return "once"
        case Daily():
            return "daily"
        case Weekly():
            return "weekly"
        case Scheduled(weekdays=days):
            return ",".join(names[d] for d in sorted(days))
    raise TypeError(f"unknown recurrence: {recurrence!r}")
