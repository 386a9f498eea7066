from datetime import date, datetime
from typing import cast

from questlog.core.errors import ValidationError
from questlog.core.models import Daily, OneTime, Quest, Recurrence, Scheduled, Weekly

QuestRow = tuple[object, ...]

_REPEAT_TYPES: dict[str, type] = {
    "one_time": OneTime,
    "daily": Daily,
    "weekly": Weekly,
}


def _parse_datetime(val) -> datetime:
    """Parse a datetime value that may be str or numeric timestamp."""
    if isinstance(val, (int, float)):
        return datetime.fromtimestamp(val)
    if isinstance(val, str) and val:
        try:
            return datetime.fromisoformat(val)
        except ValueError:
            return datetime.combine(date.fromisoformat(val), datetime.min.time())
    return datetime.min


def _parse_datetime_optional(val) -> datetime | None:
    if val is None or val == "":
        return None
    return _parse_datetime(val)


def parse_weekdays(raw: str | None) -> frozenset[int]:
    """'1,3,5' -> {1, 3, 5}. Blank segments are ignored."""
    if not raw:
        return frozenset()
    try:
        return frozenset(int(part) for part in raw.split(",") if part.strip())
    except ValueError as e:
        raise ValidationError(f"bad weekday list '{raw}'") from e


def format_weekdays(days: frozenset[int]) -> str:
    return ",".join(str(d) for d in sorted(days))


def recurrence_to_columns(recurrence: Recurrence) -> tuple[str, str | None]:
    """Split a recurrence into (repeat_type, scheduled_days) column values."""
    match recurrence:
        case OneTime():
            return "one_time", None
        case Daily():
            return "daily", None
        case Weekly():
            return "weekly", None
        case Scheduled(weekdays=days):
            return "scheduled", format_weekdays(days)
    raise TypeError(f"unknown recurrence: {recurrence!r}")


def recurrence_from_columns(repeat_type: str, scheduled_days: str | None) -> Recurrence:
    if repeat_type == "scheduled":
        return Scheduled(parse_weekdays(scheduled_days))
    cls = _REPEAT_TYPES.get(repeat_type)
    if cls is None:
        raise ValidationError(f"unknown repeat_type '{repeat_type}'")
    return cls()


def row_to_quest(row: QuestRow) -> Quest:
    """
    Converts a raw database row from quests table into a Quest object.
    Expected row format: (id, title, created, due, repeat_type, scheduled_days, is_active, is_completed, completed_at)
    """
    return Quest(
        id=cast(str, row[0]),
        title=cast(str, row[1]),
        created=_parse_datetime(row[2]),
        due=_parse_datetime_optional(row[3]),
        recurrence=recurrence_from_columns(cast(str, row[4]), cast(str | None, row[5])),
        is_active=bool(row[6]),
        is_completed=bool(row[7]),
        completed_at=_parse_datetime_optional(row[8]) if len(row) > 8 else None,
    )


def quest_to_row(quest: Quest) -> QuestRow:
    repeat_type, scheduled_days = recurrence_to_columns(quest.recurrence)
    return (
        quest.id,
        quest.title,
        quest.created.isoformat(),
        quest.due.isoformat() if quest.due else None,
        repeat_type,
        scheduled_days,
        int(quest.is_active),
        int(quest.is_completed),
        quest.completed_at.isoformat() if quest.completed_at else None,
    )
