import dataclasses
from datetime import datetime

from .errors import ValidationError

WEEKDAYS = range(1, 8)


@dataclasses.dataclass(frozen=True)
class OneTime:
    pass


@dataclasses.dataclass(frozen=True)
class Daily:
    pass


@dataclasses.dataclass(frozen=True)
class Weekly:
    pass


@dataclasses.dataclass(frozen=True)
class Scheduled:
    """Repeats on the given ISO weekdays (1=Monday .. 7=Sunday)."""

    weekdays: frozenset[int]

    def __post_init__(self) -> None:
        days = frozenset(self.weekdays)
        if not days:
            raise ValidationError("scheduled quest needs at least one weekday")
        bad = sorted(d for d in days if d not in WEEKDAYS)
        if bad:
            raise ValidationError(f"weekday out of range 1..7: {bad}")
        object.__setattr__(self, "weekdays", days)


Recurrence = OneTime | Daily | Weekly | Scheduled


@dataclasses.dataclass(frozen=True)
class Quest:
    id: str
    title: str
    created: datetime
    recurrence: Recurrence = dataclasses.field(default_factory=OneTime)
    due: datetime | None = None
    is_active: bool = True
    is_completed: bool = False
    completed_at: datetime | None = None

    @property
    def scheduled_days(self) -> frozenset[int]:
        match self.recurrence:
            case Scheduled(weekdays=days):
                return days
            case _:
                return frozenset()


@dataclasses.dataclass
class RefreshReport:
    refreshed: list[str] = dataclasses.field(default_factory=list)
    failed: dict[str, Exception] = dataclasses.field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed
