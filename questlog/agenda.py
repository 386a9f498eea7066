import dataclasses
from collections.abc import Callable, Iterable
from datetime import date
from typing import Literal

from fncli import cli

from .anchors import anchor_for
from .core.models import Quest, Scheduled
from .lib import clock
from .lib.calendar import Calendar
from .lib.errors import echo
from .repository import Repository

__all__ = ["DayItem", "active_snapshot", "items_for_day"]

DayState = Literal["todo", "done"]


@dataclasses.dataclass(frozen=True)
class DayItem:
    quest: Quest
    day: date
    state: DayState


def _occurs_on(quest: Quest, day: date, calendar: Calendar) -> bool:
    if day < calendar.day(quest.created):
        return False
    if quest.due is not None and day > calendar.day(quest.due):
        return False
    match quest.recurrence:
        case Scheduled(weekdays=days):
            return calendar.weekday(day) in days
        case _:
            return True


def items_for_day(
    quests: Iterable[Quest],
    day: date,
    is_done: Callable[[str, date], bool],
    calendar: Calendar,
) -> list[DayItem]:
    """Quests with an occurrence on `day`, newest first, with that occurrence's state."""
    items = [
        DayItem(
            quest=q,
            day=day,
            state="done" if is_done(q.id, anchor_for(q, day, calendar)) else "todo",
        )
        for q in quests
        if _occurs_on(q, day, calendar)
    ]
    return sorted(items, key=lambda item: item.quest.created, reverse=True)


def active_snapshot(repo: Repository) -> list[Quest]:
    """Quests a widget should show, read from cached flags only.

    Callers refresh through QuestEngine first; nothing here derives state.
    """
    quests = [repo.get_quest(qid) for qid in repo.get_all_quest_ids()]
    return [q for q in quests if q and q.is_active and not q.is_completed]


@cli("questlog")
def today() -> None:
    """Show today's occurrences"""
    from .quests import default_engine, get_quests

    engine = default_engine()
    items = items_for_day(
        get_quests(engine.repo),
        clock.today(),
        engine.completions.is_completed,
        engine.calendar,
    )
    if not items:
        echo("nothing today")
        return
    for item in items:
        symbol = "✓" if item.state == "done" else "□"
        echo(f"{symbol} {item.quest.title}  [{item.quest.id[:8]}]")


@cli("questlog")
def active() -> None:
    """Show quests still open, as a widget would"""
    from .quests import default_engine, format_status

    engine = default_engine()
    engine.refresh_all()
    for quest in active_snapshot(engine.repo):
        echo(format_status(quest))
