"""Derivation of a quest's cached is_active / is_completed flags.

derive_state is the source of truth for the flags. add_quest and the
completion log write provisional values. Engine operations re-derive them
here before returning, and refresh_all corrects anything added since.
"""

import dataclasses
from collections.abc import Callable
from datetime import date, datetime

from .anchors import day_anchor, week_anchor
from .core.models import Daily, OneTime, Quest, Scheduled, Weekly
from .core.types import Flags
from .lib.calendar import Calendar
from .repository import Repository

__all__ = ["derive_state", "is_expired", "refresh_state"]


def is_expired(quest: Quest, now: datetime) -> bool:
    return quest.due is not None and now > quest.due


def derive_state(
    quest: Quest,
    now: datetime,
    is_done: Callable[[date], bool],
    calendar: Calendar,
) -> Flags:
    """Return (is_active, is_completed) for `quest` at `now`.

    A quest past its due instant is closed for good, whatever its
    recurrence and whether or not the last occurrence was done. Missed and
    finished quests end up with the same flags.
    """
    if is_expired(quest, now):
        return False, True

    match quest.recurrence:
        case OneTime():
            done = is_done(day_anchor(quest.due if quest.due is not None else now, calendar))
            return not done, done
        case Daily():
            done = is_done(day_anchor(now, calendar))
            return not done, done
        case Weekly():
            done = is_done(week_anchor(now, calendar))
            return not done, done
        case Scheduled(weekdays=days):
            done = is_done(day_anchor(now, calendar))
            return calendar.weekday(now) in days and not done, done
    raise TypeError(f"unknown recurrence: {quest.recurrence!r}")


def refresh_state(quest: Quest, now: datetime, repo: Repository, calendar: Calendar) -> Quest:
    is_active, is_completed = derive_state(
        quest, now, lambda a: repo.has_completion(quest.id, a), calendar
    )
    updated = dataclasses.replace(quest, is_active=is_active, is_completed=is_completed)
    repo.save_quest(updated)
    return updated
