import dataclasses
from datetime import date, datetime

from loguru import logger

from .anchors import day_anchor, week_anchor
from .core.errors import NotFoundError
from .core.models import Quest
from .core.types import Instant
from .lib import clock
from .lib.calendar import Calendar
from .repository import Repository

__all__ = ["CompletionLog"]


class CompletionLog:
    """Per-quest set of completed occurrence anchors.

    The (quest, anchor) pair is the identity of a completion. Marking an
    anchor that is already marked, or unmarking one that is not, leaves the
    store unchanged.
    """

    def __init__(self, repo: Repository, calendar: Calendar | None = None, log=logger):
        self.repo = repo
        self.calendar = calendar or Calendar()
        self.log = log

    def _require(self, quest_id: str) -> Quest:
        quest = self.repo.get_quest(quest_id)
        if quest is None:
            raise NotFoundError(f"No quest found: '{quest_id}'")
        return quest

    def mark_completed(self, quest_id: str, anchor: date, at: datetime | None = None) -> Quest:
        with self.repo.transaction():
            quest = self._require(quest_id)
            if not self.repo.has_completion(quest_id, anchor):
                self.repo.insert_completion(quest_id, anchor)
                self.log.debug("completion recorded quest={} anchor={}", quest_id, anchor)
            updated = dataclasses.replace(
                quest, is_completed=True, completed_at=at if at is not None else clock.now()
            )
            self.repo.save_quest(updated)
        return updated

    def unmark_completed(self, quest_id: str, anchor: date) -> Quest:
        with self.repo.transaction():
            quest = self._require(quest_id)
            if self.repo.has_completion(quest_id, anchor):
                self.repo.remove_completion(quest_id, anchor)
                self.log.debug("completion removed quest={} anchor={}", quest_id, anchor)
            updated = dataclasses.replace(quest, is_completed=False)
            self.repo.save_quest(updated)
        return updated

    def is_completed(self, quest_id: str, anchor: date) -> bool:
        return self.repo.has_completion(quest_id, anchor)

    def dates_in_range(self, quest_id: str, start: Instant, end: Instant) -> list[date]:
        """Completed anchors between the days of start and end, inclusive, ascending."""
        return self.repo.completions_in_range(
            quest_id, day_anchor(start, self.calendar), day_anchor(end, self.calendar)
        )

    def count(self, quest_id: str, start: Instant, end: Instant) -> int:
        return len(self.dates_in_range(quest_id, start, end))

    def is_completed_this_week(self, quest_id: str, as_of: Instant) -> bool:
        return self.repo.has_completion(quest_id, week_anchor(as_of, self.calendar))
