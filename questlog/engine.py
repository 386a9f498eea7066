import threading
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from datetime import datetime

from loguru import logger

from .anchors import anchor_for
from .completions import CompletionLog
from .core.errors import NotFoundError, QuestlogError
from .core.models import Quest, RefreshReport
from .core.types import Instant
from .lib import clock
from .lib.calendar import Calendar
from .repository import Repository
from .state import refresh_state
from .streaks import current_streak

__all__ = ["QuestEngine"]


class _QuestLocks:
    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    def get(self, quest_id: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(quest_id)
            if lock is None:
                lock = self._locks[quest_id] = threading.RLock()
            return lock


class QuestEngine:
    """Entry point for everything that reads or changes quest state.

    Every operation on a quest runs while holding that quest's lock and
    inside one repository transaction, so an in-app toggle and a deep-link
    toggle on the same quest never interleave, even from another process
    sharing the store. A failure anywhere in the block leaves nothing behind.
    """

    def __init__(self, repo: Repository, calendar: Calendar | None = None, log=logger):
        self.repo = repo
        self.calendar = calendar or Calendar()
        self.log = log
        self.completions = CompletionLog(repo, self.calendar, log=log)
        self._locks = _QuestLocks()

    @contextmanager
    def _locked(self, quest_id: str) -> Iterator[Quest]:
        with self._locks.get(quest_id), self.repo.transaction():
            quest = self.repo.get_quest(quest_id)
            if quest is None:
                raise NotFoundError(f"No quest found: '{quest_id}'")
            yield quest

    def _refresh(self, quest: Quest, now: datetime) -> Quest:
        updated = refresh_state(quest, now, self.repo, self.calendar)
        if (updated.is_active, updated.is_completed) != (quest.is_active, quest.is_completed):
            self.log.debug(
                "quest {} active={} completed={}",
                quest.id,
                updated.is_active,
                updated.is_completed,
            )
        return updated

    def refresh_one(self, quest_id: str, now: datetime | None = None) -> Quest:
        now = now or clock.now()
        with self._locked(quest_id) as quest:
            return self._refresh(quest, now)

    def refresh_all(self, now: datetime | None = None, workers: int = 1) -> RefreshReport:
        now = now or clock.now()
        report = RefreshReport()
        quest_ids = self.repo.get_all_quest_ids()

        def run(quest_id: str) -> tuple[str, Exception | None]:
            try:
                self.refresh_one(quest_id, now)
            except QuestlogError as e:
                return quest_id, e
            return quest_id, None

        if workers > 1 and len(quest_ids) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                results = list(pool.map(run, quest_ids))
        else:
            results = [run(quest_id) for quest_id in quest_ids]

        for quest_id, error in results:
            if error is None:
                report.refreshed.append(quest_id)
            else:
                self.log.warning("refresh failed for quest {}: {}", quest_id, error)
                report.failed[quest_id] = error
        self.log.info(
            "refreshed {} quests, {} failed", len(report.refreshed), len(report.failed)
        )
        return report

    def mark_completed(self, quest_id: str, on: Instant | None = None) -> Quest:
        now = clock.now()
        with self._locked(quest_id) as quest:
            anchor = anchor_for(quest, on if on is not None else now, self.calendar)
            marked = self.completions.mark_completed(quest_id, anchor, at=now)
            return self._refresh(marked, now)

    def unmark_completed(self, quest_id: str, on: Instant | None = None) -> Quest:
        now = clock.now()
        with self._locked(quest_id) as quest:
            anchor = anchor_for(quest, on if on is not None else now, self.calendar)
            unmarked = self.completions.unmark_completed(quest_id, anchor)
            return self._refresh(unmarked, now)

    def toggle(self, quest_id: str, on: Instant | None = None) -> Quest:
        now = clock.now()
        with self._locked(quest_id) as quest:
            anchor = anchor_for(quest, on if on is not None else now, self.calendar)
            if self.completions.is_completed(quest_id, anchor):
                changed = self.completions.unmark_completed(quest_id, anchor)
            else:
                changed = self.completions.mark_completed(quest_id, anchor, at=now)
            return self._refresh(changed, now)

    def is_completed(self, quest_id: str, on: Instant | None = None) -> bool:
        with self._locked(quest_id) as quest:
            anchor = anchor_for(quest, on if on is not None else clock.now(), self.calendar)
            return self.completions.is_completed(quest_id, anchor)

    def current_streak(self, quest_id: str, as_of: Instant | None = None) -> int:
        with self._locked(quest_id):
            return current_streak(
                lambda day: self.completions.is_completed(quest_id, day),
                as_of if as_of is not None else clock.now(),
                self.calendar,
            )
