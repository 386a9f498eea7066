import dataclasses
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from datetime import date
from pathlib import Path
from typing import Protocol

from . import config, db
from .core.errors import PersistenceError
from .core.models import Quest
from .lib.converters import quest_to_row, row_to_quest

__all__ = ["MemoryRepository", "Repository", "SqliteRepository"]

_QUEST_COLS = (
    "id, title, created, due, repeat_type, scheduled_days, is_active, is_completed, completed_at"
)


class Repository(Protocol):
    """Storage the engine reads quests from and writes flags and completions to."""

    def transaction(self) -> AbstractContextManager[None]:
        """Run every call inside as one atomic, serialised unit. Reentrant."""
        ...

    def get_quest(self, quest_id: str) -> Quest | None: ...

    def get_all_quest_ids(self) -> list[str]: ...

    def save_quest(self, quest: Quest) -> None: ...

    def delete_quest(self, quest_id: str) -> None: ...

    def insert_completion(self, quest_id: str, anchor: date) -> None: ...

    def remove_completion(self, quest_id: str, anchor: date) -> None: ...

    def has_completion(self, quest_id: str, anchor: date) -> bool: ...

    def completions_in_range(self, quest_id: str, start: date, end: date) -> list[date]: ...


class SqliteRepository:
    """Quest store over the questlog sqlite file.

    Outside a transaction each call commits on its own connection. Inside
    transaction() the calls on that thread share one connection opened with
    BEGIN IMMEDIATE, so other writers, including other processes, wait for
    the commit.
    """

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path
        self._local = threading.local()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if getattr(self._local, "conn", None) is not None:
            yield
            return
        try:
            conn = sqlite3.connect(self.db_path or config.DB_PATH, timeout=30)
            conn.execute("PRAGMA foreign_keys = ON;")
            conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as e:
            raise PersistenceError(f"store error: {e}") from e
        self._local.conn = conn
        try:
            yield
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise PersistenceError(f"store error: {e}") from e
        except BaseException:
            conn.rollback()
            raise
        finally:
            self._local.conn = None
            conn.close()

    @contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        shared = getattr(self._local, "conn", None)
        try:
            if shared is not None:
                yield shared
            else:
                with db.get_db(self.db_path) as conn:
                    yield conn
        except sqlite3.Error as e:
            raise PersistenceError(f"store error: {e}") from e

    def _write(self, sql: str, params: tuple[object, ...]) -> None:
        with self._conn() as conn:
            conn.execute(sql, params)

    def get_quest(self, quest_id: str) -> Quest | None:
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT {_QUEST_COLS} FROM quests WHERE id = ?",  # noqa: S608
                (quest_id,),
            ).fetchone()
        return row_to_quest(row) if row else None

    def get_all_quest_ids(self) -> list[str]:
        with self._conn() as conn:
            return [row[0] for row in conn.execute("SELECT id FROM quests ORDER BY created")]

    def save_quest(self, quest: Quest) -> None:
        self._write(
            f"INSERT INTO quests ({_QUEST_COLS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?) "  # noqa: S608
            "ON CONFLICT(id) DO UPDATE SET title = excluded.title, due = excluded.due, "
            "repeat_type = excluded.repeat_type, scheduled_days = excluded.scheduled_days, "
            "is_active = excluded.is_active, is_completed = excluded.is_completed, "
            "completed_at = excluded.completed_at",
            quest_to_row(quest),
        )

    def delete_quest(self, quest_id: str) -> None:
        self._write("DELETE FROM quests WHERE id = ?", (quest_id,))

    def insert_completion(self, quest_id: str, anchor: date) -> None:
        self._write(
            "INSERT INTO quest_completions (quest_id, anchor) VALUES (?, ?) ON CONFLICT DO NOTHING",
            (quest_id, anchor.isoformat()),
        )

    def remove_completion(self, quest_id: str, anchor: date) -> None:
        self._write(
            "DELETE FROM quest_completions WHERE quest_id = ? AND anchor = ?",
            (quest_id, anchor.isoformat()),
        )

    def has_completion(self, quest_id: str, anchor: date) -> bool:
        with self._conn() as conn:
            row = conn.execute(
                "SELECT 1 FROM quest_completions WHERE quest_id = ? AND anchor = ?",
                (quest_id, anchor.isoformat()),
            ).fetchone()
        return row is not None

    def completions_in_range(self, quest_id: str, start: date, end: date) -> list[date]:
        with self._conn() as conn:
            cursor = conn.execute(
                "SELECT anchor FROM quest_completions "
                "WHERE quest_id = ? AND anchor >= ? AND anchor <= ? ORDER BY anchor",
                (quest_id, start.isoformat(), end.isoformat()),
            )
            return [date.fromisoformat(row[0]) for row in cursor.fetchall()]


class MemoryRepository:
    """In-process store with the same contract as SqliteRepository.

    transaction() holds the store lock and puts the previous contents back
    if the block raises.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._depth = 0
        self._quests: dict[str, Quest] = {}
        self._completions: dict[str, set[date]] = {}

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield
                finally:
                    self._depth -= 1
                return
            quests = dict(self._quests)
            completions = {qid: set(anchors) for qid, anchors in self._completions.items()}
            self._depth = 1
            try:
                yield
            except BaseException:
                self._quests = quests
                self._completions = completions
                raise
            finally:
                self._depth = 0

    def get_quest(self, quest_id: str) -> Quest | None:
        with self._lock:
            return self._quests.get(quest_id)

    def get_all_quest_ids(self) -> list[str]:
        with self._lock:
            return [q.id for q in sorted(self._quests.values(), key=lambda q: q.created)]

    def save_quest(self, quest: Quest) -> None:
        with self._lock:
            self._quests[quest.id] = dataclasses.replace(quest)
            self._completions.setdefault(quest.id, set())

    def delete_quest(self, quest_id: str) -> None:
        with self._lock:
            self._quests.pop(quest_id, None)
            self._completions.pop(quest_id, None)

    def insert_completion(self, quest_id: str, anchor: date) -> None:
        with self._lock:
            if quest_id not in self._quests:
                raise PersistenceError(f"no quest row for completion: {quest_id}")
            self._completions[quest_id].add(anchor)

    def remove_completion(self, quest_id: str, anchor: date) -> None:
        with self._lock:
            self._completions.get(quest_id, set()).discard(anchor)

    def has_completion(self, quest_id: str, anchor: date) -> bool:
        with self._lock:
            return anchor in self._completions.get(quest_id, set())

    def completions_in_range(self, quest_id: str, start: date, end: date) -> list[date]:
        with self._lock:
            return sorted(a for a in self._completions.get(quest_id, set()) if start <= a <= end)
