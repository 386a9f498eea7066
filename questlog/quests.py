import dataclasses
import uuid
from datetime import datetime

from fncli import cli

from . import config
from .core.errors import NotFoundError, ValidationError
from .core.models import OneTime, Quest, Recurrence
from .engine import QuestEngine
from .lib import clock
from .lib.calendar import Calendar
from .lib.dates import parse_due
from .lib.errors import echo, exit_error
from .lib.fuzzy import find_in_pool
from .lib.parsing import describe_recurrence, parse_recurrence, validate_title
from .repository import Repository, SqliteRepository
from .state import is_expired

__all__ = [
    "add_quest",
    "default_engine",
    "delete_quest",
    "find_quest",
    "format_status",
    "get_quest",
    "get_quests",
]


# ── domain ───────────────────────────────────────────────────────────────────


def add_quest(
    repo: Repository,
    title: str,
    recurrence: Recurrence | None = None,
    due: datetime | None = None,
    now: datetime | None = None,
) -> Quest:
    """Create a quest with an empty history. Overdue quests start closed."""
    validate_title(title)
    now = now or clock.now()
    quest = Quest(
        id=str(uuid.uuid4()),
        title=title.strip(),
        created=now,
        recurrence=recurrence or OneTime(),
        due=due,
    )
    expired = is_expired(quest, now)
    quest = dataclasses.replace(quest, is_active=not expired, is_completed=expired)
    repo.save_quest(quest)
    return quest


def get_quest(repo: Repository, quest_id: str) -> Quest:
    quest = repo.get_quest(quest_id)
    if quest is None:
        raise NotFoundError(f"No quest found: '{quest_id}'")
    return quest


def get_quests(repo: Repository) -> list[Quest]:
    quests = [repo.get_quest(qid) for qid in repo.get_all_quest_ids()]
    return sorted((q for q in quests if q), key=lambda q: q.created, reverse=True)


def delete_quest(repo: Repository, quest_id: str) -> None:
    get_quest(repo, quest_id)
    repo.delete_quest(quest_id)


def find_quest(repo: Repository, ref: str) -> Quest | None:
    return find_in_pool(ref, get_quests(repo))


def default_engine() -> QuestEngine:
    return QuestEngine(SqliteRepository(), Calendar(config.get_week_start()))


def format_status(quest: Quest) -> str:
    if quest.is_completed:
        symbol = "✓"
    elif quest.is_active:
        symbol = "□"
    else:
        symbol = "·"
    return f"{symbol} {quest.title}  [{quest.id[:8]}]"


def _resolve(engine: QuestEngine, ref: list[str]) -> Quest:
    item_ref = " ".join(ref) if ref else ""
    if not item_ref:
        exit_error("Usage: questlog <command> <quest>")
    quest = find_quest(engine.repo, item_ref)
    if not quest:
        exit_error(f"No quest found: '{item_ref}'")
    return quest


# ── cli ──────────────────────────────────────────────────────────────────────


@cli("questlog", name="add", flags={"every": ["-e", "--every"], "due": ["-d", "--due"]})
def add_cmd(title: list[str], every: str = "once", due: str | None = None) -> None:
    """Add a quest"""
    title_str = " ".join(title) if title else ""
    if not title_str:
        exit_error("Usage: questlog add <title> [-e daily|weekly|mon,wed] [-d due]")
    due_at = None
    if due:
        due_at = parse_due(due)
        if due_at is None:
            raise ValidationError(f"could not parse due date '{due}'")
    engine = default_engine()
    quest = add_quest(engine.repo, title_str, parse_recurrence(every), due=due_at)
    echo(f"{format_status(quest)}  {describe_recurrence(quest.recurrence)}")


@cli("questlog", name="ls")
def ls() -> None:
    """List quests with their current state"""
    engine = default_engine()
    engine.refresh_all(workers=config.get_refresh_workers())
    quests = get_quests(engine.repo)
    if not quests:
        echo("no quests")
        return
    for quest in quests:
        echo(f"{format_status(quest)}  {describe_recurrence(quest.recurrence)}")


@cli("questlog")
def done(ref: list[str]) -> None:
    """Mark the current occurrence of a quest done"""
    engine = default_engine()
    quest = engine.mark_completed(_resolve(engine, ref).id)
    echo(format_status(quest))


@cli("questlog")
def undo(ref: list[str]) -> None:
    """Clear the current occurrence of a quest"""
    engine = default_engine()
    quest = engine.unmark_completed(_resolve(engine, ref).id)
    echo(format_status(quest))


@cli("questlog")
def rm(ref: list[str]) -> None:
    """Delete a quest and its history"""
    engine = default_engine()
    quest = _resolve(engine, ref)
    delete_quest(engine.repo, quest.id)
    echo(f"removed: {quest.title}")


@cli("questlog")
def streak(ref: list[str]) -> None:
    """Show the current day streak of a quest"""
    engine = default_engine()
    quest = _resolve(engine, ref)
    echo(f"{quest.title}: {engine.current_streak(quest.id)}d")


@cli("questlog")
def refresh() -> None:
    """Recompute cached state for every quest"""
    report = default_engine().refresh_all(workers=config.get_refresh_workers())
    echo(f"refreshed {len(report.refreshed)}")
    for quest_id, error in report.failed.items():
        echo(f"  {quest_id[:8]} failed: {error}")
