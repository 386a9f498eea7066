"""questlog:// links fired from outside the app (widgets, shortcuts, other processes).

    questlog://complete?id=<quest id>[&on=YYYY-MM-DD]
    questlog://uncomplete?id=<quest id>[&on=YYYY-MM-DD]
    questlog://toggle?id=<quest id>[&on=YYYY-MM-DD]
    questlog://refresh[?id=<quest id>]

Links go through QuestEngine like any in-app action, so they take the same
per-quest lock and the same idempotent mark/unmark path.
"""

import dataclasses
from datetime import date
from typing import Literal
from urllib.parse import parse_qs, urlsplit

from fncli import cli

from .core.errors import ValidationError
from .core.models import Quest, RefreshReport
from .engine import QuestEngine
from .lib.errors import echo

__all__ = ["Link", "handle_link", "parse_link"]

SCHEME = "questlog"

Action = Literal["complete", "uncomplete", "toggle", "refresh"]
_ACTIONS: tuple[Action, ...] = ("complete", "uncomplete", "toggle", "refresh")


@dataclasses.dataclass(frozen=True)
class Link:
    action: Action
    quest_id: str | None = None
    on: date | None = None


def _single(params: dict[str, list[str]], key: str) -> str | None:
    values = params.get(key)
    return values[0].strip() if values and values[0].strip() else None


def parse_link(url: str) -> Link:
    parts = urlsplit(url.strip())
    if parts.scheme != SCHEME:
        raise ValidationError(f"not a {SCHEME}:// link: '{url}'")
    action = parts.netloc or parts.path.strip("/")
    if action not in _ACTIONS:
        raise ValidationError(f"unknown link action '{action}'")

    params = parse_qs(parts.query)
    quest_id = _single(params, "id")
    on_raw = _single(params, "on")
    try:
        on = date.fromisoformat(on_raw) if on_raw else None
    except ValueError as e:
        raise ValidationError(f"bad date in link: '{on_raw}'") from e

    if action != "refresh" and quest_id is None:
        raise ValidationError(f"link action '{action}' needs an id")
    return Link(action=action, quest_id=quest_id, on=on)


def handle_link(engine: QuestEngine, url: str) -> Quest | RefreshReport:
    link = parse_link(url)
    engine.log.info("link {} quest={} on={}", link.action, link.quest_id, link.on)
    match link.action:
        case "refresh" if link.quest_id is None:
            return engine.refresh_all()
        case "refresh":
            return engine.refresh_one(link.quest_id)
        case "complete":
            return engine.mark_completed(link.quest_id, link.on)
        case "uncomplete":
            return engine.unmark_completed(link.quest_id, link.on)
        case "toggle":
            return engine.toggle(link.quest_id, link.on)
    raise ValidationError(f"unknown link action '{link.action}'")


@cli("questlog", name="open")
def open_link(url: str) -> None:
    """Handle a questlog:// link"""
    from .quests import default_engine, format_status

    result = handle_link(default_engine(), url)
    if isinstance(result, RefreshReport):
        echo(f"refreshed {len(result.refreshed)}")
    else:
        echo(format_status(result))
