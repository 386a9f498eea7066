import dataclasses
from datetime import datetime

import pytest

from questlog.core.errors import ValidationError
from questlog.core.models import Daily, Quest, RefreshReport, Scheduled


def test_scheduled_normalises_to_frozenset():
    policy = Scheduled({1, 3, 5})  # type: ignore[arg-type]
    assert policy.weekdays == frozenset({1, 3, 5})
    assert policy == Scheduled(frozenset({5, 3, 1}))


def test_scheduled_rejects_out_of_range_weekday():
    with pytest.raises(ValidationError):
        Scheduled(frozenset({0, 3}))


def test_scheduled_rejects_empty():
    with pytest.raises(ValidationError):
        Scheduled(frozenset())


def test_scheduled_days_only_for_scheduled():
    created = datetime(2025, 3, 1)
    assert Quest(id="a", title="run", created=created, recurrence=Daily()).scheduled_days == frozenset()
    quest = Quest(id="b", title="gym", created=created, recurrence=Scheduled(frozenset({2, 4})))
    assert quest.scheduled_days == frozenset({2, 4})


def test_new_quest_defaults():
    quest = Quest(id="a", title="read", created=datetime(2025, 3, 1))
    assert quest.is_active
    assert not quest.is_completed
    assert quest.completed_at is None


def test_quest_is_frozen():
    quest = Quest(id="a", title="read", created=datetime(2025, 3, 1))
    with pytest.raises(dataclasses.FrozenInstanceError):
        quest.is_active = False  # type: ignore[misc]


def test_refresh_report_ok():
    report = RefreshReport()
    assert report.ok
    report.failed["x"] = RuntimeError("boom")
    assert not report.ok
