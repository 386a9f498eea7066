from datetime import date, datetime

import pytest

from questlog.completions import CompletionLog
from questlog.core.errors import NotFoundError
from questlog.core.models import Daily, Quest, Weekly
from tests.helpers import completion_count


@pytest.fixture
def log(memory_repo, calendar):
    return CompletionLog(memory_repo, calendar)


@pytest.fixture
def daily(memory_repo):
    quest = Quest(id="daily-1", title="stretch", created=datetime(2025, 3, 1), recurrence=Daily())
    memory_repo.save_quest(quest)
    return quest


def test_mark_records_completion(log, daily):
    anchor = date(2025, 3, 12)
    updated = log.mark_completed(daily.id, anchor, at=datetime(2025, 3, 12, 7, 30))

    assert log.is_completed(daily.id, anchor)
    assert updated.is_completed
    assert updated.completed_at == datetime(2025, 3, 12, 7, 30)


def test_mark_twice_keeps_one_record(log, daily, memory_repo):
    anchor = date(2025, 3, 12)
    first = log.mark_completed(daily.id, anchor, at=datetime(2025, 3, 12, 8))
    second = log.mark_completed(daily.id, anchor, at=datetime(2025, 3, 12, 8))

    assert completion_count(memory_repo, daily.id) == 1
    assert first.is_completed == second.is_completed is True
    assert log.dates_in_range(daily.id, anchor, anchor) == [anchor]


def test_repeated_toggles_never_duplicate(log, daily, memory_repo):
    anchor = date(2025, 3, 12)
    for _ in range(50):
        log.mark_completed(daily.id, anchor)
        log.mark_completed(daily.id, anchor)
        log.unmark_completed(daily.id, anchor)
        log.mark_completed(daily.id, anchor)
    assert completion_count(memory_repo, daily.id) == 1
    assert log.count(daily.id, anchor, anchor) == 1


def test_mark_then_unmark_round_trip(log, daily):
    anchor = date(2025, 3, 12)
    log.mark_completed(daily.id, anchor)
    updated = log.unmark_completed(daily.id, anchor)

    assert not log.is_completed(daily.id, anchor)
    assert not updated.is_completed
    assert log.dates_in_range(daily.id, date(2025, 3, 1), date(2025, 3, 31)) == []


def test_unmark_absent_is_noop(log, daily, memory_repo):
    updated = log.unmark_completed(daily.id, date(2025, 3, 12))
    assert not updated.is_completed
    assert completion_count(memory_repo, daily.id) == 0


def test_unmark_keeps_last_completed_at(log, daily):
    anchor = date(2025, 3, 12)
    log.mark_completed(daily.id, anchor, at=datetime(2025, 3, 12, 8))
    updated = log.unmark_completed(daily.id, anchor)
    assert updated.completed_at == datetime(2025, 3, 12, 8)


def test_range_queries_inclusive_and_sorted(log, daily):
    for day in (14, 10, 12, 11):
        log.mark_completed(daily.id, date(2025, 3, day))

    assert log.dates_in_range(daily.id, date(2025, 3, 11), date(2025, 3, 14)) == [
        date(2025, 3, 11),
        date(2025, 3, 12),
        date(2025, 3, 14),
    ]
    assert log.count(daily.id, date(2025, 3, 10), date(2025, 3, 12)) == 3


def test_range_bounds_are_normalised_to_days(log, daily):
    log.mark_completed(daily.id, date(2025, 3, 12))
    assert log.count(daily.id, datetime(2025, 3, 12, 18), datetime(2025, 3, 12, 6)) == 1


def test_is_completed_this_week(log, memory_repo):
    weekly = Quest(id="w", title="laundry", created=datetime(2025, 3, 1), recurrence=Weekly())
    memory_repo.save_quest(weekly)
    log.mark_completed(weekly.id, date(2025, 3, 10))

    assert log.is_completed_this_week(weekly.id, datetime(2025, 3, 16, 20))
    assert not log.is_completed_this_week(weekly.id, datetime(2025, 3, 17, 8))


def test_mark_unknown_quest(log):
    with pytest.raises(NotFoundError):
        log.mark_completed("missing", date(2025, 3, 12))


def test_unmark_unknown_quest(log):
    with pytest.raises(NotFoundError):
        log.unmark_completed("missing", date(2025, 3, 12))


def test_logs_only_real_changes(memory_repo, calendar, daily):
    messages: list[str] = []

    class Recorder:
        def debug(self, msg, *args):
            messages.append(msg.format(*args))

    log = CompletionLog(memory_repo, calendar, log=Recorder())
    log.mark_completed(daily.id, date(2025, 3, 12))
    log.mark_completed(daily.id, date(2025, 3, 12))
    log.unmark_completed(daily.id, date(2025, 3, 12))
    log.unmark_completed(daily.id, date(2025, 3, 12))

    assert messages == [
        "completion recorded quest=daily-1 anchor=2025-03-12",
        "completion removed quest=daily-1 anchor=2025-03-12",
    ]
