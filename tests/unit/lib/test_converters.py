from datetime import datetime

import pytest

from questlog.core.errors import ValidationError
from questlog.core.models import Daily, OneTime, Quest, Scheduled, Weekly
from questlog.lib.converters import (
    _parse_datetime,
    _parse_datetime_optional,
    parse_weekdays,
    quest_to_row,
    recurrence_from_columns,
    recurrence_to_columns,
    row_to_quest,
)


def test_parse_datetime_from_date_string():
    assert _parse_datetime("2025-10-30") == datetime(2025, 10, 30)


def test_parse_datetime_empty_string():
    assert _parse_datetime("") == datetime.min


def test_parse_datetime_optional_blank():
    assert _parse_datetime_optional(None) is None
    assert _parse_datetime_optional("") is None


def test_parse_weekdays():
    assert parse_weekdays("1,3, 5,") == frozenset({1, 3, 5})
    assert parse_weekdays(None) == frozenset()


def test_parse_weekdays_garbage():
    with pytest.raises(ValidationError):
        parse_weekdays("mon,wed")


@pytest.mark.parametrize(
    ("recurrence", "columns"),
    [
        (OneTime(), ("one_time", None)),
        (Daily(), ("daily", None)),
        (Weekly(), ("weekly", None)),
        (Scheduled(frozenset({5, 1, 3})), ("scheduled", "1,3,5")),
    ],
)
def test_recurrence_columns(recurrence, columns):
    assert recurrence_to_columns(recurrence) == columns
    assert recurrence_from_columns(*columns) == recurrence


def test_unknown_repeat_type():
    with pytest.raises(ValidationError):
        recurrence_from_columns("monthly", None)


def test_row_to_quest():
    row = (
        "q1",
        "gym",
        "2025-03-01T08:00:00",
        "2025-06-01T23:59:59",
        "scheduled",
        "1,3,5",
        0,
        1,
        "2025-03-12T07:15:00",
    )
    quest = row_to_quest(row)
    assert quest == Quest(
        id="q1",
        title="gym",
        created=datetime(2025, 3, 1, 8),
        due=datetime(2025, 6, 1, 23, 59, 59),
        recurrence=Scheduled(frozenset({1, 3, 5})),
        is_active=False,
        is_completed=True,
        completed_at=datetime(2025, 3, 12, 7, 15),
    )
    assert quest_to_row(quest) == row
