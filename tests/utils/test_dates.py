"""Tests for lenient task date parsing."""

from datetime import UTC, date, datetime, timedelta

import pytest

from taskflow.models import Task
from taskflow.utils.dates import (
    format_date,
    format_datetime,
    parse_task_date,
    parse_task_datetime,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2026-10-14T09:30:00Z", datetime(2026, 10, 14, 9, 30, tzinfo=UTC)),
        ("2026-10-14", datetime(2026, 10, 14, tzinfo=UTC)),
        ("2026-10-14T09:00:00", datetime(2026, 10, 14, 9, tzinfo=UTC)),
        (datetime(2026, 10, 14, 9), datetime(2026, 10, 14, 9, tzinfo=UTC)),
        (date(2026, 10, 14), datetime(2026, 10, 14, tzinfo=UTC)),
        (1_790_000_000_000, datetime.fromtimestamp(1_790_000_000, UTC)),
    ],
)
def test_parse_valid_values(value, expected):
    assert parse_task_datetime(value) == expected


@pytest.mark.parametrize("value", [None, "", "   "])
def test_empty_values_parse_to_none(value):
    assert parse_task_datetime(value) is None


@pytest.mark.parametrize("value", ["not-a-date", "2026-13-45", ["2026-10-14"], float("inf")])
def test_malformed_values_fall_back_to_now(value):
    before = datetime.now(UTC)
    parsed = parse_task_datetime(value, field="due_date", task_id=7)
    assert before - timedelta(seconds=1) <= parsed <= datetime.now(UTC) + timedelta(seconds=1)


def test_task_with_malformed_dates_still_validates():
    task = Task.model_validate(
        {"id": 9, "title": "Imported", "assignedTo": 1, "createdAt": "yesterday", "workDate": "??"}
    )
    assert task.created_at.tzinfo is not None
    assert task.work_date == datetime.now(UTC).date()


def test_parse_task_date_keeps_plain_dates():
    assert parse_task_date(date(2026, 1, 2)) == date(2026, 1, 2)
    assert parse_task_date("2026-01-02T23:00:00") == date(2026, 1, 2)


def test_formatting():
    assert format_date(None) == ""
    assert format_date(date(2026, 10, 14)) == "2026-10-14"
    assert format_datetime(datetime(2026, 10, 14, 9, 5)) == "2026-10-14 09:05"


def test_naive_and_fallback_values_compare():
    naive = parse_task_datetime("2020-01-06T09:00:00")
    fallback = parse_task_datetime("not-a-date")
    assert naive.tzinfo is UTC
    assert naive < fallback
