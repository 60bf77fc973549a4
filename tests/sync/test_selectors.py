"""Tests for the pure snapshot selectors."""

from datetime import date

import pytest

from taskflow.models import TaskFilters, TaskPriority, TaskStatus
from taskflow.sync import selectors


@pytest.fixture
def tasks(task_factory):
    return [
        task_factory(1, title="Write report", category="보고", work_date=date(2026, 10, 12)),
        task_factory(
            2,
            title="Site visit",
            description="Check the budget",
            status=TaskStatus.COMPLETED,
            priority=TaskPriority.HIGH,
            work_date=date(2026, 10, 14),
        ),
        task_factory(3, title="Call vendor", assigned_to=2, work_date=None),
        task_factory(4, title="Weekend cleanup", work_date=date(2026, 10, 18)),
    ]


def test_no_filters_returns_everything(tasks):
    assert selectors.filter_tasks(tasks, None) == tasks
    assert selectors.filter_tasks(tasks, TaskFilters()) == tasks


def test_filter_by_fields(tasks):
    assert [t.id for t in selectors.filter_tasks(tasks, TaskFilters(status="completed"))] == [2]
    assert [t.id for t in selectors.filter_tasks(tasks, TaskFilters(category="보고"))] == [1]
    assert [t.id for t in selectors.filter_tasks(tasks, TaskFilters(assigned_to=2))] == [3]
    assert [
        t.id for t in selectors.filter_tasks(tasks, TaskFilters(priority=TaskPriority.HIGH))
    ] == [2]


def test_search_covers_description_case_insensitively(tasks):
    assert [t.id for t in selectors.filter_tasks(tasks, TaskFilters(search="BUDGET"))] == [2]


def test_date_bounds_skip_tasks_without_work_date(tasks):
    filters = TaskFilters(start_date=date(2026, 10, 13))
    assert [t.id for t in selectors.filter_tasks(tasks, filters)] == [2, 4]

    filters = TaskFilters(start_date=date(2026, 10, 12), end_date=date(2026, 10, 14))
    assert [t.id for t in selectors.filter_tasks(tasks, filters)] == [1, 2]


def test_count_by_status_includes_every_status(tasks):
    counts = selectors.count_by_status(tasks)
    assert set(counts) == set(TaskStatus)
    assert counts[TaskStatus.SCHEDULED] == 3
    assert counts[TaskStatus.COMPLETED] == 1
    assert counts[TaskStatus.CANCELLED] == 0


def test_count_by_status_empty():
    assert all(count == 0 for count in selectors.count_by_status([]).values())


@pytest.mark.parametrize(
    "day",
    [date(2026, 10, 12), date(2026, 10, 15), date(2026, 10, 18)],
)
def test_week_bounds_monday_to_sunday(day):
    assert selectors.week_bounds(day) == (date(2026, 10, 12), date(2026, 10, 18))


def test_tasks_for_day_and_range(tasks):
    assert [t.id for t in selectors.tasks_for_day(tasks, date(2026, 10, 14))] == [2]
    week = selectors.tasks_in_range(tasks, date(2026, 10, 12), date(2026, 10, 18))
    assert [t.id for t in week] == [1, 2, 4]


def test_find_task(tasks):
    assert selectors.find_task(tasks, 3).title == "Call vendor"
    assert selectors.find_task(tasks, 99) is None


def test_completion_rate(tasks):
    assert selectors.completion_rate(tasks) == 25.0
    assert selectors.completion_rate([]) == 0.0
