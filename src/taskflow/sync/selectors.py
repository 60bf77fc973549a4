"""Pure functions deriving view data from a task snapshot."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta

from taskflow.models import Task, TaskFilters, TaskStatus


def filter_tasks(tasks: Iterable[Task], filters: TaskFilters | None) -> list[Task]:
    """Apply list filters client-side.

    ``search`` matches title, description and category, case-insensitively.
    Date bounds are inclusive and compare against ``work_date``; tasks
    without a work date never match a date bound.
    """
    if filters is None:
        return list(tasks)

    needle = filters.search.strip().lower() if filters.search else ""
    result = []
    for task in tasks:
        if filters.status is not None and task.status != filters.status:
            continue
        if filters.priority is not None and task.priority != filters.priority:
            continue
        if filters.category and task.category != filters.category:
            continue
        if filters.assigned_to is not None and task.assigned_to != filters.assigned_to:
            continue
        if filters.start_date or filters.end_date:
            if task.work_date is None:
                continue
            if filters.start_date and task.work_date < filters.start_date:
                continue
            if filters.end_date and task.work_date > filters.end_date:
                continue
        if needle:
            haystack = " ".join(
                part for part in (task.title, task.description, task.category) if part
            ).lower()
            if needle not in haystack:
                continue
        result.append(task)
    return result


def count_by_status(tasks: Iterable[Task]) -> dict[TaskStatus, int]:
    """Count per status; every status is present, possibly with 0."""
    counts = {status: 0 for status in TaskStatus}
    for task in tasks:
        counts[task.status] += 1
    return counts


def tasks_in_range(tasks: Iterable[Task], start: date, end: date) -> list[Task]:
    """Tasks whose work date falls in ``[start, end]``."""
    return [t for t in tasks if t.work_date is not None and start <= t.work_date <= end]


def tasks_for_day(tasks: Iterable[Task], day: date) -> list[Task]:
    return tasks_in_range(tasks, day, day)


def week_bounds(day: date) -> tuple[date, date]:
    """Monday and Sunday of the week containing ``day``."""
    monday = day - timedelta(days=day.weekday())
    return monday, monday + timedelta(days=6)


def find_task(tasks: Iterable[Task], task_id: int) -> Task | None:
    for task in tasks:
        if task.id == task_id:
            return task
    return None


def completion_rate(tasks: Iterable[Task]) -> float:
    """Percentage of completed tasks, 0.0 for an empty list."""
    tasks = list(tasks)
    if not tasks:
        return 0.0
    done = sum(1 for task in tasks if task.status == TaskStatus.COMPLETED)
    return round(done * 100.0 / len(tasks), 1)
