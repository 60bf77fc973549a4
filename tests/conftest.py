"""Shared test fixtures.

Provides an in-memory task repository, task builders and config isolation so
tests never touch the real config, data directory or TaskFlow server.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, date, datetime
from unittest.mock import patch

import pytest

from taskflow.models import (
    Comment,
    Task,
    TaskCreate,
    TaskFilters,
    TaskStatus,
    TaskUpdate,
)
from taskflow.models.exceptions import TaskNotFoundError
from taskflow.repositories import TaskRepository
from taskflow.sync.events import EventBus
from taskflow.sync.task_cache import TaskCache


def make_task(task_id: int = 1, **overrides) -> Task:
    """Build a valid Task with sensible defaults."""
    data = {
        "id": task_id,
        "title": f"Task {task_id}",
        "category": "일반",
        "status": TaskStatus.SCHEDULED,
        "assigned_to": 1,
        "created_by": 1,
        "work_date": date(2026, 10, 14),
        "created_at": datetime(2026, 10, 1, 9, 0, tzinfo=UTC),
        "updated_at": datetime(2026, 10, 1, 9, 0, tzinfo=UTC),
    }
    data.update(overrides)
    return Task(**data)


class FakeTaskRepository(TaskRepository):
    """In-memory TaskRepository with knobs for latency and failures.

    Attributes:
        list_calls: Number of list_all() calls (store fetches)
        gate: When set, list_all() waits on it before answering with the
            tasks stored at call time
        fail_with: When set, list_all() raises it
    """

    def __init__(self, tasks: list[Task] | None = None):
        self.tasks: dict[int, Task] = {t.id: t for t in tasks or []}
        self.list_calls = 0
        self.gate: asyncio.Event | None = None
        self.fail_with: Exception | None = None
        self.comments: list[Comment] = []
        self._next_id = max(self.tasks, default=0) + 1

    def _require(self, task_id: int) -> Task:
        if task_id not in self.tasks:
            raise TaskNotFoundError(f"Task not found: {task_id}")
        return self.tasks[task_id]

    async def list_all(self, filters: TaskFilters | None = None) -> list[Task]:
        self.list_calls += 1
        # The answer reflects the store when the request arrived
        visible = [
            t for t in sorted(self.tasks.values(), key=lambda t: t.id) if not t.awaiting_confirmation
        ]
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        return visible

    async def get(self, task_id: int) -> Task:
        return self._require(task_id)

    async def add(self, task_data: TaskCreate) -> Task:
        task = Task(id=self._next_id, created_by=1, **task_data.model_dump())
        self._next_id += 1
        self.tasks[task.id] = task
        return task

    async def update(self, task_id: int, updates: TaskUpdate) -> Task:
        task = self._require(task_id).model_copy(update=updates.changes())
        self.tasks[task_id] = task
        return task

    async def change_status(self, task_id: int, status: TaskStatus) -> Task:
        return await self.update(task_id, TaskUpdate(status=status))

    async def delete(self, task_id: int) -> bool:
        self._require(task_id)
        del self.tasks[task_id]
        return True

    async def bulk_update(self, task_ids: list[int], updates: TaskUpdate) -> list[Task]:
        return [await self.update(task_id, updates) for task_id in task_ids]

    async def bulk_create(self, tasks: list[TaskCreate]) -> int:
        for task_data in tasks:
            await self.add(task_data)
        return len(tasks)

    async def bulk_delete(self, task_ids: list[int]) -> int:
        removed = [task_id for task_id in task_ids if self.tasks.pop(task_id, None)]
        return len(removed)

    async def list_follow_ups(self) -> list[Task]:
        return [t for t in self.tasks.values() if t.awaiting_confirmation]

    async def confirm(self, task_id: int) -> Task:
        task = self._require(task_id).model_copy(
            update={"confirmation_completed_at": datetime.now(UTC)}
        )
        self.tasks[task_id] = task
        return task

    async def reject(self, task_id: int, reason: str | None = None) -> Task:
        task = self._require(task_id).model_copy(
            update={"status": TaskStatus.CANCELLED, "memo": f"반려사유: {reason or '사유 없음'}"}
        )
        self.tasks[task_id] = task
        return task

    async def list_comments(self, task_id: int) -> list[Comment]:
        return [c for c in self.comments if c.task_id == task_id]

    async def add_comment(self, task_id: int, content: str) -> Comment:
        self._require(task_id)
        comment = Comment(id=len(self.comments) + 1, task_id=task_id, user_id=1, content=content)
        self.comments.append(comment)
        return comment


@pytest.fixture
def task_factory():
    return make_task


@pytest.fixture
def fake_repo():
    return FakeTaskRepository([make_task(1), make_task(2), make_task(3)])


@pytest.fixture
def empty_repo():
    return FakeTaskRepository()


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def cache(fake_repo):
    return TaskCache(fake_repo)


@pytest.fixture
def bound_cache(cache, bus):
    cache.bind(bus)
    return cache


@pytest.fixture()
def tmp_config(tmp_path):
    """A real ConfigService whose config and data directories live in tmp_path."""
    from taskflow.services.config_service import ConfigService, get_config_service

    get_config_service.cache_clear()
    data_dir = tmp_path / "data"
    with patch(
        "taskflow.services.config_service.user_data_dir", return_value=str(data_dir)
    ):
        svc = ConfigService(config_dir=tmp_path / "config")
        svc.load_config()
        yield svc
    get_config_service.cache_clear()


@pytest.fixture
def repo_factory():
    """Build a FakeTaskRepository from a list of tasks."""
    return FakeTaskRepository
