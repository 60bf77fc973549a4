"""Task service - Business logic for task operations.

Every mutation goes to the repository first and publishes its event on the
bus only once the store has confirmed it, so listeners never refetch ahead
of the write.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from taskflow.models import (
    Comment,
    Task,
    TaskCreate,
    TaskFilters,
    TaskStatus,
    TaskUpdate,
    normalize_status,
)
from taskflow.models.exceptions import ValidationError
from taskflow.repositories import TaskRepository
from taskflow.sync import selectors
from taskflow.sync.events import (
    EventBus,
    TaskCreated,
    TaskDeleted,
    TasksBulkDeleted,
    TasksBulkUpdated,
    TaskStatusChanged,
    TaskUpdated,
)
from taskflow.sync.task_cache import TaskCache
from taskflow.utils.logger import get_logger

logger = get_logger("services.tasks")

M = TypeVar("M", bound=BaseModel)


def build_model(model_cls: type[M], **data: Any) -> M:
    """Validate ``data`` into ``model_cls``, raising TaskFlow's ValidationError."""
    try:
        return model_cls(**data)
    except PydanticValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'task'}: {err['msg']}" for err in e.errors()
        )
        raise ValidationError(f"Invalid task data: {details}") from e


def parse_status(value: str | TaskStatus) -> TaskStatus:
    try:
        return normalize_status(value)
    except ValueError as e:
        raise ValidationError(f"Unknown status: {value}") from e


class TaskService:
    """Service for task business logic.

    Args:
        task_repository: Store the tasks live in
        bus: Event bus mutations are announced on
        cache: Optional task cache, used to fill event details (previous
            status, deleted title) without another store round trip
    """

    def __init__(
        self,
        task_repository: TaskRepository,
        bus: EventBus,
        cache: TaskCache | None = None,
    ):
        self.repository = task_repository
        self.bus = bus
        self.cache = cache

    def _cached(self, task_id: int) -> Task | None:
        if self.cache is None:
            return None
        return selectors.find_task(self.cache.get_tasks().tasks, task_id)

    async def list_tasks(self, **filters: Any) -> list[Task]:
        """List tasks straight from the store.

        Keyword arguments are TaskFilters fields (status, priority, category,
        assigned_to, start_date, end_date, search).
        """
        return await self.repository.list_all(build_model(TaskFilters, **filters))

    async def get_task(self, task_id: int) -> Task:
        return await self.repository.get(task_id)

    async def create_task(self, title: str, *, assigned_to: int, **fields: Any) -> Task:
        """Create a task and publish ``task_created``.

        Args:
            title: Task title (required, non-empty)
            assigned_to: Assignee user ID
            **fields: Optional TaskCreate fields (category, priority,
                work_date, due_date, is_follow_up_task, parent_task_id, ...)

        Returns:
            The task as stored
        """
        data = build_model(TaskCreate, title=title, assigned_to=assigned_to, **fields)
        task = await self.repository.add(data)
        logger.info("created task %s", task.id)
        self.bus.publish(TaskCreated(task=task))
        return task

    async def update_task(self, task_id: int, **changes: Any) -> Task:
        """Apply a partial update and publish ``task_updated``."""
        updates = build_model(TaskUpdate, **changes)
        if not updates.changes():
            raise ValidationError("No changes given")
        task = await self.repository.update(task_id, updates)
        logger.info("updated task %s: %s", task_id, ", ".join(updates.changes()))
        self.bus.publish(TaskUpdated(task=task))
        return task

    async def change_status(self, task_id: int, status: str | TaskStatus) -> Task:
        """Change the status and publish ``task_status_changed``."""
        new_status = parse_status(status)
        cached = self._cached(task_id)
        previous = cached.status if cached is not None else None
        task = await self.repository.change_status(task_id, new_status)
        logger.info("task %s status %s -> %s", task_id, previous, new_status.value)
        self.bus.publish(
            TaskStatusChanged(task_id=task_id, status=task.status, previous_status=previous)
        )
        return task

    async def delete_task(self, task_id: int) -> None:
        """Delete a task and publish ``task_deleted``."""
        cached = self._cached(task_id)
        await self.repository.delete(task_id)
        logger.info("deleted task %s", task_id)
        self.bus.publish(
            TaskDeleted(task_id=task_id, title=cached.title if cached is not None else None)
        )

    async def bulk_update(self, task_ids: list[int], **changes: Any) -> list[Task]:
        """Apply one update to several tasks and publish ``tasks_bulk_updated``."""
        if not task_ids:
            raise ValidationError("선택된 업무가 없습니다.")
        updates = build_model(TaskUpdate, **changes)
        if not updates.changes():
            raise ValidationError("No changes given")
        tasks = await self.repository.bulk_update(list(task_ids), updates)
        logger.info("bulk updated %d task(s)", len(tasks))
        self.bus.publish(TasksBulkUpdated(task_ids=tuple(task_ids)))
        return tasks

    async def bulk_delete(self, task_ids: list[int]) -> int:
        """Delete several tasks and publish ``tasks_bulk_deleted``."""
        if not task_ids:
            raise ValidationError("선택된 업무가 없습니다.")
        deleted = await self.repository.bulk_delete(list(task_ids))
        logger.info("bulk deleted %d of %d task(s)", deleted, len(task_ids))
        self.bus.publish(TasksBulkDeleted(task_ids=tuple(task_ids)))
        return deleted

    async def import_tasks(self, tasks: list[TaskCreate]) -> int:
        """Create spreadsheet rows in one request and publish ``tasks_bulk_updated``.

        The store does not report the new ids, so the event carries none.
        """
        if not tasks:
            raise ValidationError("가져올 업무가 없습니다.")
        created = await self.repository.bulk_create(list(tasks))
        logger.info("imported %d of %d task(s)", created, len(tasks))
        self.bus.publish(TasksBulkUpdated(task_ids=()))
        return created

    async def list_follow_ups(self) -> list[Task]:
        """Follow-ups awaiting the current user's confirmation."""
        return await self.repository.list_follow_ups()

    async def confirm_follow_up(self, task_id: int) -> Task:
        """Accept a follow-up; it joins the regular list (``task_updated``)."""
        task = await self.repository.confirm(task_id)
        logger.info("confirmed follow-up task %s", task_id)
        self.bus.publish(TaskUpdated(task=task))
        return task

    async def reject_follow_up(self, task_id: int, reason: str | None = None) -> Task:
        """Reject a follow-up; it becomes cancelled (``task_status_changed``)."""
        task = await self.repository.reject(task_id, reason)
        logger.info("rejected follow-up task %s", task_id)
        self.bus.publish(
            TaskStatusChanged(
                task_id=task_id, status=task.status, previous_status=TaskStatus.SCHEDULED
            )
        )
        return task

    async def list_comments(self, task_id: int) -> list[Comment]:
        return await self.repository.list_comments(task_id)

    async def add_comment(self, task_id: int, content: str) -> Comment:
        if not content or not content.strip():
            raise ValidationError("댓글 내용을 입력하세요.")
        return await self.repository.add_comment(task_id, content.strip())
