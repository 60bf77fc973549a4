"""Repository abstraction layer for TaskFlow.

Abstract base classes (ports) for the task store. Concrete adapters live in
``taskflow.adapters.rest_api`` (TaskFlow HTTP API) and
``taskflow.adapters.sqlite`` (local data directory). Services and the task
cache only ever talk to these interfaces.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from taskflow.models import (
    Attachment,
    Comment,
    Notification,
    Task,
    TaskCreate,
    TaskFilters,
    TaskStatus,
    TaskUpdate,
)


class TaskRepository(ABC):
    """Abstract base class for task persistence operations.

    All mutations return the task as stored by the backend so callers never
    have to guess server-side defaults.
    """

    @abstractmethod
    async def list_all(self, filters: TaskFilters | None = None) -> list[Task]:
        """List every task visible to the current user.

        Follow-ups still awaiting confirmation are excluded; they are listed
        by :meth:`list_follow_ups` instead.

        Args:
            filters: Optional server-side filters

        Returns:
            List of Task objects, newest work date first
        """
        raise NotImplementedError("TaskRepository.list_all() must be implemented by adapter")

    @abstractmethod
    async def get(self, task_id: int) -> Task:
        """Get a task by ID.

        Raises:
            TaskNotFoundError: If the task does not exist
        """
        raise NotImplementedError("TaskRepository.get() must be implemented by adapter")

    @abstractmethod
    async def add(self, task_data: TaskCreate) -> Task:
        """Create a task and return it with its assigned ID."""
        raise NotImplementedError("TaskRepository.add() must be implemented by adapter")

    @abstractmethod
    async def update(self, task_id: int, updates: TaskUpdate) -> Task:
        """Apply a partial update.

        Raises:
            TaskNotFoundError: If the task does not exist
        """
        raise NotImplementedError("TaskRepository.update() must be implemented by adapter")

    @abstractmethod
    async def change_status(self, task_id: int, status: TaskStatus) -> Task:
        """Change only the status of a task."""
        raise NotImplementedError(
            "TaskRepository.change_status() must be implemented by adapter"
        )

    @abstractmethod
    async def delete(self, task_id: int) -> bool:
        """Delete a task. Returns True when the store removed it."""
        raise NotImplementedError("TaskRepository.delete() must be implemented by adapter")

    @abstractmethod
    async def bulk_update(self, task_ids: list[int], updates: TaskUpdate) -> list[Task]:
        """Apply the same update to several tasks."""
        raise NotImplementedError(
            "TaskRepository.bulk_update() must be implemented by adapter"
        )

    @abstractmethod
    async def bulk_create(self, tasks: list[TaskCreate]) -> int:
        """Create several tasks in one request. Returns the number created."""
        raise NotImplementedError(
            "TaskRepository.bulk_create() must be implemented by adapter"
        )

    @abstractmethod
    async def bulk_delete(self, task_ids: list[int]) -> int:
        """Delete several tasks. Returns the number removed."""
        raise NotImplementedError(
            "TaskRepository.bulk_delete() must be implemented by adapter"
        )

    @abstractmethod
    async def list_follow_ups(self) -> list[Task]:
        """Follow-up tasks assigned to the current user awaiting confirmation."""
        raise NotImplementedError(
            "TaskRepository.list_follow_ups() must be implemented by adapter"
        )

    @abstractmethod
    async def confirm(self, task_id: int) -> Task:
        """Confirm a follow-up task (moves it into the regular task list)."""
        raise NotImplementedError("TaskRepository.confirm() must be implemented by adapter")

    @abstractmethod
    async def reject(self, task_id: int, reason: str | None = None) -> Task:
        """Reject a follow-up task (cancels it, recording the reason)."""
        raise NotImplementedError("TaskRepository.reject() must be implemented by adapter")

    @abstractmethod
    async def list_comments(self, task_id: int) -> list[Comment]:
        """Comments on a task, oldest first."""
        raise NotImplementedError(
            "TaskRepository.list_comments() must be implemented by adapter"
        )

    @abstractmethod
    async def add_comment(self, task_id: int, content: str) -> Comment:
        """Add a comment to a task."""
        raise NotImplementedError(
            "TaskRepository.add_comment() must be implemented by adapter"
        )


class NotificationRepository(ABC):
    """Abstract base class for notification access.

    Notifications are created by the server only; clients list them and mark
    them read.
    """

    @abstractmethod
    async def list_all(self, *, unread_only: bool = False) -> list[Notification]:
        """Notifications for the current user, newest first."""
        raise NotImplementedError(
            "NotificationRepository.list_all() must be implemented by adapter"
        )

    @abstractmethod
    async def mark_read(self, notification_id: int) -> bool:
        """Mark one notification read."""
        raise NotImplementedError(
            "NotificationRepository.mark_read() must be implemented by adapter"
        )

    @abstractmethod
    async def mark_all_read(self) -> int:
        """Mark all notifications read. Returns how many changed."""
        raise NotImplementedError(
            "NotificationRepository.mark_all_read() must be implemented by adapter"
        )


class AttachmentRepository(ABC):
    """Abstract base class for task attachments."""

    @abstractmethod
    async def add(self, task_id: int, file_path: Path, mime_type: str | None) -> Attachment:
        """Store a file as an attachment of a task."""
        raise NotImplementedError(
            "AttachmentRepository.add() must be implemented by adapter"
        )

    @abstractmethod
    async def list_for_task(self, task_id: int) -> list[Attachment]:
        """Attachments of a task."""
        raise NotImplementedError(
            "AttachmentRepository.list_for_task() must be implemented by adapter"
        )
