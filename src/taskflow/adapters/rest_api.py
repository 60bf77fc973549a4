"""REST API adapters - Repository implementations using the TaskFlow HTTP API.

These adapters wrap the API client to implement the repository interfaces and
translate transport failures into TaskFlow exceptions.
"""

from __future__ import annotations

from collections.abc import Awaitable
from pathlib import Path
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError as PydanticValidationError

from taskflow.api.client import APIClient
from taskflow.api.notifications import NotificationsAPI
from taskflow.api.tasks import TasksAPI
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
from taskflow.models.exceptions import (
    StoreUnavailableError,
    TaskFlowError,
    TaskNotFoundError,
    ValidationError,
)
from taskflow.repositories.repository import (
    AttachmentRepository,
    NotificationRepository,
    TaskRepository,
)
from taskflow.utils import exit_codes
from taskflow.utils.logger import get_logger

T = TypeVar("T")

logger = get_logger("adapters.rest")


def _server_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    return body.get("message") if isinstance(body, dict) else None


async def call_api(awaitable: Awaitable[T], *, task_id: int | None = None) -> T:
    """Await an API call, mapping HTTP failures to TaskFlow exceptions."""
    try:
        return await awaitable
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        message = _server_message(e.response)
        if status == 404 and task_id is not None:
            raise TaskNotFoundError(message or f"업무를 찾을 수 없습니다: {task_id}") from e
        if status in (401, 403):
            raise TaskFlowError(
                message or "로그인이 필요합니다.", exit_code=exit_codes.ERROR_AUTH_FAILURE
            ) from e
        if 400 <= status < 500:
            raise ValidationError(message or f"요청이 거부되었습니다 ({status})") from e
        raise StoreUnavailableError(message or f"서버 오류 ({status})") from e
    except httpx.RequestError as e:
        raise StoreUnavailableError(f"서버에 연결할 수 없습니다: {e}") from e


def _unwrap(payload: Any, key: str) -> Any:
    """Accept both ``{"task": {...}}`` envelopes and bare objects."""
    if isinstance(payload, dict) and key in payload:
        return payload[key]
    return payload


def _parse_tasks(items: list[dict]) -> list[Task]:
    """Parse task records one by one; a corrupt record is skipped, not fatal."""
    tasks = []
    for item in items:
        try:
            tasks.append(Task.model_validate(item))
        except PydanticValidationError as e:
            logger.warning("skipping malformed task record %r: %s", item.get("id"), e)
    return tasks


class RestApiTaskRepository(TaskRepository):
    """Task repository implementation using the REST API."""

    def __init__(self, client: APIClient | None = None):
        self._client = client
        self._tasks_api: TasksAPI | None = None

    @property
    def tasks_api(self) -> TasksAPI:
        """Get or create TasksAPI instance."""
        if self._tasks_api is None:
            if self._client is None:
                self._client = APIClient()
            self._tasks_api = TasksAPI(self._client)
        return self._tasks_api

    async def list_all(self, filters: TaskFilters | None = None) -> list[Task]:
        params: dict[str, Any] = {}
        if filters is not None:
            params = {
                "status": filters.status.value if filters.status else None,
                "priority": filters.priority.value if filters.priority else None,
                "category": filters.category,
                "assigned_to": filters.assigned_to,
                "start_date": filters.start_date.isoformat() if filters.start_date else None,
                "end_date": filters.end_date.isoformat() if filters.end_date else None,
                "search": filters.search,
            }
        # No retries: the next cache invalidation is the retry
        payload = await call_api(self.tasks_api.list_tasks(**params, retry=0))
        tasks = _parse_tasks(_unwrap(payload, "tasks") or [])
        return [task for task in tasks if not task.awaiting_confirmation]

    async def get(self, task_id: int) -> Task:
        payload = await call_api(self.tasks_api.get_task(task_id), task_id=task_id)
        return Task.model_validate(_unwrap(payload, "task"))

    async def add(self, task_data: TaskCreate) -> Task:
        payload = await call_api(self.tasks_api.create_task(task_data.to_wire()))
        return Task.model_validate(_unwrap(payload, "task"))

    async def update(self, task_id: int, updates: TaskUpdate) -> Task:
        data = updates.to_wire(exclude_unset=True)
        payload = await call_api(self.tasks_api.update_task(task_id, data), task_id=task_id)
        return Task.model_validate(_unwrap(payload, "task"))

    async def change_status(self, task_id: int, status: TaskStatus) -> Task:
        payload = await call_api(
            self.tasks_api.change_status(task_id, status.value), task_id=task_id
        )
        return Task.model_validate(_unwrap(payload, "task"))

    async def delete(self, task_id: int) -> bool:
        await call_api(self.tasks_api.delete_task(task_id), task_id=task_id)
        return True

    async def bulk_update(self, task_ids: list[int], updates: TaskUpdate) -> list[Task]:
        # The API has no bulk update endpoint; apply one by one.
        return [await self.update(task_id, updates) for task_id in task_ids]

    async def bulk_create(self, tasks: list[TaskCreate]) -> int:
        if not tasks:
            return 0
        payload = await call_api(self.tasks_api.bulk_upload([t.to_wire() for t in tasks]))
        result = _unwrap(payload, "data")
        if not isinstance(result, dict):
            return len(tasks)
        for failure in result.get("failures") or []:
            logger.warning("row %s was not imported: %s", failure.get("index"), failure.get("reason"))
        return int(result.get("success", len(tasks)))

    async def bulk_delete(self, task_ids: list[int]) -> int:
        if not task_ids:
            return 0
        payload = await call_api(self.tasks_api.bulk_delete(task_ids))
        if isinstance(payload, dict):
            return int(payload.get("deletedCount", len(task_ids)))
        return len(task_ids)

    async def list_follow_ups(self) -> list[Task]:
        payload = await call_api(self.tasks_api.follow_up_tasks())
        return _parse_tasks(_unwrap(payload, "followUpTasks") or [])

    async def confirm(self, task_id: int) -> Task:
        payload = await call_api(self.tasks_api.confirm_task(task_id), task_id=task_id)
        return Task.model_validate(_unwrap(payload, "task"))

    async def reject(self, task_id: int, reason: str | None = None) -> Task:
        payload = await call_api(self.tasks_api.reject_task(task_id, reason), task_id=task_id)
        return Task.model_validate(_unwrap(payload, "task"))

    async def list_comments(self, task_id: int) -> list[Comment]:
        payload = await call_api(self.tasks_api.get_task_comments(task_id), task_id=task_id)
        return [Comment.model_validate(c) for c in _unwrap(payload, "comments") or []]

    async def add_comment(self, task_id: int, content: str) -> Comment:
        payload = await call_api(self.tasks_api.add_comment(task_id, content), task_id=task_id)
        return Comment.model_validate(_unwrap(payload, "comment"))


class RestApiNotificationRepository(NotificationRepository):
    """Notification repository implementation using the REST API."""

    def __init__(self, client: APIClient | None = None):
        self._client = client
        self._api: NotificationsAPI | None = None

    @property
    def notifications_api(self) -> NotificationsAPI:
        """Get or create NotificationsAPI instance."""
        if self._api is None:
            if self._client is None:
                self._client = APIClient()
            self._api = NotificationsAPI(self._client)
        return self._api

    async def list_all(self, *, unread_only: bool = False) -> list[Notification]:
        payload = await call_api(self.notifications_api.list_notifications())
        items = _unwrap(payload, "notifications") or []
        notifications = [Notification.model_validate(n) for n in items]
        if unread_only:
            notifications = [n for n in notifications if not n.is_read]
        return sorted(notifications, key=lambda n: n.created_at, reverse=True)

    async def mark_read(self, notification_id: int) -> bool:
        await call_api(self.notifications_api.mark_read(notification_id))
        return True

    async def mark_all_read(self) -> int:
        payload = await call_api(self.notifications_api.mark_all_read())
        if isinstance(payload, dict):
            return int(payload.get("updatedCount", 0))
        return 0


class RestApiAttachmentRepository(AttachmentRepository):
    """Attachment repository implementation using the REST API."""

    def __init__(self, client: APIClient | None = None):
        self._client = client
        self._tasks_api: TasksAPI | None = None

    @property
    def tasks_api(self) -> TasksAPI:
        """Get or create TasksAPI instance."""
        if self._tasks_api is None:
            if self._client is None:
                self._client = APIClient()
            self._tasks_api = TasksAPI(self._client)
        return self._tasks_api

    async def add(self, task_id: int, file_path: Path, mime_type: str | None) -> Attachment:
        payload = await call_api(
            self.tasks_api.upload_attachment(task_id, file_path, mime_type), task_id=task_id
        )
        return Attachment.model_validate(_unwrap(payload, "attachment"))

    async def list_for_task(self, task_id: int) -> list[Attachment]:
        payload = await call_api(self.tasks_api.list_attachments(task_id), task_id=task_id)
        return [Attachment.model_validate(a) for a in _unwrap(payload, "attachments") or []]
