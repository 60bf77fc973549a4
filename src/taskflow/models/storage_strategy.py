"""
Strategy Pattern: Storage Strategy Container

The StorageStrategyContext holds the storage backend chosen at startup
(local SQLite data directory or the remote TaskFlow API) and hands its
repositories to the services. Services never know which one they talk to.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from taskflow.repositories import (
    AttachmentRepository,
    NotificationRepository,
    TaskRepository,
)


class StorageStrategy(ABC):
    """All repository implementations of one storage backend."""

    @abstractmethod
    def get_task_repository(self) -> TaskRepository:
        """Get task repository implementation for this strategy."""

    @abstractmethod
    def get_notification_repository(self) -> NotificationRepository:
        """Get notification repository implementation for this strategy."""

    @abstractmethod
    def get_attachment_repository(self) -> AttachmentRepository:
        """Get attachment repository implementation for this strategy."""

    @property
    @abstractmethod
    def storage_type(self) -> str:
        """Storage type identifier (for logging/debugging)."""

    async def close(self) -> None:
        """Release network clients or other per-loop resources."""


class LocalStorageStrategy(StorageStrategy):
    """
    Local SQLite storage strategy.

    Plays the server's role from the data directory: taskflow.db plus the
    attachments folder.
    """

    def __init__(self, db_path: str | Path, attachments_dir: str | Path, user_id: int = 1):
        self.db_path = db_path

        # Import here to avoid circular dependencies
        from taskflow.adapters.sqlite import (
            SqliteAttachmentRepository,
            SqliteNotificationRepository,
            SqliteTaskRepository,
        )

        self._task_repo = SqliteTaskRepository(db_path=db_path, user_id=user_id)
        self._notification_repo = SqliteNotificationRepository(db_path=db_path, user_id=user_id)
        self._attachment_repo = SqliteAttachmentRepository(
            attachments_dir, db_path=db_path, user_id=user_id
        )

    def get_task_repository(self) -> TaskRepository:
        return self._task_repo

    def get_notification_repository(self) -> NotificationRepository:
        return self._notification_repo

    def get_attachment_repository(self) -> AttachmentRepository:
        return self._attachment_repo

    @property
    def storage_type(self) -> str:
        return "local"


class RemoteStorageStrategy(StorageStrategy):
    """
    Remote API storage strategy.

    All repositories share one APIClient talking to the TaskFlow server.
    """

    def __init__(self, client=None):
        from taskflow.adapters.rest_api import (
            RestApiAttachmentRepository,
            RestApiNotificationRepository,
            RestApiTaskRepository,
        )
        from taskflow.api.client import APIClient

        self._client = client or APIClient()
        self._task_repo = RestApiTaskRepository(self._client)
        self._notification_repo = RestApiNotificationRepository(self._client)
        self._attachment_repo = RestApiAttachmentRepository(self._client)

    def get_task_repository(self) -> TaskRepository:
        return self._task_repo

    def get_notification_repository(self) -> NotificationRepository:
        return self._notification_repo

    def get_attachment_repository(self) -> AttachmentRepository:
        return self._attachment_repo

    @property
    def storage_type(self) -> str:
        return "remote"

    async def close(self) -> None:
        await self._client.close()


class StorageStrategyContext:
    """
    Single point of repository access, created once at startup.

    Usage:
        strategy = LocalStorageStrategy(db_path, attachments_dir)
        context = StorageStrategyContext(strategy)
        tasks = await context.task_repository.list_all()
    """

    def __init__(self, strategy: StorageStrategy):
        self._strategy = strategy

    @property
    def task_repository(self) -> TaskRepository:
        return self._strategy.get_task_repository()

    @property
    def notification_repository(self) -> NotificationRepository:
        return self._strategy.get_notification_repository()

    @property
    def attachment_repository(self) -> AttachmentRepository:
        return self._strategy.get_attachment_repository()

    @property
    def storage_type(self) -> str:
        return self._strategy.storage_type

    async def close(self) -> None:
        await self._strategy.close()
