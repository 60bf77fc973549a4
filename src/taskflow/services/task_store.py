"""Application container wiring storage, event bus, cache and services.

Commands get everything through one explicitly constructed TaskStore instead
of reaching for module globals; tests build their own with fake repositories.
"""

from __future__ import annotations

import sqlite3
from functools import lru_cache

from taskflow.models.exceptions import TaskFlowError
from taskflow.models.storage_strategy import (
    LocalStorageStrategy,
    RemoteStorageStrategy,
    StorageStrategyContext,
)
from taskflow.services.attachment_service import AttachmentService
from taskflow.services.backup_service import BackupService
from taskflow.services.config_service import ConfigService, get_config_service
from taskflow.services.notification_service import NotificationService
from taskflow.services.task_service import TaskService
from taskflow.sync.events import EventBus
from taskflow.sync.task_cache import TaskCache
from taskflow.utils.logger import get_logger

logger = get_logger("services.store")


def build_strategy_context(config_service: ConfigService) -> StorageStrategyContext:
    """Pick the storage backend named in the config."""
    config = config_service.config
    if config.storage == "remote":
        strategy = RemoteStorageStrategy()
    else:
        config_service.initialize_data_directory()
        strategy = LocalStorageStrategy(
            db_path=config_service.get_main_db_path(),
            attachments_dir=config_service.get_attachments_dir(),
            user_id=config.current_user_id,
        )
    logger.info("using %s storage", strategy.storage_type)
    return StorageStrategyContext(strategy)


class TaskStore:
    """Everything a command needs, built once per process.

    Attributes:
        storage: Repository access for the selected backend
        bus: Event bus every mutation is published on
        cache: Shared task cache, bound to the bus for delete eviction
        tasks: Task mutations and queries
        notifications: Notification listing and read marks
        attachments: Validated attachment uploads
        backups: Local database backups
    """

    def __init__(
        self,
        config_service: ConfigService,
        storage: StorageStrategyContext,
        bus: EventBus | None = None,
    ):
        config = config_service.config
        self.config_service = config_service
        self.storage = storage
        self.bus = bus or EventBus()
        self.cache = TaskCache(
            storage.task_repository,
            stale_time=config.cache.stale_time,
            fetch_timeout=config.cache.fetch_timeout,
        )
        self._cache_binding = self.cache.bind(self.bus)
        self.tasks = TaskService(storage.task_repository, self.bus, self.cache)
        self.notifications = NotificationService(storage.notification_repository)
        self.attachments = AttachmentService(storage.attachment_repository, config.attachments)
        self.backups = BackupService(config_service)

    @classmethod
    def from_config(cls, config_service: ConfigService) -> TaskStore:
        return cls(config_service, build_strategy_context(config_service))

    def run_auto_backup(self) -> None:
        """Back up the local database when the configured interval has passed."""
        if self.storage.storage_type != "local":
            return
        if not self.config_service.get_main_db_path().exists():
            return
        if not self.backups.is_backup_due():
            return
        try:
            self.backups.create_backup()
        except (TaskFlowError, OSError, sqlite3.Error) as e:
            logger.warning("automatic backup failed: %s", e)

    async def aclose(self) -> None:
        await self.storage.close()


@lru_cache(maxsize=1)
def get_task_store() -> TaskStore:
    """Get the process-wide TaskStore."""
    store = TaskStore.from_config(get_config_service())
    store.run_auto_backup()
    return store


async def close_task_store() -> None:
    """Close network clients of the process-wide store, if it was built."""
    if get_task_store.cache_info().currsize:
        await get_task_store().aclose()
