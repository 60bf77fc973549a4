"""SQLite adapters - repositories backed by the local data directory."""

from taskflow.adapters.sqlite.attachment_repository import SqliteAttachmentRepository
from taskflow.adapters.sqlite.notification_repository import SqliteNotificationRepository
from taskflow.adapters.sqlite.task_repository import SqliteTaskRepository

__all__ = [
    "SqliteAttachmentRepository",
    "SqliteNotificationRepository",
    "SqliteTaskRepository",
]
