"""Services module for TaskFlow - Business logic layer."""

from .attachment_service import AttachmentService
from .backup_service import BackupService
from .config_service import ConfigService, get_config_service
from .notification_service import NotificationService
from .task_service import TaskService

__all__ = [
    "AttachmentService",
    "BackupService",
    "ConfigService",
    "NotificationService",
    "TaskService",
    "get_config_service",
]
