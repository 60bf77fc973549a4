"""TaskFlow domain models.

Pydantic models for tasks, notifications, comments and attachments, shared by
the repositories, the task cache and the views.
"""

from .config_models import APIConfig, AppConfig, AttachmentConfig, CacheConfig
from .core import (
    Attachment,
    Comment,
    FollowUpType,
    LEGACY_STATUS_ALIASES,
    Notification,
    NotificationType,
    Task,
    TaskCreate,
    TaskFilters,
    TaskPriority,
    TaskStatus,
    TaskUpdate,
    User,
    normalize_status,
)

__all__ = [
    # Task models
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "TaskFilters",
    "TaskStatus",
    "TaskPriority",
    "FollowUpType",
    "LEGACY_STATUS_ALIASES",
    "normalize_status",
    # Other entities
    "Notification",
    "NotificationType",
    "Comment",
    "Attachment",
    "User",
    # Config models
    "AppConfig",
    "APIConfig",
    "CacheConfig",
    "AttachmentConfig",
]
