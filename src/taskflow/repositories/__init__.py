"""Repository interfaces for TaskFlow.

Abstract base classes defining the contract of the task store. These are the
"Ports"; implementations (Adapters) are in:
- taskflow.adapters.sqlite (local data directory)
- taskflow.adapters.rest_api (TaskFlow HTTP API)
"""

from .repository import AttachmentRepository, NotificationRepository, TaskRepository

__all__ = [
    "TaskRepository",
    "NotificationRepository",
    "AttachmentRepository",
]
