"""Notification service - list and acknowledge server notifications."""

from __future__ import annotations

from taskflow.models import Notification
from taskflow.repositories import NotificationRepository
from taskflow.utils.logger import get_logger

logger = get_logger("services.notifications")


class NotificationService:
    def __init__(self, repository: NotificationRepository):
        self.repository = repository

    async def list_notifications(self, unread_only: bool = False) -> list[Notification]:
        return await self.repository.list_all(unread_only=unread_only)

    async def mark_read(self, notification_id: int) -> bool:
        changed = await self.repository.mark_read(notification_id)
        if not changed:
            logger.info("notification %s was already read or does not exist", notification_id)
        return changed

    async def mark_all_read(self) -> int:
        count = await self.repository.mark_all_read()
        logger.info("marked %d notification(s) read", count)
        return count

    async def unread_count(self) -> int:
        return len(await self.repository.list_all(unread_only=True))
