"""SQLite implementation of NotificationRepository."""

from __future__ import annotations

import sqlite3

from taskflow.adapters.sqlite.base import SqliteRepositoryBase
from taskflow.adapters.sqlite.utils import now_iso, row_to_dict
from taskflow.models import Notification, NotificationType
from taskflow.repositories import NotificationRepository


def create_notification(
    connection: sqlite3.Connection,
    *,
    user_id: int,
    type: NotificationType,
    title: str,
    message: str,
    task_id: int | None = None,
) -> int:
    """Insert a notification the way the server would. Does not commit."""
    cursor = connection.execute(
        """
        INSERT INTO notifications (user_id, title, message, type, is_read, task_id, created_at)
        VALUES (?, ?, ?, ?, 0, ?, ?)
        """,
        (user_id, title, message, type.value, task_id, now_iso()),
    )
    return cursor.lastrowid


class SqliteNotificationRepository(SqliteRepositoryBase, NotificationRepository):
    """Notifications of the acting user."""

    async def list_all(self, *, unread_only: bool = False) -> list[Notification]:
        query = "SELECT * FROM notifications WHERE user_id = ?"
        if unread_only:
            query += " AND is_read = 0"
        query += " ORDER BY created_at DESC, id DESC"
        rows = self.connection.execute(query, (self.user_id,)).fetchall()
        return [Notification.model_validate(row_to_dict(row)) for row in rows]

    async def mark_read(self, notification_id: int) -> bool:
        cursor = self.connection.execute(
            "UPDATE notifications SET is_read = 1 WHERE id = ? AND user_id = ?",
            (notification_id, self.user_id),
        )
        self.connection.commit()
        return cursor.rowcount > 0

    async def mark_all_read(self) -> int:
        cursor = self.connection.execute(
            "UPDATE notifications SET is_read = 1 WHERE user_id = ? AND is_read = 0",
            (self.user_id,),
        )
        self.connection.commit()
        return cursor.rowcount
