"""Notifications API endpoints."""

from taskflow.api.client import APIClient


class NotificationsAPI:
    """Notifications API client."""

    def __init__(self, client: APIClient):
        self.client = client

    async def list_notifications(self) -> list | dict:
        """List notifications for the current user."""
        response = await self.client.get("/api/notifications")
        return response.json()

    async def mark_read(self, notification_id: int) -> dict:
        """Mark a notification as read."""
        response = await self.client.patch(f"/api/notifications/{notification_id}/read")
        return response.json()

    async def mark_all_read(self) -> dict:
        """Mark all notifications as read."""
        response = await self.client.patch("/api/notifications/read-all")
        return response.json()
