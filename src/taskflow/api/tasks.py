"""Tasks API endpoints."""

from pathlib import Path
from typing import Any, Optional

from taskflow.api.client import APIClient


class TasksAPI:
    """Tasks API client.

    Methods return decoded JSON; mapping to models happens in the adapter.
    """

    def __init__(self, client: APIClient):
        self.client = client

    async def list_tasks(
        self,
        *,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        category: Optional[str] = None,
        assigned_to: Optional[int] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        search: Optional[str] = None,
        retry: Optional[int] = None,
    ) -> dict:
        """List tasks visible to the current user.

        ``retry`` overrides the configured retry count for this call.
        """
        params: dict[str, Any] = {}

        if status:
            params["status"] = status
        if priority:
            params["priority"] = priority
        if category:
            params["category"] = category
        if assigned_to is not None:
            params["assignedTo"] = assigned_to
        if start_date:
            params["startDate"] = start_date
        if end_date:
            params["endDate"] = end_date
        if search:
            params["search"] = search

        response = await self.client.get("/api/tasks", params=params, retry=retry)
        return response.json()

    async def get_task(self, task_id: int) -> dict:
        """Get a specific task by ID."""
        response = await self.client.get(f"/api/tasks/{task_id}")
        return response.json()

    async def create_task(self, data: dict[str, Any]) -> dict:
        """Create a new task."""
        response = await self.client.post("/api/tasks", json=data)
        return response.json()

    async def update_task(self, task_id: int, data: dict[str, Any]) -> dict:
        """Update task fields."""
        response = await self.client.put(f"/api/tasks/{task_id}", json=data)
        return response.json()

    async def change_status(self, task_id: int, status: str) -> dict:
        """Change the status of a task."""
        response = await self.client.patch(
            f"/api/tasks/{task_id}", json={"status": status}
        )
        return response.json()

    async def delete_task(self, task_id: int) -> dict:
        """Delete a task."""
        response = await self.client.delete(f"/api/tasks/{task_id}")
        return response.json()

    async def bulk_delete(self, task_ids: list[int]) -> dict:
        """Delete several tasks at once."""
        response = await self.client.delete("/api/tasks/bulk", json={"taskIds": task_ids})
        return response.json()

    async def bulk_upload(self, tasks: list[dict[str, Any]]) -> dict:
        """Create tasks from spreadsheet rows."""
        response = await self.client.post("/api/tasks/bulk-upload", json={"tasks": tasks})
        return response.json()

    async def follow_up_tasks(self) -> dict:
        """Follow-up tasks waiting for the current user's confirmation."""
        response = await self.client.get("/api/tasks/follow-up")
        return response.json()

    async def confirm_task(self, task_id: int) -> dict:
        """Confirm a follow-up task."""
        response = await self.client.patch(f"/api/tasks/{task_id}/confirm")
        return response.json()

    async def reject_task(self, task_id: int, reason: Optional[str] = None) -> dict:
        """Reject a follow-up task."""
        response = await self.client.patch(
            f"/api/tasks/{task_id}/reject", json={"reason": reason}
        )
        return response.json()

    async def get_task_comments(self, task_id: int) -> dict:
        """Get comments for a task."""
        response = await self.client.get(f"/api/tasks/{task_id}/comments")
        return response.json()

    async def add_comment(self, task_id: int, content: str) -> dict:
        """Add a comment to a task."""
        response = await self.client.post(
            f"/api/tasks/{task_id}/comments",
            json={"content": content},
        )
        return response.json()

    async def list_attachments(self, task_id: int) -> dict:
        """List attachments of a task."""
        response = await self.client.get(f"/api/tasks/{task_id}/attachments")
        return response.json()

    async def upload_attachment(
        self, task_id: int, file_path: Path, mime_type: Optional[str] = None
    ) -> dict:
        """Upload a file as a multipart attachment."""
        with open(file_path, "rb") as fh:
            files = {
                "file": (file_path.name, fh.read(), mime_type or "application/octet-stream")
            }
        response = await self.client.post(
            f"/api/tasks/{task_id}/attachments", files=files
        )
        return response.json()
