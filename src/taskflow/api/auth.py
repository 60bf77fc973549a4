"""Authentication API endpoints."""

from taskflow.api.client import APIClient


class AuthAPI:
    """Authentication API client."""

    def __init__(self, client: APIClient):
        self.client = client

    async def login(self, username: str, password: str) -> dict:
        """Login with username and password."""
        response = await self.client.post(
            "/api/login",
            json={"username": username, "password": password},
        )
        return response.json()

    async def logout(self) -> dict:
        """End the server session."""
        response = await self.client.post("/api/logout")
        return response.json()

    async def get_profile(self) -> dict:
        """Get current user profile."""
        response = await self.client.get("/api/me")
        return response.json()
