"""HTTP client for the TaskFlow API."""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import httpx

from taskflow.services.config_service import ConfigService, get_config_service
from taskflow.utils.logger import get_logger

logger = get_logger("api")


class APIClient:
    """HTTP client for the TaskFlow API."""

    def __init__(self, config_service: ConfigService | None = None):
        self.config_service = config_service or get_config_service()
        self.config = self.config_service.config
        self.base_url = self.config.api.endpoint.rstrip("/")
        self.timeout = self.config.api.timeout
        self._client: Optional[httpx.AsyncClient] = None

    def _get_headers(self) -> dict[str, str]:
        """Get HTTP headers with authentication."""
        headers = {"Accept": "application/json"}

        credentials = self.config_service.load_credentials()
        if credentials and "token" in credentials:
            headers["Authorization"] = f"Bearer {credentials['token']}"

        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                follow_redirects=True,
            )
        # Always update headers to include latest auth token
        self._client.headers.update(self._get_headers())
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Any] = None,
        params: Optional[dict[str, Any]] = None,
        files: Optional[dict[str, Any]] = None,
        retry: Optional[int] = None,
    ) -> httpx.Response:
        """Make an HTTP request to the API.

        Server errors and transport failures are retried with exponential
        backoff; 4xx responses are raised immediately.
        """
        if retry is None:
            retry = self.config.api.retry

        client = await self._get_client()
        url = f"{path}" if path.startswith("/") else f"/{path}"

        last_exception: Optional[Exception] = None
        for attempt in range(retry + 1):
            try:
                response = await client.request(
                    method=method,
                    url=url,
                    json=json,
                    params=params,
                    files=files,
                )
                response.raise_for_status()
                return response
            except httpx.HTTPStatusError as e:
                # Don't retry client errors (4xx)
                if 400 <= e.response.status_code < 500:
                    raise
                last_exception = e
            except httpx.RequestError as e:
                last_exception = e

            logger.warning(
                "%s %s failed (attempt %d/%d): %s",
                method,
                url,
                attempt + 1,
                retry + 1,
                last_exception,
            )
            if attempt < retry:
                await asyncio.sleep(2**attempt)

        # All retries failed
        if last_exception:
            raise last_exception
        raise RuntimeError("Request failed after all retries")

    async def get(
        self,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        retry: Optional[int] = None,
    ) -> httpx.Response:
        """Make a GET request."""
        return await self.request("GET", path, params=params, retry=retry)

    async def post(
        self,
        path: str,
        *,
        json: Optional[Any] = None,
        files: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        """Make a POST request."""
        return await self.request("POST", path, json=json, files=files)

    async def put(self, path: str, *, json: Optional[Any] = None) -> httpx.Response:
        """Make a PUT request."""
        return await self.request("PUT", path, json=json)

    async def patch(self, path: str, *, json: Optional[Any] = None) -> httpx.Response:
        """Make a PATCH request."""
        return await self.request("PATCH", path, json=json)

    async def delete(self, path: str, *, json: Optional[Any] = None) -> httpx.Response:
        """Make a DELETE request."""
        return await self.request("DELETE", path, json=json)


def get_client(config_service: ConfigService | None = None) -> APIClient:
    """Get an API client instance."""
    return APIClient(config_service)
