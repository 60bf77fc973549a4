"""Service for signing in to a TaskFlow server."""

from __future__ import annotations

from taskflow.adapters.rest_api import call_api
from taskflow.api.auth import AuthAPI
from taskflow.api.client import APIClient
from taskflow.models.exceptions import TaskFlowError, ValidationError
from taskflow.services.config_service import ConfigService
from taskflow.utils import exit_codes
from taskflow.utils.logger import get_logger

logger = get_logger("services.auth")


class AuthService:
    """Login and logout against the configured API endpoint.

    The token is stored in the credentials file, where APIClient picks it up
    for every later request.
    """

    def __init__(self, config_service: ConfigService, client: APIClient | None = None):
        self.config_service = config_service
        self._client = client

    @property
    def client(self) -> APIClient:
        if self._client is None:
            self._client = APIClient(self.config_service)
        return self._client

    def is_authenticated(self) -> bool:
        credentials = self.config_service.load_credentials()
        return bool(credentials and credentials.get("token"))

    def require_remote(self) -> None:
        storage = self.config_service.config.storage
        if storage != "remote":
            raise ValidationError(
                f"로그인은 원격 저장소에서만 사용할 수 있습니다 (현재: {storage}). "
                "'taskflow config set storage remote'로 전환하세요."
            )

    async def login(self, username: str, password: str) -> dict:
        """Sign in and store the session token.

        Returns:
            The signed-in user as reported by the server

        Raises:
            ValidationError: If not using remote storage or a field is empty
            TaskFlowError: If the server rejects the credentials
        """
        self.require_remote()
        if not username or not password:
            raise ValidationError("아이디와 비밀번호를 입력하세요.")

        result = await call_api(AuthAPI(self.client).login(username, password))
        if not isinstance(result, dict):
            result = {}
        token = result.get("access_token") or result.get("token")
        if not token:
            raise TaskFlowError(
                "서버 응답에 토큰이 없습니다.", exit_code=exit_codes.ERROR_AUTH_FAILURE
            )
        user = result.get("user") or {}
        self.config_service.save_credentials(token, user)
        logger.info("logged in as %s", user.get("username", username))
        return user

    async def logout(self) -> bool:
        """End the session and forget the token.

        The server call is best effort: an expired token must not keep the
        local credentials around.
        """
        if not self.is_authenticated():
            return False
        try:
            await call_api(AuthAPI(self.client).logout())
        except TaskFlowError as e:
            logger.warning("server logout failed, clearing local credentials anyway: %s", e)
        return self.config_service.clear_credentials()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
