"""Tests for AuthService against a mocked TaskFlow server."""

from __future__ import annotations

import json

import httpx
import pytest

from taskflow.api.client import APIClient
from taskflow.models.exceptions import TaskFlowError, ValidationError
from taskflow.services.auth_service import AuthService
from taskflow.utils import exit_codes

USER = {"id": "kim", "username": "kim", "name": "김민지", "role": "employee"}


def server(calls):
    def handler(request):
        calls.append((request.method, request.url.path, request.headers.get("Authorization")))
        if request.url.path == "/api/login":
            body = json.loads(request.content)
            if body == {"username": "kim", "password": "secret"}:
                return httpx.Response(200, json={"success": True, "user": USER, "token": "t-123"})
            return httpx.Response(
                401, json={"success": False, "message": "아이디 또는 비밀번호가 올바르지 않습니다."}
            )
        if request.url.path == "/api/logout":
            return httpx.Response(200, json={"success": True})
        return httpx.Response(404)

    return handler


@pytest.fixture
def remote_config(tmp_config):
    tmp_config.set_value("storage", "remote")
    tmp_config.set_value("api.retry", 0)
    return tmp_config


def make_service(config, handler):
    client = APIClient(config)
    client._client = httpx.AsyncClient(
        base_url=client.base_url, transport=httpx.MockTransport(handler)
    )
    return AuthService(config, client)


@pytest.mark.asyncio
async def test_login_stores_token_and_user(remote_config):
    calls = []
    service = make_service(remote_config, server(calls))

    user = await service.login("kim", "secret")

    assert user["name"] == "김민지"
    assert remote_config.load_credentials() == {"token": "t-123", "user": USER}
    assert service.is_authenticated()
    assert calls == [("POST", "/api/login", None)]
    await service.close()


@pytest.mark.asyncio
async def test_wrong_password_is_an_auth_failure(remote_config):
    service = make_service(remote_config, server([]))

    with pytest.raises(TaskFlowError, match="비밀번호가 올바르지 않습니다") as excinfo:
        await service.login("kim", "wrong")

    assert excinfo.value.exit_code == exit_codes.ERROR_AUTH_FAILURE
    assert remote_config.load_credentials() is None


@pytest.mark.asyncio
async def test_response_without_token_is_rejected(remote_config):
    service = make_service(remote_config, lambda request: httpx.Response(200, json={"success": True}))

    with pytest.raises(TaskFlowError, match="토큰이 없습니다"):
        await service.login("kim", "secret")
    assert remote_config.load_credentials() is None


@pytest.mark.asyncio
async def test_login_requires_remote_storage(tmp_config):
    calls = []
    service = make_service(tmp_config, server(calls))

    with pytest.raises(ValidationError, match="원격 저장소"):
        await service.login("kim", "secret")
    assert calls == []


@pytest.mark.asyncio
async def test_logout_sends_token_then_forgets_it(remote_config):
    calls = []
    remote_config.save_credentials("t-123")
    service = make_service(remote_config, server(calls))

    assert await service.logout() is True

    assert calls == [("POST", "/api/logout", "Bearer t-123")]
    assert remote_config.load_credentials() is None
    assert await service.logout() is False


@pytest.mark.asyncio
async def test_logout_clears_credentials_when_server_refuses(remote_config):
    remote_config.save_credentials("expired")
    service = make_service(remote_config, lambda request: httpx.Response(401, json={}))

    assert await service.logout() is True
    assert not service.is_authenticated()
