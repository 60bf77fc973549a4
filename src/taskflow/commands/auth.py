"""Authentication commands."""

import typer
from rich.prompt import Prompt

from taskflow.services.auth_service import AuthService
from taskflow.services.config_service import get_config_service
from taskflow.utils.ui.formatters import format_info, format_success

from .decorators import command_wrapper


@command_wrapper
async def login(
    username: str | None = typer.Option(None, "--username", "-u", help="Username"),
    password: str | None = typer.Option(None, "--password", help="Password"),
    endpoint: str | None = typer.Option(None, "--endpoint", help="API endpoint URL"),
) -> None:
    """Login to the TaskFlow server."""
    config_service = get_config_service()
    service = AuthService(config_service)
    service.require_remote()

    if endpoint:
        config_service.set_value("api.endpoint", endpoint)

    if not username:
        username = Prompt.ask("Username")
    if not password:
        password = Prompt.ask("Password", password=True)

    try:
        user = await service.login(username, password)
    finally:
        await service.close()
    name = user.get("name") or user.get("username") or username
    format_success(f"{name}님, 로그인되었습니다.")


@command_wrapper
async def logout() -> None:
    """Logout and forget the stored token."""
    service = AuthService(get_config_service())
    try:
        removed = await service.logout()
    finally:
        await service.close()
    if removed:
        format_success("로그아웃되었습니다.")
    else:
        format_info("로그인되어 있지 않습니다.")
