"""Notification commands."""

import typer

from taskflow.services.task_store import get_task_store
from taskflow.utils.typer_helpers import SuggestingGroup
from taskflow.utils.ui.formatters import (
    format_info,
    format_notifications,
    format_output,
    format_success,
    format_warning,
)

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Notification commands")


@app.command("list")
@command_wrapper
async def list_notifications(
    unread: bool = typer.Option(False, "--unread", "-u", help="Only unread notifications"),
    output: str = typer.Option("table", "--output", "-o", help="Output format (table, json, yaml)"),
) -> None:
    """List notifications, newest first."""
    notifications = await get_task_store().notifications.list_notifications(unread_only=unread)
    if output == "table":
        format_notifications(notifications)
        unread_count = sum(1 for n in notifications if not n.is_read)
        if unread_count:
            format_info(f"읽지 않은 알림 {unread_count}개")
    else:
        format_output([n.to_wire() for n in notifications], output)


@app.command("read")
@command_wrapper
async def mark_read(notification_id: int = typer.Argument(..., help="Notification ID")) -> None:
    """Mark a notification read."""
    if await get_task_store().notifications.mark_read(notification_id):
        format_success(f"알림 #{notification_id}을(를) 읽음 처리했습니다.")
    else:
        format_warning(f"알림 #{notification_id}은(는) 이미 읽었거나 존재하지 않습니다.")


@app.command("read-all")
@command_wrapper
async def mark_all_read() -> None:
    """Mark every notification read."""
    count = await get_task_store().notifications.mark_all_read()
    format_success(f"{count}개 알림을 읽음 처리했습니다.")
