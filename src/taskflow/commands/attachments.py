"""Attachment commands."""

from pathlib import Path

import typer

from taskflow.services.task_store import get_task_store
from taskflow.utils.typer_helpers import SuggestingGroup
from taskflow.utils.ui.formatters import format_attachment, format_info, format_success

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Task attachment commands")


@app.command("upload")
@command_wrapper
async def upload(
    task_id: int = typer.Argument(..., help="Task ID"),
    file: Path = typer.Argument(..., help="File to attach"),
) -> None:
    """Attach a file to a task (size and type are checked first)."""
    attachment = await get_task_store().attachments.upload(task_id, file)
    format_success(f"파일이 첨부되었습니다: {attachment.file_name}")


@app.command("list")
@command_wrapper
async def list_attachments(task_id: int = typer.Argument(..., help="Task ID")) -> None:
    """List the attachments of a task."""
    attachments = await get_task_store().attachments.list_attachments(task_id)
    if not attachments:
        format_info("첨부 파일이 없습니다.")
        return
    for attachment in attachments:
        format_attachment(attachment)
