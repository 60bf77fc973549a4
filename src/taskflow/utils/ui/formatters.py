"""Output formatters for TaskFlow commands."""

from __future__ import annotations

import json
from typing import Any

import yaml
from rich.panel import Panel
from rich.table import Table

from taskflow.constants.task_configs import (
    PRIORITY_CONFIG,
    STATUS_CONFIG,
    priority_label,
    status_label,
)
from taskflow.models import Attachment, Comment, Notification, Task, TaskStatus
from taskflow.utils.dates import format_date, format_datetime
from taskflow.utils.ui.console import get_console

console = get_console()

OUTPUT_FORMATS = ("table", "json", "yaml")


def format_output(data: Any, output_format: str = "table") -> None:
    """Print plain data as JSON, YAML or a key/value table."""
    if output_format == "json":
        print(json.dumps(data, indent=2, default=str, ensure_ascii=False))
    elif output_format == "yaml":
        print(yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True))
    elif isinstance(data, list):
        format_dict_table(data)
    elif isinstance(data, dict):
        format_single_item(data)
    else:
        console.print(data)


def format_dict_table(items: list[dict]) -> None:
    if not items:
        console.print("[yellow]No items found[/yellow]")
        return
    columns = list(items[0].keys())
    table = Table(show_header=True, header_style="bold magenta")
    for col in columns:
        table.add_column(col.replace("_", " ").title())
    for item in items:
        table.add_row(*(_cell(item.get(col)) for col in columns))
    console.print(table)


def format_single_item(item: dict) -> None:
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")
    for key, value in item.items():
        if isinstance(value, dict):
            for sub_key, sub_value in value.items():
                table.add_row(f"{key}.{sub_key}", _cell(sub_value))
        else:
            table.add_row(key, _cell(value))
    console.print(table)


def _cell(value: Any) -> str:
    if isinstance(value, bool):
        return "✓" if value else "✗"
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    if value is None:
        return "-"
    return str(value)


def format_error(message: str) -> None:
    """Format and display an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def format_success(message: str) -> None:
    """Format and display a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def format_warning(message: str) -> None:
    """Format and display a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def format_info(message: str) -> None:
    """Format and display an info message."""
    console.print(f"[bold blue]Info:[/bold blue] {message}")


# ============================================================================
# Tasks
# ============================================================================


def status_text(status: TaskStatus) -> str:
    cfg = STATUS_CONFIG[status]
    return f"[{cfg['style']}]{cfg['icon']} {cfg['label']}[/{cfg['style']}]"


def priority_text(task: Task) -> str:
    cfg = PRIORITY_CONFIG[task.priority]
    return f"[{cfg['style']}]{cfg['label']}[/{cfg['style']}]"


def build_task_table(tasks: list[Task], title: str | None = None) -> Table:
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("업무")
    table.add_column("구분")
    table.add_column("상태")
    table.add_column("우선순위")
    table.add_column("진행률", justify="right")
    table.add_column("작업일")
    for task in tasks:
        title_cell = task.title
        if task.is_follow_up_task:
            title_cell = f"↳ {title_cell}"
        table.add_row(
            str(task.id),
            title_cell,
            task.category,
            status_text(task.status),
            priority_text(task),
            f"{task.progress}%",
            format_date(task.work_date),
        )
    return table


def format_task_table(tasks: list[Task], title: str | None = None) -> None:
    if not tasks:
        console.print("[yellow]업무가 없습니다.[/yellow]")
        return
    console.print(build_task_table(tasks, title))


def format_task_detail(task: Task) -> None:
    rows = [
        ("ID", str(task.id)),
        ("업무", task.title),
        ("설명", task.description or "-"),
        ("구분", task.category),
        ("상태", status_text(task.status)),
        ("우선순위", priority_label(task.priority)),
        ("진행률", f"{task.progress}%"),
        ("담당자", str(task.assigned_to)),
        ("작업일", format_date(task.work_date)),
        ("마감일", format_datetime(task.due_date)),
        ("메모", task.memo or "-"),
        ("생성", format_datetime(task.created_at)),
        ("수정", format_datetime(task.updated_at)),
    ]
    if task.is_follow_up_task:
        rows.append(("상위 업무", str(task.parent_task_id)))
        rows.append(("후속 메모", task.follow_up_memo or "-"))
    if task.completed_at:
        rows.append(("완료", format_datetime(task.completed_at)))

    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in rows:
        table.add_row(key, value)
    console.print(Panel(table, title=f"업무 #{task.id}", expand=False))


def task_summary_line(task: Task) -> str:
    return f"#{task.id} {task.title} ({status_label(task.status)})"


# ============================================================================
# Comments, attachments, notifications
# ============================================================================


def format_comments(comments: list[Comment]) -> None:
    if not comments:
        console.print("[yellow]댓글이 없습니다.[/yellow]")
        return
    for comment in comments:
        console.print(
            f"[dim]{format_datetime(comment.created_at)}[/dim] "
            f"[cyan]user {comment.user_id}[/cyan]: {comment.content}"
        )


def format_attachment(attachment: Attachment) -> None:
    size_kb = attachment.file_size / 1024
    console.print(
        f"[cyan]{attachment.file_name}[/cyan] ({size_kb:.1f} KB) → {attachment.file_url}"
    )


def format_notifications(notifications: list[Notification]) -> None:
    if not notifications:
        console.print("[yellow]알림이 없습니다.[/yellow]")
        return
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("")
    table.add_column("제목")
    table.add_column("내용")
    table.add_column("시간")
    for notification in notifications:
        table.add_row(
            str(notification.id),
            "" if notification.is_read else "[bold blue]●[/bold blue]",
            notification.title,
            notification.message,
            format_datetime(notification.created_at),
        )
    console.print(table)
