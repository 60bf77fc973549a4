"""Task management commands."""

from datetime import date, datetime
from pathlib import Path

import typer

from taskflow.models import FollowUpType, TaskFilters, TaskPriority
from taskflow.models.exceptions import ValidationError
from taskflow.services.import_service import load_task_sheet
from taskflow.services.task_service import build_model
from taskflow.services.task_store import get_task_store
from taskflow.sync.views import RenderState, TaskListView
from taskflow.utils.typer_helpers import SuggestingGroup
from taskflow.utils.ui.formatters import (
    format_comments,
    format_info,
    format_output,
    format_success,
    format_task_detail,
    format_task_table,
    format_warning,
    task_summary_line,
)

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Task management commands")

OutputOption = typer.Option("table", "--output", "-o", help="Output format (table, json, yaml)")


def _parse_date(value: str | None, option: str) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise ValidationError(f"{option}: expected YYYY-MM-DD, got {value!r}") from e


def _parse_datetime(value: str | None, option: str) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise ValidationError(f"{option}: expected an ISO date/time, got {value!r}") from e


def _emit_tasks(tasks, output: str, title: str | None = None) -> None:
    if output == "table":
        format_task_table(tasks, title)
    else:
        format_output([t.to_wire() for t in tasks], output)


@app.command("list")
@command_wrapper
async def list_tasks(
    status: str | None = typer.Option(None, "--status", "-s", help="Filter by status"),
    priority: TaskPriority | None = typer.Option(None, "--priority", "-p", help="Filter by priority"),
    category: str | None = typer.Option(None, "--category", "-c", help="Filter by category"),
    assignee: int | None = typer.Option(None, "--assignee", help="Filter by assignee user ID"),
    start: str | None = typer.Option(None, "--from", help="Work date from (YYYY-MM-DD)"),
    end: str | None = typer.Option(None, "--to", help="Work date to (YYYY-MM-DD)"),
    search: str | None = typer.Option(None, "--search", "-q", help="Search title, description, category"),
    output: str = OutputOption,
) -> None:
    """List tasks."""
    store = get_task_store()
    filters = build_model(
        TaskFilters,
        status=status,
        priority=priority,
        category=category,
        assigned_to=assignee,
        start_date=_parse_date(start, "--from"),
        end_date=_parse_date(end, "--to"),
        search=search,
    )
    with TaskListView(store.cache, store.bus, filters) as view:
        await store.cache.ensure_fresh()
        if view.render_state is RenderState.ERROR:
            view.snapshot.raise_for_error()
        if view.snapshot.has_error:
            format_warning(f"최신 목록을 불러오지 못해 이전 목록을 표시합니다: {view.snapshot.error}")
        _emit_tasks(view.derived, output)


@app.command("show")
@command_wrapper
async def show_task(
    task_id: int = typer.Argument(..., help="Task ID"),
    output: str = OutputOption,
) -> None:
    """Show task details."""
    task = await get_task_store().tasks.get_task(task_id)
    if output == "table":
        format_task_detail(task)
    else:
        format_output(task.to_wire(), output)


@app.command("add")
@command_wrapper
async def add_task(
    title: str = typer.Argument(..., help="Task title"),
    assignee: int | None = typer.Option(None, "--assignee", "-a", help="Assignee user ID (default: you)"),
    description: str | None = typer.Option(None, "--description", "-d", help="Description"),
    category: str = typer.Option("일반", "--category", "-c", help="Category"),
    priority: TaskPriority = typer.Option(TaskPriority.MEDIUM, "--priority", "-p", help="Priority"),
    status: str = typer.Option("scheduled", "--status", "-s", help="Initial status"),
    work_date: str | None = typer.Option(None, "--date", help="Work date (YYYY-MM-DD, default today)"),
    due: str | None = typer.Option(None, "--due", help="Due date/time (ISO)"),
    memo: str | None = typer.Option(None, "--memo", help="Memo"),
    follow_up_of: int | None = typer.Option(None, "--follow-up-of", help="Create as follow-up of this task"),
    follow_up_type: FollowUpType | None = typer.Option(None, "--follow-up-type", help="Follow-up routing"),
    follow_up_memo: str | None = typer.Option(None, "--follow-up-memo", help="Note for the follow-up assignee"),
) -> None:
    """Create a task."""
    store = get_task_store()
    fields = {
        "description": description,
        "category": category,
        "priority": priority,
        "status": status,
        "work_date": _parse_date(work_date, "--date") or date.today(),
        "due_date": _parse_datetime(due, "--due"),
        "memo": memo,
    }
    if follow_up_of is not None:
        fields.update(
            is_follow_up_task=True,
            parent_task_id=follow_up_of,
            follow_up_type=follow_up_type or FollowUpType.GENERAL,
            follow_up_memo=follow_up_memo,
        )
    task = await store.tasks.create_task(
        title,
        assigned_to=assignee if assignee is not None else store.config_service.config.current_user_id,
        **fields,
    )
    format_success(f"업무가 등록되었습니다: {task_summary_line(task)}")


@app.command("edit")
@command_wrapper
async def edit_task(
    task_id: int = typer.Argument(..., help="Task ID"),
    title: str | None = typer.Option(None, "--title", help="New title"),
    description: str | None = typer.Option(None, "--description", "-d", help="New description"),
    category: str | None = typer.Option(None, "--category", "-c", help="New category"),
    priority: TaskPriority | None = typer.Option(None, "--priority", "-p", help="New priority"),
    progress: int | None = typer.Option(None, "--progress", min=0, max=100, help="Progress 0-100"),
    assignee: int | None = typer.Option(None, "--assignee", "-a", help="New assignee user ID"),
    work_date: str | None = typer.Option(None, "--date", help="New work date (YYYY-MM-DD)"),
    due: str | None = typer.Option(None, "--due", help="New due date/time (ISO)"),
    memo: str | None = typer.Option(None, "--memo", help="New memo"),
) -> None:
    """Edit a task."""
    candidates = {
        "title": title,
        "description": description,
        "category": category,
        "priority": priority,
        "progress": progress,
        "assigned_to": assignee,
        "work_date": _parse_date(work_date, "--date"),
        "due_date": _parse_datetime(due, "--due"),
        "memo": memo,
    }
    changes = {key: value for key, value in candidates.items() if value is not None}
    task = await get_task_store().tasks.update_task(task_id, **changes)
    format_success(f"업무가 수정되었습니다: {task_summary_line(task)}")


@app.command("status")
@command_wrapper
async def set_status(
    task_id: int = typer.Argument(..., help="Task ID"),
    status: str = typer.Argument(..., help="scheduled, in_progress, completed, postponed, cancelled"),
) -> None:
    """Change the status of a task."""
    task = await get_task_store().tasks.change_status(task_id, status)
    format_success(f"상태가 변경되었습니다: {task_summary_line(task)}")


@app.command("bulk-status")
@command_wrapper
async def bulk_status(
    task_ids: list[int] = typer.Argument(..., help="Task IDs"),
    status: str = typer.Option(..., "--status", "-s", help="New status for every task"),
) -> None:
    """Change the status of several tasks at once."""
    tasks = await get_task_store().tasks.bulk_update(task_ids, status=status)
    format_success(f"{len(tasks)}개 업무의 상태가 변경되었습니다.")


@app.command("delete")
@command_wrapper
async def delete_task(
    task_id: int = typer.Argument(..., help="Task ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a task."""
    if not yes and not typer.confirm(f"업무 #{task_id}을(를) 삭제할까요?"):
        format_info("취소되었습니다.")
        raise typer.Exit(0)
    await get_task_store().tasks.delete_task(task_id)
    format_success(f"업무 #{task_id}이(가) 삭제되었습니다.")


@app.command("bulk-delete")
@command_wrapper
async def bulk_delete(
    task_ids: list[int] = typer.Argument(..., help="Task IDs"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete several tasks."""
    if not yes and not typer.confirm(f"{len(task_ids)}개 업무를 삭제할까요?"):
        format_info("취소되었습니다.")
        raise typer.Exit(0)
    deleted = await get_task_store().tasks.bulk_delete(task_ids)
    format_success(f"{deleted}개 업무가 삭제되었습니다.")


@app.command("import")
@command_wrapper
async def import_tasks(
    file: Path = typer.Argument(..., help="Spreadsheet (.xlsx) in the upload template layout"),
    assignee: int | None = typer.Option(None, "--assignee", "-a", help="Assignee user ID (default: you)"),
) -> None:
    """Create tasks from an Excel upload template."""
    store = get_task_store()
    if assignee is None:
        assignee = store.config_service.config.current_user_id
    plan = load_task_sheet(file, assigned_to=assignee)
    created = await store.tasks.import_tasks(plan.tasks)
    format_success(f"{created}개 업무가 등록되었습니다.")
    if plan.skipped:
        format_info(f"헤더 행 {plan.skipped}개를 건너뛰었습니다.")
    failed = len(plan.tasks) - created
    if failed > 0:
        format_warning(f"{failed}개 업무는 등록되지 않았습니다.")


@app.command("follow-ups")
@command_wrapper
async def follow_ups(output: str = OutputOption) -> None:
    """List follow-up tasks awaiting your confirmation."""
    tasks = await get_task_store().tasks.list_follow_ups()
    _emit_tasks(tasks, output, title="확인 대기 중인 후속 업무")


@app.command("confirm")
@command_wrapper
async def confirm_follow_up(task_id: int = typer.Argument(..., help="Follow-up task ID")) -> None:
    """Accept a follow-up task."""
    task = await get_task_store().tasks.confirm_follow_up(task_id)
    format_success(f"후속 업무를 확인했습니다: {task_summary_line(task)}")


@app.command("reject")
@command_wrapper
async def reject_follow_up(
    task_id: int = typer.Argument(..., help="Follow-up task ID"),
    reason: str | None = typer.Option(None, "--reason", "-r", help="Reason for rejecting"),
) -> None:
    """Reject a follow-up task."""
    task = await get_task_store().tasks.reject_follow_up(task_id, reason)
    format_success(f"후속 업무를 반려했습니다: {task_summary_line(task)}")


@app.command("comments")
@command_wrapper
async def list_comments(task_id: int = typer.Argument(..., help="Task ID")) -> None:
    """Show comments on a task."""
    format_comments(await get_task_store().tasks.list_comments(task_id))


@app.command("comment")
@command_wrapper
async def add_comment(
    task_id: int = typer.Argument(..., help="Task ID"),
    content: str = typer.Argument(..., help="Comment text"),
) -> None:
    """Add a comment to a task."""
    await get_task_store().tasks.add_comment(task_id, content)
    format_success("댓글이 등록되었습니다.")
