"""Dashboard command: summary cards, today's schedule and the weekly report."""

from datetime import date

import typer
from rich.columns import Columns
from rich.panel import Panel

from taskflow.constants.task_configs import STATUS_CONFIG
from taskflow.models import TaskStatus
from taskflow.models.exceptions import ValidationError
from taskflow.services.task_store import get_task_store
from taskflow.sync.views import (
    RenderState,
    SummaryCardsView,
    SummaryCounts,
    TaskView,
    TodayScheduleView,
    WeeklyReport,
    WeeklyReportView,
)
from taskflow.utils.error_boundary import ErrorBoundary
from taskflow.utils.ui.console import get_console
from taskflow.utils.ui.formatters import build_task_table, format_output, format_warning

from .decorators import command_wrapper

console = get_console()


def render_summary(summary: SummaryCounts) -> Panel:
    cards = [Panel(f"[bold]{summary.total}[/bold]", title="전체", expand=False)]
    for status, cfg in STATUS_CONFIG.items():
        cards.append(
            Panel(
                f"[bold {cfg['style']}]{summary[status]}[/bold {cfg['style']}]",
                title=f"{cfg['icon']} {cfg['label']}",
                expand=False,
            )
        )
    cards.append(Panel(f"[bold red]{summary.problem}[/bold red]", title="⚠ 문제", expand=False))
    return Panel(Columns(cards), title="업무 현황")


def render_weekly(report: WeeklyReport) -> Panel:
    lines = [
        f"기간: {report.start.isoformat()} ~ {report.end.isoformat()}",
        f"전체 {report.total}건, 완료율 {report.completion_rate:g}%",
    ]
    lines += [
        f"  {STATUS_CONFIG[status]['label']}: {count}"
        for status, count in report.by_status.items()
        if count
    ]
    return Panel("\n".join(lines), title="주간 보고")


def render_panel(view: TaskView, render, title: str):
    """Render one view, mapping its state to a placeholder where needed."""
    state = view.render_state
    if state is RenderState.LOADING:
        return Panel("[dim]불러오는 중...[/dim]", title=title)
    if state is RenderState.ERROR:
        return Panel(f"[red]데이터를 불러오지 못했습니다: {view.snapshot.error}[/red]", title=title)
    if state is RenderState.EMPTY:
        return Panel("[yellow]등록된 업무가 없습니다.[/yellow]", title=title)
    return render(view.derived)


def _fallback(title: str):
    def fallback(error: Exception) -> Panel:
        return Panel(f"[red]표시 중 오류가 발생했습니다: {error}[/red]", title=title)

    return fallback


@command_wrapper
async def dashboard(
    day: str | None = typer.Option(None, "--date", help="Day to show (YYYY-MM-DD, default today)"),
    output: str = typer.Option("table", "--output", "-o", help="Output format (table, json, yaml)"),
) -> None:
    """Show the task dashboard."""
    try:
        target = date.fromisoformat(day) if day else date.today()
    except ValueError as e:
        raise ValidationError(f"--date: expected YYYY-MM-DD, got {day!r}") from e

    store = get_task_store()
    summary = SummaryCardsView(store.cache, store.bus)
    today = TodayScheduleView(store.cache, store.bus, today=lambda: target)
    weekly = WeeklyReportView(store.cache, store.bus, week_of=target)

    with summary, today, weekly:
        await store.cache.ensure_fresh()
        snapshot = store.cache.get_tasks()
        if snapshot.has_error and snapshot.fetched_at is not None:
            format_warning(f"최신 데이터를 불러오지 못해 이전 데이터를 표시합니다: {snapshot.error}")

        if output != "table":
            if summary.render_state is RenderState.ERROR:
                snapshot.raise_for_error()
            counts = summary.derived
            report = weekly.derived
            format_output(
                {
                    "summary": {
                        "total": counts.total,
                        **{status.value: counts[status] for status in TaskStatus},
                        "problem": counts.problem,
                    },
                    "today": [task.to_wire() for task in today.derived],
                    "week": {
                        "start": report.start.isoformat(),
                        "end": report.end.isoformat(),
                        "total": report.total,
                        "completionRate": report.completion_rate,
                    },
                },
                output,
            )
            return

        panels = [
            (summary, render_summary, "업무 현황"),
            (today, lambda tasks: build_task_table(tasks, title=f"{target.isoformat()} 일정"), "오늘 일정"),
            (weekly, render_weekly, "주간 보고"),
        ]
        for view, render, title in panels:
            boundary = ErrorBoundary(title)
            console.print(
                boundary.run(lambda: render_panel(view, render, title), fallback=_fallback(title))
            )
