"""Display labels and icons for task status and priority."""

from __future__ import annotations

from taskflow.models import TaskPriority, TaskStatus

STATUS_CONFIG: dict[TaskStatus, dict[str, str]] = {
    TaskStatus.SCHEDULED: {"label": "예정", "style": "yellow", "icon": "📅"},
    TaskStatus.IN_PROGRESS: {"label": "진행중", "style": "blue", "icon": "🔄"},
    TaskStatus.COMPLETED: {"label": "완료", "style": "green", "icon": "✅"},
    TaskStatus.POSTPONED: {"label": "연기", "style": "magenta", "icon": "⏸"},
    TaskStatus.CANCELLED: {"label": "취소", "style": "dim", "icon": "❌"},
}

# Labels of the legacy vocabulary, for input help and old exports only.
LEGACY_STATUS_LABELS: dict[str, str] = {
    "pending": "대기",
    "in-progress": "진행중",
    "review": "검토중",
}

PRIORITY_CONFIG: dict[TaskPriority, dict[str, str]] = {
    TaskPriority.LOW: {"label": "낮음", "style": "green", "icon": "🟢"},
    TaskPriority.MEDIUM: {"label": "보통", "style": "yellow", "icon": "🟡"},
    TaskPriority.HIGH: {"label": "높음", "style": "dark_orange", "icon": "🟠"},
    TaskPriority.URGENT: {"label": "긴급", "style": "red", "icon": "🔴"},
}


def status_label(status: TaskStatus) -> str:
    """Korean label for a status."""
    return STATUS_CONFIG.get(status, STATUS_CONFIG[TaskStatus.SCHEDULED])["label"]


def priority_label(priority: TaskPriority) -> str:
    """Korean label for a priority."""
    return PRIORITY_CONFIG.get(priority, PRIORITY_CONFIG[TaskPriority.MEDIUM])["label"]


def status_options() -> list[tuple[str, str]]:
    """(value, label) pairs for prompts and help text."""
    return [(status.value, cfg["label"]) for status, cfg in STATUS_CONFIG.items()]
