"""Task list synchronization: cache, event bus and consuming views."""

from taskflow.sync.events import (
    EventBus,
    Subscription,
    TaskCreated,
    TaskDeleted,
    TaskEvent,
    TaskEventKind,
    TasksBulkDeleted,
    TasksBulkUpdated,
    TaskStatusChanged,
    TaskUpdated,
)
from taskflow.sync.task_cache import TaskCache, TaskSnapshot
from taskflow.sync.views import (
    RenderState,
    SummaryCardsView,
    TaskListView,
    TaskView,
    TodayScheduleView,
    WeeklyReportView,
)

__all__ = [
    "EventBus",
    "RenderState",
    "Subscription",
    "SummaryCardsView",
    "TaskCache",
    "TaskCreated",
    "TaskDeleted",
    "TaskEvent",
    "TaskEventKind",
    "TaskListView",
    "TaskSnapshot",
    "TaskStatusChanged",
    "TaskUpdated",
    "TaskView",
    "TasksBulkDeleted",
    "TasksBulkUpdated",
    "TodayScheduleView",
    "WeeklyReportView",
]
