"""Views consuming the shared task cache.

A view mounts onto the cache and the event bus. Any task event makes it ask
the cache for a refetch; any new snapshot replaces the one it renders from.
What a view displays (``derived``) is recomputed only when the snapshot's
task tuple changes.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from taskflow.models import Task, TaskFilters, TaskPriority, TaskStatus
from taskflow.sync import selectors
from taskflow.sync.events import EventBus, Subscription, TaskEvent
from taskflow.sync.task_cache import CacheSubscription, TaskCache, TaskSnapshot
from taskflow.utils.logger import get_logger

logger = get_logger("sync.views")


class RenderState(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    EMPTY = "empty"
    READY = "ready"


class TaskView:
    """Base class for task list consumers.

    Subclasses implement :meth:`derive`. Usage::

        with SummaryCardsView(cache, bus) as view:
            await cache.ensure_fresh()
            print(view.derived)
    """

    name = "tasks"

    def __init__(self, cache: TaskCache, bus: EventBus):
        self.cache = cache
        self.bus = bus
        self.snapshot: TaskSnapshot = cache.get_tasks()
        self.refresh_requests = 0
        self.derive_count = 0
        self._event_subscription: Subscription | None = None
        self._cache_subscription: CacheSubscription | None = None
        self._pending: set[asyncio.Future] = set()
        self._derived_source: tuple[Task, ...] | None = None
        self._derived: Any = None

    @property
    def mounted(self) -> bool:
        return self._event_subscription is not None

    def mount(self) -> TaskView:
        """Read the current snapshot and start listening."""
        if self.mounted:
            return self
        self.snapshot = self.cache.get_tasks()
        self._event_subscription = self.bus.subscribe_all(self._on_event)
        self._cache_subscription = self.cache.subscribe(self._on_snapshot)
        logger.debug("mounted %s view", self.name)
        return self

    def unmount(self) -> None:
        """Stop listening. Refreshes already requested still complete in the cache."""
        if self._event_subscription is not None:
            self._event_subscription.cancel()
            self._event_subscription = None
        if self._cache_subscription is not None:
            self._cache_subscription.cancel()
            self._cache_subscription = None
        logger.debug("unmounted %s view", self.name)

    def __enter__(self) -> TaskView:
        return self.mount()

    def __exit__(self, *exc_info) -> None:
        self.unmount()

    def _on_event(self, event: TaskEvent) -> None:
        self.refresh_requests += 1
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Published outside an event loop; the next ensure_fresh() refetches
            self.cache.mark_stale()
            return
        # Join the shared fetch now so every listener of this event lands on it
        future = asyncio.shield(self.cache.invalidate())
        self._pending.add(future)
        future.add_done_callback(self._pending.discard)

    def _on_snapshot(self, snapshot: TaskSnapshot) -> None:
        self.snapshot = snapshot

    async def settle(self) -> TaskSnapshot:
        """Wait for every refresh this view has requested."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
        return self.snapshot

    @property
    def render_state(self) -> RenderState:
        snapshot = self.snapshot
        if snapshot.fetched_at is None:
            return RenderState.ERROR if snapshot.has_error else RenderState.LOADING
        if snapshot.is_empty:
            return RenderState.EMPTY
        return RenderState.READY

    @property
    def derived(self) -> Any:
        tasks = self.snapshot.tasks
        if self._derived_source is not tasks:
            self._derived = self.derive(tasks)
            self._derived_source = tasks
            self.derive_count += 1
        return self._derived

    def _reset_derived(self) -> None:
        self._derived_source = None

    def derive(self, tasks: tuple[Task, ...]) -> Any:
        raise NotImplementedError


@dataclass(frozen=True)
class SummaryCounts:
    total: int
    by_status: dict[TaskStatus, int]

    @property
    def problem(self) -> int:
        """Postponed plus cancelled."""
        return self.by_status[TaskStatus.POSTPONED] + self.by_status[TaskStatus.CANCELLED]

    def __getitem__(self, status: TaskStatus) -> int:
        return self.by_status[status]


class SummaryCardsView(TaskView):
    """Dashboard cards: totals per status."""

    name = "summary"

    def derive(self, tasks: tuple[Task, ...]) -> SummaryCounts:
        return SummaryCounts(total=len(tasks), by_status=selectors.count_by_status(tasks))


class TaskListView(TaskView):
    """Filterable task table."""

    name = "task-list"

    def __init__(self, cache: TaskCache, bus: EventBus, filters: TaskFilters | None = None):
        super().__init__(cache, bus)
        self.filters = filters

    def set_filters(self, filters: TaskFilters | None) -> None:
        self.filters = filters
        self._reset_derived()

    def derive(self, tasks: tuple[Task, ...]) -> list[Task]:
        return selectors.filter_tasks(tasks, self.filters)


_PRIORITY_ORDER = {
    TaskPriority.URGENT: 0,
    TaskPriority.HIGH: 1,
    TaskPriority.MEDIUM: 2,
    TaskPriority.LOW: 3,
}


class TodayScheduleView(TaskView):
    """Tasks scheduled for today, most urgent first."""

    name = "today"

    def __init__(self, cache: TaskCache, bus: EventBus, today: Callable[[], date] = date.today):
        super().__init__(cache, bus)
        self._today = today

    def derive(self, tasks: tuple[Task, ...]) -> list[Task]:
        todays = selectors.tasks_for_day(tasks, self._today())
        return sorted(todays, key=lambda t: (_PRIORITY_ORDER[t.priority], t.id))


@dataclass(frozen=True)
class WeeklyReport:
    start: date
    end: date
    tasks: list[Task] = field(default_factory=list)
    by_status: dict[TaskStatus, int] = field(default_factory=dict)
    completion_rate: float = 0.0

    @property
    def total(self) -> int:
        return len(self.tasks)


class WeeklyReportView(TaskView):
    """Counts and completion rate for one Monday-to-Sunday week."""

    name = "weekly"

    def __init__(self, cache: TaskCache, bus: EventBus, week_of: date | None = None):
        super().__init__(cache, bus)
        self.week_of = week_of

    def derive(self, tasks: tuple[Task, ...]) -> WeeklyReport:
        start, end = selectors.week_bounds(self.week_of or date.today())
        in_week = selectors.tasks_in_range(tasks, start, end)
        return WeeklyReport(
            start=start,
            end=end,
            tasks=in_week,
            by_status=selectors.count_by_status(in_week),
            completion_rate=selectors.completion_rate(in_week),
        )
