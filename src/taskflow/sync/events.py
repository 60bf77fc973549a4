"""In-process event bus for task mutations.

Every successful mutation publishes one of six event kinds. Delivery is
synchronous: ``publish`` returns after every listener registered at that
moment has run. Listeners registered later never see the event.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from taskflow.models import Task, TaskStatus
from taskflow.utils.logger import get_logger

logger = get_logger("sync.events")


class TaskEventKind(str, Enum):
    """The closed set of task event kinds."""

    TASK_CREATED = "task_created"
    TASK_UPDATED = "task_updated"
    TASK_DELETED = "task_deleted"
    TASK_STATUS_CHANGED = "task_status_changed"
    TASKS_BULK_UPDATED = "tasks_bulk_updated"
    TASKS_BULK_DELETED = "tasks_bulk_deleted"


@dataclass(frozen=True)
class TaskEvent:
    """Base class of event payloads."""

    kind: ClassVar[TaskEventKind]


@dataclass(frozen=True)
class TaskCreated(TaskEvent):
    kind: ClassVar[TaskEventKind] = TaskEventKind.TASK_CREATED

    task: Task


@dataclass(frozen=True)
class TaskUpdated(TaskEvent):
    kind: ClassVar[TaskEventKind] = TaskEventKind.TASK_UPDATED

    task: Task


@dataclass(frozen=True)
class TaskDeleted(TaskEvent):
    kind: ClassVar[TaskEventKind] = TaskEventKind.TASK_DELETED

    task_id: int
    title: str | None = None


@dataclass(frozen=True)
class TaskStatusChanged(TaskEvent):
    kind: ClassVar[TaskEventKind] = TaskEventKind.TASK_STATUS_CHANGED

    task_id: int
    status: TaskStatus
    previous_status: TaskStatus | None = None


@dataclass(frozen=True)
class TasksBulkUpdated(TaskEvent):
    kind: ClassVar[TaskEventKind] = TaskEventKind.TASKS_BULK_UPDATED

    task_ids: tuple[int, ...]


@dataclass(frozen=True)
class TasksBulkDeleted(TaskEvent):
    kind: ClassVar[TaskEventKind] = TaskEventKind.TASKS_BULK_DELETED

    task_ids: tuple[int, ...]


Listener = Callable[[TaskEvent], None]


class Subscription:
    """Handle returned by subscribe; ``cancel()`` removes the listener.

    Cancelling twice is harmless.
    """

    def __init__(self, bus: EventBus, kinds: tuple[TaskEventKind, ...], listener: Listener):
        self._bus = bus
        self.kinds = kinds
        self.listener = listener
        self.active = True

    def cancel(self) -> None:
        if not self.active:
            return
        self.active = False
        for kind in self.kinds:
            self._bus._remove(kind, self.listener)

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info) -> None:
        self.cancel()


class EventBus:
    """Synchronous broadcast of task events to registered listeners."""

    def __init__(self):
        self._listeners: dict[TaskEventKind, list[Listener]] = {kind: [] for kind in TaskEventKind}

    def subscribe(self, kind: TaskEventKind, listener: Listener) -> Subscription:
        """Register ``listener`` for one event kind."""
        return self.subscribe_all(listener, kinds=(kind,))

    def subscribe_all(
        self, listener: Listener, kinds: Iterable[TaskEventKind] | None = None
    ) -> Subscription:
        """Register ``listener`` for several kinds (all six by default)."""
        selected = tuple(TaskEventKind) if kinds is None else tuple(TaskEventKind(k) for k in kinds)
        for kind in selected:
            self._listeners[kind].append(listener)
        return Subscription(self, selected, listener)

    def _remove(self, kind: TaskEventKind, listener: Listener) -> None:
        listeners = self._listeners[kind]
        if listener in listeners:
            listeners.remove(listener)

    def publish(self, event: TaskEvent) -> int:
        """Deliver ``event`` to the listeners of its kind.

        A failing listener is logged and skipped; the others still run.

        Returns:
            Number of listeners the event was delivered to
        """
        listeners = list(self._listeners[event.kind])
        logger.debug("publishing %s to %d listener(s)", event.kind.value, len(listeners))
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("listener %r failed on %s", listener, event.kind.value)
        return len(listeners)

    def listener_count(self, kind: TaskEventKind | None = None) -> int:
        """Listeners for ``kind``, or across all kinds when omitted."""
        if kind is not None:
            return len(self._listeners[TaskEventKind(kind)])
        return sum(len(listeners) for listeners in self._listeners.values())
