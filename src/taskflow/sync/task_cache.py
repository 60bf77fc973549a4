"""Shared in-memory cache of the visible task list.

One snapshot of every task the current user can see, fetched from the task
repository. Concurrent refresh requests collapse into a single in-flight
fetch, a failed fetch keeps the previous tasks and surfaces the error, and
only this module ever replaces the snapshot.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime

from taskflow.models import Task
from taskflow.models.exceptions import StoreUnavailableError, TaskFlowError
from taskflow.repositories import TaskRepository
from taskflow.sync.events import (
    EventBus,
    Subscription,
    TaskDeleted,
    TaskEvent,
    TasksBulkDeleted,
)
from taskflow.utils.dates import now_utc
from taskflow.utils.logger import get_logger

logger = get_logger("sync.cache")

DEFAULT_STALE_TIME = 300.0
DEFAULT_FETCH_TIMEOUT = 15.0


@dataclass(frozen=True)
class TaskSnapshot:
    """Immutable view of the cache at one point in time.

    Attributes:
        tasks: Tasks from the last successful fetch (possibly stale)
        is_loading: A fetch is in flight
        error: Failure of the last fetch, cleared by the next success
        fetched_at: When the last successful fetch completed
    """

    tasks: tuple[Task, ...] = ()
    is_loading: bool = False
    error: Exception | None = None
    fetched_at: datetime | None = None

    @property
    def has_error(self) -> bool:
        return self.error is not None

    @property
    def is_empty(self) -> bool:
        """A successful fetch returned no tasks."""
        return self.fetched_at is not None and not self.tasks

    @property
    def is_initial_loading(self) -> bool:
        return self.is_loading and self.fetched_at is None

    @property
    def is_refreshing(self) -> bool:
        return self.is_loading and self.fetched_at is not None

    def raise_for_error(self) -> None:
        """Re-raise the last fetch failure as a TaskFlowError, if any."""
        if self.error is None:
            return
        if isinstance(self.error, TaskFlowError):
            raise self.error
        raise StoreUnavailableError(f"업무 목록을 불러오지 못했습니다: {self.error}") from self.error


SnapshotListener = Callable[[TaskSnapshot], None]


class CacheSubscription:
    """Handle for a snapshot listener; ``cancel()`` is idempotent."""

    def __init__(self, cache: TaskCache, listener: SnapshotListener):
        self._cache = cache
        self.listener = listener
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self.active = False
            self._cache._unsubscribe(self.listener)


class TaskCache:
    """Request-collapsing, stale-while-revalidate cache over a TaskRepository.

    Args:
        repository: Store the tasks are fetched from
        stale_time: Seconds a successful fetch stays fresh
        fetch_timeout: Upper bound for one store fetch, in seconds
        clock: Monotonic clock, replaceable in tests
    """

    def __init__(
        self,
        repository: TaskRepository,
        *,
        stale_time: float = DEFAULT_STALE_TIME,
        fetch_timeout: float = DEFAULT_FETCH_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._repository = repository
        self.stale_time = stale_time
        self.fetch_timeout = fetch_timeout
        self._clock = clock

        self._snapshot = TaskSnapshot()
        self._listeners: list[SnapshotListener] = []
        self._inflight: asyncio.Task | None = None
        self._fetch_started = False
        self._refetch_requested = False
        self._invalidated = True
        self._evicted: set[int] = set()
        self._fetched_clock: float | None = None
        self.fetch_count = 0

    def get_tasks(self) -> TaskSnapshot:
        """Current snapshot; never triggers a fetch."""
        return self._snapshot

    @property
    def is_stale(self) -> bool:
        if self._invalidated or self._fetched_clock is None:
            return True
        return self._clock() - self._fetched_clock > self.stale_time

    @property
    def is_fetching(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    def mark_stale(self) -> None:
        """Mark stale without fetching; the next ensure_fresh() refetches."""
        self._invalidated = True

    def invalidate(self) -> asyncio.Task:
        """Mark the snapshot stale and return the shared fetch.

        Callers arriving before the fetch has reached the store join it. A call
        arriving while the store request is already out schedules exactly one
        follow-up fetch on the same task, so a write that landed mid-flight is
        never missed.
        """
        self._invalidated = True
        if self.is_fetching:
            if self._fetch_started:
                self._refetch_requested = True
            return self._inflight

        self._refetch_requested = False
        self._inflight = asyncio.ensure_future(self._fetch_loop())
        self._publish(replace(self._snapshot, is_loading=True))
        return self._inflight

    async def invalidate_and_refetch(self) -> TaskSnapshot:
        """Invalidate and wait for the shared fetch to finish.

        Cancelling the caller does not cancel the fetch; its result is still
        committed to the snapshot.
        """
        await asyncio.shield(self.invalidate())
        return self._snapshot

    async def ensure_fresh(self) -> TaskSnapshot:
        """Fetch only if the snapshot is stale."""
        if self.is_fetching:
            await asyncio.shield(self._inflight)
        elif self.is_stale:
            return await self.invalidate_and_refetch()
        return self._snapshot

    async def _fetch_loop(self) -> TaskSnapshot:
        try:
            while True:
                self._refetch_requested = False
                self._evicted.clear()
                self._fetch_started = True
                await self._fetch_once()
                if not self._refetch_requested:
                    return self._snapshot
                logger.debug("task list invalidated during fetch, fetching again")
        finally:
            self._fetch_started = False

    async def _fetch_once(self) -> None:
        self.fetch_count += 1
        started = self._clock()
        try:
            tasks = await asyncio.wait_for(self._repository.list_all(), timeout=self.fetch_timeout)
        except asyncio.CancelledError:
            self._publish(replace(self._snapshot, is_loading=False))
            raise
        except TimeoutError:
            error = StoreUnavailableError(
                f"task list fetch timed out after {self.fetch_timeout:g}s"
            )
            self._fail(error)
            return
        except Exception as e:
            self._fail(e)
            return

        if self._evicted:
            # Deleted while this request was out
            tasks = [task for task in tasks if task.id not in self._evicted]
        if not self._refetch_requested:
            self._invalidated = False
        self._fetched_clock = started
        self._publish(
            TaskSnapshot(
                tasks=tuple(tasks),
                is_loading=self._refetch_requested,
                error=None,
                fetched_at=now_utc(),
            )
        )
        logger.debug("fetched %d task(s) (fetch #%d)", len(tasks), self.fetch_count)

    def _fail(self, error: Exception) -> None:
        logger.warning("task list fetch failed, keeping previous snapshot: %s", error)
        self._publish(
            replace(self._snapshot, is_loading=self._refetch_requested, error=error)
        )

    def subscribe(self, listener: SnapshotListener) -> CacheSubscription:
        """Call ``listener`` with every new snapshot."""
        self._listeners.append(listener)
        return CacheSubscription(self, listener)

    def _unsubscribe(self, listener: SnapshotListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _publish(self, snapshot: TaskSnapshot) -> None:
        self._snapshot = snapshot
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("snapshot listener %r failed", listener)

    def evict(self, task_ids) -> int:
        """Drop tasks the store confirmed deleted. Returns how many were dropped."""
        doomed = set(task_ids)
        if self._fetch_started:
            self._evicted.update(doomed)
        kept = tuple(task for task in self._snapshot.tasks if task.id not in doomed)
        removed = len(self._snapshot.tasks) - len(kept)
        if removed:
            self._publish(replace(self._snapshot, tasks=kept))
        return removed

    def _on_event(self, event: TaskEvent) -> None:
        if isinstance(event, TaskDeleted):
            self.evict([event.task_id])
        elif isinstance(event, TasksBulkDeleted):
            self.evict(event.task_ids)

        if self._snapshot.fetched_at is None and not self.is_fetching:
            # Never loaded; nothing to refresh yet
            self.mark_stale()
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            self.mark_stale()
            return
        self.invalidate()

    def bind(self, bus: EventBus) -> Subscription:
        """Refresh after every published write.

        Deleted tasks are evicted at once; the refetch that follows runs on the
        shared fetch, so views invalidating for the same event join it.
        """
        return bus.subscribe_all(self._on_event)
