"""Tests for the shared task cache."""

import asyncio

import pytest

from taskflow.models.exceptions import StoreUnavailableError
from taskflow.services.task_service import TaskService
from taskflow.sync.events import TaskCreated, TaskDeleted, TasksBulkDeleted
from taskflow.sync.task_cache import TaskCache


async def until(predicate, attempts: int = 100) -> None:
    """Yield to the loop until ``predicate()`` holds."""
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never became true")


@pytest.mark.asyncio
async def test_initial_snapshot_is_empty_and_not_fetched(cache):
    snapshot = cache.get_tasks()
    assert snapshot.tasks == ()
    assert snapshot.fetched_at is None
    assert not snapshot.is_empty
    assert cache.is_stale
    assert cache.fetch_count == 0


@pytest.mark.asyncio
async def test_refetch_loads_tasks(cache, fake_repo):
    snapshot = await cache.invalidate_and_refetch()

    assert [t.id for t in snapshot.tasks] == [1, 2, 3]
    assert snapshot.fetched_at is not None
    assert not snapshot.is_loading
    assert not snapshot.has_error
    assert fake_repo.list_calls == 1


@pytest.mark.asyncio
async def test_concurrent_refetches_collapse_into_one_fetch(cache, fake_repo):
    results = await asyncio.gather(*(cache.invalidate_and_refetch() for _ in range(5)))

    assert fake_repo.list_calls == 1
    assert cache.fetch_count == 1
    assert all(r.tasks is results[0].tasks for r in results)


@pytest.mark.asyncio
async def test_invalidation_while_store_request_is_out_adds_one_follow_up_fetch(
    cache, fake_repo, task_factory
):
    fake_repo.gate = asyncio.Event()
    first = asyncio.create_task(cache.invalidate_and_refetch())
    await until(lambda: fake_repo.list_calls == 1)

    # A write lands while the first request is in flight
    fake_repo.tasks[4] = task_factory(4)
    late = [asyncio.create_task(cache.invalidate_and_refetch()) for _ in range(3)]
    await asyncio.sleep(0)
    assert cache.get_tasks().is_loading

    fake_repo.gate.set()
    snapshots = await asyncio.gather(first, *late)

    assert fake_repo.list_calls == 2
    assert [t.id for t in snapshots[-1].tasks] == [1, 2, 3, 4]
    assert not cache.is_stale


@pytest.mark.asyncio
async def test_loading_flags_during_first_and_later_fetches(cache, fake_repo):
    fake_repo.gate = asyncio.Event()
    cache.invalidate()
    assert cache.get_tasks().is_initial_loading
    fake_repo.gate.set()
    await cache.invalidate_and_refetch()

    fake_repo.gate = asyncio.Event()
    cache.invalidate()
    snapshot = cache.get_tasks()
    assert snapshot.is_refreshing
    assert not snapshot.is_initial_loading
    fake_repo.gate.set()
    await cache.invalidate_and_refetch()


@pytest.mark.asyncio
async def test_failed_fetch_keeps_previous_tasks_and_sets_error(cache, fake_repo):
    first = await cache.invalidate_and_refetch()

    fake_repo.fail_with = StoreUnavailableError("server down")
    failed = await cache.invalidate_and_refetch()

    assert failed.tasks is first.tasks
    assert failed.has_error
    assert isinstance(failed.error, StoreUnavailableError)
    assert not failed.is_loading
    assert cache.is_stale

    fake_repo.fail_with = None
    recovered = await cache.invalidate_and_refetch()
    assert not recovered.has_error
    assert [t.id for t in recovered.tasks] == [1, 2, 3]


@pytest.mark.asyncio
async def test_failure_is_not_retried_automatically(cache, fake_repo):
    fake_repo.fail_with = RuntimeError("boom")
    await cache.invalidate_and_refetch()
    await asyncio.sleep(0)
    assert fake_repo.list_calls == 1


@pytest.mark.asyncio
async def test_fetch_timeout_surfaces_as_error(fake_repo):
    fake_repo.gate = asyncio.Event()
    cache = TaskCache(fake_repo, fetch_timeout=0.01)

    snapshot = await cache.invalidate_and_refetch()

    assert isinstance(snapshot.error, StoreUnavailableError)
    assert "timed out" in str(snapshot.error)
    assert not snapshot.is_loading
    assert snapshot.fetched_at is None


@pytest.mark.asyncio
async def test_double_invalidation_is_idempotent(cache):
    once = await cache.invalidate_and_refetch()
    twice = await cache.invalidate_and_refetch()
    assert once.tasks == twice.tasks
    assert once.error is None and twice.error is None


@pytest.mark.asyncio
async def test_empty_collection_is_empty_not_error(empty_repo):
    cache = TaskCache(empty_repo)
    snapshot = await cache.invalidate_and_refetch()
    assert snapshot.is_empty
    assert not snapshot.has_error


@pytest.mark.asyncio
async def test_ensure_fresh_respects_stale_time(fake_repo):
    now = [1000.0]
    cache = TaskCache(fake_repo, stale_time=300.0, clock=lambda: now[0])

    await cache.ensure_fresh()
    await cache.ensure_fresh()
    assert fake_repo.list_calls == 1

    now[0] += 301
    await cache.ensure_fresh()
    assert fake_repo.list_calls == 2


@pytest.mark.asyncio
async def test_explicit_invalidation_beats_freshness_window(cache, fake_repo):
    await cache.ensure_fresh()
    cache.mark_stale()
    await cache.ensure_fresh()
    assert fake_repo.list_calls == 2

    await cache.invalidate_and_refetch()
    assert fake_repo.list_calls == 3


@pytest.mark.asyncio
async def test_cancelled_caller_does_not_cancel_shared_fetch(cache, fake_repo):
    fake_repo.gate = asyncio.Event()
    caller = asyncio.create_task(cache.invalidate_and_refetch())
    await until(lambda: fake_repo.list_calls == 1)

    caller.cancel()
    fake_repo.gate.set()
    await until(lambda: not cache.is_fetching)

    assert caller.cancelled()
    assert [t.id for t in cache.get_tasks().tasks] == [1, 2, 3]


@pytest.mark.asyncio
async def test_snapshot_listeners_and_unsubscribe(cache):
    seen = []
    subscription = cache.subscribe(seen.append)

    await cache.invalidate_and_refetch()
    assert [s.is_loading for s in seen] == [True, False]

    subscription.cancel()
    assert cache.listener_count == 0
    await cache.invalidate_and_refetch()
    assert len(seen) == 2


@pytest.mark.asyncio
async def test_failing_snapshot_listener_is_isolated(cache):
    def broken(snapshot):
        raise RuntimeError("boom")

    cache.subscribe(broken)
    snapshot = await cache.invalidate_and_refetch()
    assert len(snapshot.tasks) == 3


@pytest.mark.asyncio
async def test_bound_cache_evicts_deleted_tasks(bound_cache, bus, fake_repo):
    await bound_cache.invalidate_and_refetch()

    del fake_repo.tasks[2]
    bus.publish(TaskDeleted(task_id=2, title="Task 2"))
    assert [t.id for t in bound_cache.get_tasks().tasks] == [1, 3]

    del fake_repo.tasks[1], fake_repo.tasks[3]
    bus.publish(TasksBulkDeleted(task_ids=(1, 3, 99)))
    snapshot = bound_cache.get_tasks()
    assert snapshot.tasks == ()
    assert snapshot.is_empty

    # Both deletes share one refetch
    settled = await bound_cache.ensure_fresh()
    assert settled.tasks == ()
    assert bound_cache.fetch_count == 2


@pytest.mark.asyncio
async def test_bound_cache_refetches_after_write_without_views(
    bound_cache, bus, fake_repo, task_factory
):
    await bound_cache.ensure_fresh()

    fake_repo.tasks[4] = task_factory(4)
    bus.publish(TaskCreated(task=fake_repo.tasks[4]))
    assert bound_cache.is_stale

    snapshot = await bound_cache.ensure_fresh()
    assert [t.id for t in snapshot.tasks] == [1, 2, 3, 4]
    assert fake_repo.list_calls == 2


@pytest.mark.asyncio
async def test_delete_during_in_flight_fetch_is_not_resurrected(bound_cache, bus, fake_repo):
    service = TaskService(fake_repo, bus, bound_cache)
    await bound_cache.ensure_fresh()

    fake_repo.gate = asyncio.Event()
    bound_cache.mark_stale()
    refresh = asyncio.create_task(bound_cache.ensure_fresh())
    await until(lambda: fake_repo.list_calls == 2)

    seen = []
    bound_cache.subscribe(seen.append)
    await service.delete_task(2)
    fake_repo.gate.set()
    snapshot = await refresh

    assert [t.id for t in snapshot.tasks] == [1, 3]
    assert all(2 not in [t.id for t in s.tasks] for s in seen)
    assert not bound_cache.is_stale
    assert fake_repo.list_calls == 3


@pytest.mark.asyncio
async def test_write_before_first_load_only_marks_stale(bound_cache, bus, task_factory):
    bus.publish(TaskCreated(task=task_factory(9)))

    assert bound_cache.is_stale
    assert not bound_cache.is_fetching
    assert bound_cache.fetch_count == 0


@pytest.mark.asyncio
async def test_evicting_unknown_ids_keeps_snapshot_identity(cache):
    await cache.invalidate_and_refetch()
    before = cache.get_tasks()
    assert cache.evict([42]) == 0
    assert cache.get_tasks() is before


@pytest.mark.asyncio
async def test_raise_for_error_wraps_foreign_errors(cache, fake_repo):
    fake_repo.fail_with = OSError("socket closed")
    snapshot = await cache.invalidate_and_refetch()
    with pytest.raises(StoreUnavailableError):
        snapshot.raise_for_error()
