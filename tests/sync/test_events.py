"""Tests for the task event bus."""

from unittest.mock import MagicMock

import pytest

from taskflow.models import TaskStatus
from taskflow.sync.events import (
    TaskCreated,
    TaskDeleted,
    TaskEventKind,
    TasksBulkDeleted,
    TasksBulkUpdated,
    TaskStatusChanged,
    TaskUpdated,
)


def test_every_payload_carries_its_kind(task_factory):
    task = task_factory(1)
    assert TaskCreated(task=task).kind is TaskEventKind.TASK_CREATED
    assert TaskUpdated(task=task).kind is TaskEventKind.TASK_UPDATED
    assert TaskDeleted(task_id=1, title="x").kind is TaskEventKind.TASK_DELETED
    assert (
        TaskStatusChanged(task_id=1, status=TaskStatus.COMPLETED).kind
        is TaskEventKind.TASK_STATUS_CHANGED
    )
    assert TasksBulkUpdated(task_ids=(1, 2)).kind is TaskEventKind.TASKS_BULK_UPDATED
    assert TasksBulkDeleted(task_ids=(1, 2)).kind is TaskEventKind.TASKS_BULK_DELETED


def test_publish_delivers_synchronously_to_matching_listeners(bus):
    created = MagicMock()
    deleted = MagicMock()
    bus.subscribe(TaskEventKind.TASK_CREATED, created)
    bus.subscribe(TaskEventKind.TASK_DELETED, deleted)

    event = TaskDeleted(task_id=7, title="old")
    delivered = bus.publish(event)

    assert delivered == 1
    deleted.assert_called_once_with(event)
    created.assert_not_called()


def test_publish_with_no_listeners_is_fine(bus):
    assert bus.publish(TasksBulkDeleted(task_ids=(1,))) == 0


def test_late_subscriber_misses_earlier_event(bus):
    bus.publish(TaskDeleted(task_id=1))
    late = MagicMock()
    bus.subscribe(TaskEventKind.TASK_DELETED, late)
    late.assert_not_called()


def test_subscribe_all_covers_six_kinds_and_cancel_removes_them(bus):
    listener = MagicMock()
    subscription = bus.subscribe_all(listener)
    assert bus.listener_count() == 6
    for kind in TaskEventKind:
        assert bus.listener_count(kind) == 1

    subscription.cancel()
    subscription.cancel()
    assert bus.listener_count() == 0


def test_subscribe_all_with_selected_kinds(bus):
    listener = MagicMock()
    bus.subscribe_all(listener, kinds=[TaskEventKind.TASK_DELETED, "tasks_bulk_deleted"])
    assert bus.listener_count() == 2
    assert bus.listener_count(TaskEventKind.TASKS_BULK_DELETED) == 1


def test_failing_listener_does_not_stop_delivery(bus):
    def broken(event):
        raise RuntimeError("boom")

    after = MagicMock()
    bus.subscribe(TaskEventKind.TASK_UPDATED, broken)
    bus.subscribe(TaskEventKind.TASK_UPDATED, after)

    delivered = bus.publish(TaskUpdated(task=MagicMock()))

    assert delivered == 2
    after.assert_called_once()


def test_listener_unsubscribing_during_dispatch_does_not_skip_others(bus):
    calls = []
    subscriptions = []

    def first(event):
        calls.append("first")
        subscriptions[0].cancel()

    def second(event):
        calls.append("second")

    subscriptions.append(bus.subscribe(TaskEventKind.TASK_DELETED, first))
    bus.subscribe(TaskEventKind.TASK_DELETED, second)

    bus.publish(TaskDeleted(task_id=1))
    bus.publish(TaskDeleted(task_id=2))

    assert calls == ["first", "second", "second"]


def test_subscription_as_context_manager(bus):
    with bus.subscribe(TaskEventKind.TASK_CREATED, MagicMock()):
        assert bus.listener_count(TaskEventKind.TASK_CREATED) == 1
    assert bus.listener_count(TaskEventKind.TASK_CREATED) == 0


def test_unknown_kind_is_rejected(bus):
    with pytest.raises(ValueError):
        bus.subscribe_all(MagicMock(), kinds=["task_archived"])
