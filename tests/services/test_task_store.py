"""Tests for the TaskStore container."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from taskflow.api.client import APIClient
from taskflow.models.storage_strategy import RemoteStorageStrategy, StorageStrategyContext
from taskflow.services.task_store import TaskStore
from taskflow.sync.events import TaskDeleted


def test_local_store_uses_config(tmp_config):
    tmp_config.set_value("cache.stale_time", 12)
    store = TaskStore.from_config(tmp_config)

    assert store.storage.storage_type == "local"
    assert store.cache.stale_time == 12
    assert store.config_service.get_backup_dir().is_dir()


@pytest.mark.asyncio
async def test_cache_is_bound_to_the_bus(tmp_config, fake_repo):
    strategy = MagicMock()
    strategy.get_task_repository.return_value = fake_repo
    strategy.storage_type = "local"
    store = TaskStore(tmp_config, StorageStrategyContext(strategy))

    await store.cache.ensure_fresh()
    del fake_repo.tasks[1]
    store.bus.publish(TaskDeleted(task_id=1))
    assert [t.id for t in store.cache.get_tasks().tasks] == [2, 3]
    assert store.cache.is_stale

    await store.cache.ensure_fresh()
    assert fake_repo.list_calls == 2
    assert store.tasks.cache is store.cache


def test_auto_backup_skips_missing_database(tmp_config):
    store = TaskStore.from_config(tmp_config)
    store.run_auto_backup()
    assert store.backups.list_backups() == []


@pytest.mark.asyncio
async def test_remote_store_closes_its_client(tmp_config):
    client = APIClient(tmp_config)
    client.close = AsyncMock()
    store = TaskStore(tmp_config, StorageStrategyContext(RemoteStorageStrategy(client)))

    assert store.storage.storage_type == "remote"
    store.run_auto_backup()
    await store.aclose()
    client.close.assert_awaited_once()


def test_storage_is_fixed_for_the_store_lifetime():
    context = StorageStrategyContext(MagicMock())
    assert not hasattr(context, "switch_strategy")
    assert not hasattr(context, "strategy")
