"""Fixtures for CLI command tests: a TaskStore backed by the in-memory fake."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from taskflow.models.storage_strategy import StorageStrategyContext
from taskflow.services.task_store import TaskStore

STORE_USERS = (
    "taskflow.commands.tasks.get_task_store",
    "taskflow.commands.dashboard.get_task_store",
    "taskflow.commands.notifications.get_task_store",
    "taskflow.commands.attachments.get_task_store",
)

CONFIG_USERS = (
    "taskflow.commands.config.get_config_service",
    "taskflow.commands.data.get_config_service",
    "taskflow.main.get_config_service",
    "taskflow.commands.auth.get_config_service",
)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def strategy(fake_repo):
    strategy = MagicMock()
    strategy.get_task_repository.return_value = fake_repo
    strategy.storage_type = "local"
    strategy.close = AsyncMock()
    return strategy


@pytest.fixture
def store(tmp_config, strategy):
    task_store = TaskStore(tmp_config, StorageStrategyContext(strategy))
    patches = [patch(target, return_value=task_store) for target in STORE_USERS]
    patches += [patch(target, return_value=tmp_config) for target in CONFIG_USERS]
    for p in patches:
        p.start()
    yield task_store
    for p in patches:
        p.stop()
