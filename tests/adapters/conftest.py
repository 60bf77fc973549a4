"""Fixtures for the SQLite adapter tests: one in-memory database per test."""

import pytest

from taskflow.adapters.sqlite import SqliteNotificationRepository, SqliteTaskRepository
from taskflow.adapters.sqlite.connection import open_connection
from taskflow.adapters.sqlite.user_manager import create_local_user


@pytest.fixture
def conn():
    connection = open_connection(":memory:")
    yield connection
    connection.close()


@pytest.fixture
def manager_repo(conn):
    """Repository acting as user 1 (auto-created manager)."""
    return SqliteTaskRepository(connection=conn, user_id=1)


@pytest.fixture
def employee_repo(conn):
    """Repository acting as user 2, an employee who only sees their own tasks."""
    create_local_user(conn, 2, role="employee")
    return SqliteTaskRepository(connection=conn, user_id=2)


@pytest.fixture
def notifications_for():
    def build(conn, user_id):
        return SqliteNotificationRepository(connection=conn, user_id=user_id)

    return build
