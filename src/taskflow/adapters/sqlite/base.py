"""Shared plumbing for SQLite repositories."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from taskflow.adapters.sqlite.connection import get_connection
from taskflow.adapters.sqlite.user_manager import ensure_local_user


class SqliteRepositoryBase:
    """Lazy connection plus the acting user's ID and role.

    Args:
        db_path: Database file. Ignored when ``connection`` is given.
        user_id: User the repository acts as
        connection: Pre-opened connection (tests use an in-memory one)
    """

    def __init__(
        self,
        db_path: str | Path | None = None,
        user_id: int = 1,
        connection: sqlite3.Connection | None = None,
    ):
        if db_path is None and connection is None:
            raise ValueError("either db_path or connection is required")
        self.db_path = db_path
        self.user_id = user_id
        self._connection = connection
        self._role: str | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        if self._connection is None:
            self._connection = get_connection(self.db_path)
        return self._connection

    @property
    def role(self) -> str:
        if self._role is None:
            self._role = ensure_local_user(self.connection, self.user_id)
        return self._role
