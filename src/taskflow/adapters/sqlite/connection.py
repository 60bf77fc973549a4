"""Database connection management for the TaskFlow SQLite store.

One connection per process, opened on the database file inside the configured
data directory, with WAL journaling and foreign keys enforced.
"""

from __future__ import annotations

import atexit
import sqlite3
from pathlib import Path

from taskflow.utils.logger import get_logger

logger = get_logger("sqlite.connection")


def _all_migrations():
    from taskflow.adapters.sqlite.migrations import ALL_MIGRATIONS

    return ALL_MIGRATIONS


class DatabaseConnection:
    """Singleton connection manager.

    The connection is closed and forgotten when the data directory moves, so
    the next caller reopens it at the new location.
    """

    _instance: DatabaseConnection | None = None
    _connection: sqlite3.Connection | None = None
    _db_path: Path | None = None
    _atexit_registered = False

    def __new__(cls) -> DatabaseConnection:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    def get_connection(cls, db_path: str | Path) -> sqlite3.Connection:
        """Get or create the connection for ``db_path``.

        Args:
            db_path: Path to the database file

        Returns:
            Configured sqlite3.Connection with the schema migrated
        """
        instance = cls()
        db_path = Path(db_path)

        if instance._connection is not None and instance._db_path == db_path:
            return instance._connection

        if instance._connection is not None:
            cls.close_connection()

        db_path.parent.mkdir(parents=True, exist_ok=True)
        connection = open_connection(str(db_path))
        logger.info("opened database %s", db_path)

        instance._connection = connection
        instance._db_path = db_path

        if not cls._atexit_registered:
            atexit.register(cls.close_connection)
            cls._atexit_registered = True

        return connection

    @classmethod
    def close_connection(cls) -> None:
        """Commit and close the connection, if any."""
        instance = cls()
        if instance._connection is None:
            return
        try:
            instance._connection.commit()
            instance._connection.close()
        except sqlite3.Error as e:
            logger.warning("error while closing database %s: %s", instance._db_path, e)
        finally:
            instance._connection = None
            instance._db_path = None

    @classmethod
    def get_db_path(cls) -> Path | None:
        return cls()._db_path


def open_connection(database: str) -> sqlite3.Connection:
    """Open and migrate a connection; ``":memory:"`` works for tests."""
    connection = sqlite3.connect(database, check_same_thread=False, timeout=30.0)
    connection.row_factory = sqlite3.Row
    connection.execute("PRAGMA foreign_keys = ON")
    if database != ":memory:":
        connection.execute("PRAGMA journal_mode = WAL")

    from taskflow.adapters.sqlite.migrations.runner import MigrationRunner

    MigrationRunner(connection).run_migrations(_all_migrations())
    return connection


def get_connection(db_path: str | Path) -> sqlite3.Connection:
    """Helper returning the shared connection for ``db_path``."""
    return DatabaseConnection.get_connection(db_path)
