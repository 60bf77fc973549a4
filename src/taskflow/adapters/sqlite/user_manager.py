"""User profile management for the local SQLite store.

Local storage has a single operator; the first time a user ID is seen it gets
a placeholder profile with the manager role so it can see every task.
"""

from __future__ import annotations

import sqlite3

from taskflow.adapters.sqlite.utils import now_iso

# Roles that may see every task, not only their own
ALL_TASKS_ROLES = frozenset({"manager", "developer"})


def create_local_user(
    connection: sqlite3.Connection, user_id: int, role: str = "manager"
) -> None:
    """Insert a placeholder profile for ``user_id``."""
    now = now_iso()
    connection.execute(
        """
        INSERT INTO users (id, username, email, name, role, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        (user_id, f"user{user_id}", f"user{user_id}@taskflow.local", "Local User", role, now, now),
    )
    connection.commit()


def ensure_local_user(connection: sqlite3.Connection, user_id: int) -> str:
    """Make sure ``user_id`` has a profile and return its role."""
    row = connection.execute("SELECT role FROM users WHERE id = ?", (user_id,)).fetchone()
    if row is not None:
        return row[0]
    create_local_user(connection, user_id)
    return "manager"


def can_see_all_tasks(role: str) -> bool:
    return role in ALL_TASKS_ROLES
