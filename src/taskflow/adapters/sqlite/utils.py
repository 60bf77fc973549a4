"""Utility functions for the SQLite adapter."""

from __future__ import annotations

import sqlite3
from datetime import UTC, date, datetime
from typing import Any

# Columns stored as 0/1 that the models expect as booleans
BOOLEAN_COLUMNS = ("is_follow_up_task", "is_read")


def now_iso() -> str:
    """Current UTC timestamp in ISO format."""
    return datetime.now(UTC).isoformat()


def row_to_dict(row: sqlite3.Row | None) -> dict[str, Any]:
    """Convert a sqlite3.Row to a dict, turning 0/1 flags into booleans."""
    if row is None:
        return {}
    data = dict(row)
    for column in BOOLEAN_COLUMNS:
        if column in data and data[column] is not None:
            data[column] = bool(data[column])
    return data


def to_db_value(value: Any) -> Any:
    """Convert a model value to something sqlite3 can bind."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool):
        return int(value)
    if hasattr(value, "value"):
        # Enum members
        return value.value
    return value
