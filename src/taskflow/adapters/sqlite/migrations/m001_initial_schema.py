"""Initial database schema migration.

Creates users, daily_tasks, weekly_tasks, notifications, comments and
attachments, plus their indexes.
"""

import sqlite3

from taskflow.adapters.sqlite import schema

from .runner import Migration


class InitialSchemaMigration(Migration):
    """Migration 001: Create initial database schema."""

    @property
    def version(self) -> int:
        return 1

    @property
    def description(self) -> str:
        return "Initial database schema"

    def up(self, connection: sqlite3.Connection) -> None:
        """Create all initial tables."""
        schema.apply_schema(connection)


initial_migration = InitialSchemaMigration()
