"""Database schema definitions for the TaskFlow SQLite store.

Mirrors the tables of the TaskFlow server so a data directory can be served
by either side.
"""

from __future__ import annotations

# Schema version tracking
SCHEMA_VERSION = 1

CREATE_USERS_TABLE = """
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT NOT NULL UNIQUE,
    email TEXT UNIQUE,
    password TEXT,
    name TEXT NOT NULL,
    department TEXT,
    role TEXT NOT NULL DEFAULT 'employee',
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL
)
"""

# Daily tasks - the task records every view works with
CREATE_DAILY_TASKS_TABLE = """
CREATE TABLE IF NOT EXISTS daily_tasks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    description TEXT,
    category TEXT NOT NULL DEFAULT '일반',
    status TEXT NOT NULL DEFAULT 'scheduled',
    priority TEXT NOT NULL DEFAULT 'medium',
    progress INTEGER NOT NULL DEFAULT 0,
    assigned_to INTEGER NOT NULL,
    created_by INTEGER,
    work_date TEXT,
    due_date TEXT,
    memo TEXT,
    weekly_task_id INTEGER,

    -- Follow-up workflow
    is_follow_up_task BOOLEAN NOT NULL DEFAULT 0,
    parent_task_id INTEGER,
    follow_up_type TEXT,
    follow_up_memo TEXT,
    confirmation_requested_at DATETIME,
    confirmation_completed_at DATETIME,

    completed_at DATETIME,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL,

    FOREIGN KEY (parent_task_id) REFERENCES daily_tasks(id) ON DELETE CASCADE,
    FOREIGN KEY (weekly_task_id) REFERENCES weekly_tasks(id) ON DELETE SET NULL,
    CHECK (is_follow_up_task = 0 OR parent_task_id IS NOT NULL)
)
"""

# Weekly tasks - week-level plans
CREATE_WEEKLY_TASKS_TABLE = """
CREATE TABLE IF NOT EXISTS weekly_tasks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    description TEXT,
    category TEXT NOT NULL DEFAULT '일반',
    status TEXT NOT NULL DEFAULT 'planned',
    priority TEXT NOT NULL DEFAULT 'medium',
    assigned_to INTEGER NOT NULL,
    created_by INTEGER,
    week_start_date TEXT NOT NULL,
    week_end_date TEXT NOT NULL,
    estimated_hours INTEGER DEFAULT 8,
    actual_hours INTEGER DEFAULT 0,
    completion_rate INTEGER DEFAULT 0,
    is_next_week_planned BOOLEAN DEFAULT 0,
    target_week_start_date TEXT,
    memo TEXT,
    completed_at DATETIME,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL
)
"""

CREATE_NOTIFICATIONS_TABLE = """
CREATE TABLE IF NOT EXISTS notifications (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    title TEXT NOT NULL,
    message TEXT NOT NULL,
    type TEXT NOT NULL DEFAULT 'generic',
    is_read BOOLEAN NOT NULL DEFAULT 0,
    task_id INTEGER,
    task_type TEXT DEFAULT 'daily',
    created_at DATETIME NOT NULL
)
"""

CREATE_COMMENTS_TABLE = """
CREATE TABLE IF NOT EXISTS comments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    task_id INTEGER NOT NULL,
    task_type TEXT NOT NULL DEFAULT 'daily',
    user_id INTEGER NOT NULL,
    content TEXT NOT NULL,
    created_at DATETIME NOT NULL,
    FOREIGN KEY (task_id) REFERENCES daily_tasks(id) ON DELETE CASCADE
)
"""

CREATE_ATTACHMENTS_TABLE = """
CREATE TABLE IF NOT EXISTS attachments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    task_id INTEGER NOT NULL,
    task_type TEXT NOT NULL DEFAULT 'daily',
    file_name TEXT NOT NULL,
    file_url TEXT NOT NULL,
    file_size INTEGER NOT NULL,
    mime_type TEXT,
    uploaded_by INTEGER,
    created_at DATETIME NOT NULL,
    FOREIGN KEY (task_id) REFERENCES daily_tasks(id) ON DELETE CASCADE
)
"""

ALL_TABLES = [
    CREATE_USERS_TABLE,
    CREATE_WEEKLY_TASKS_TABLE,
    CREATE_DAILY_TASKS_TABLE,
    CREATE_NOTIFICATIONS_TABLE,
    CREATE_COMMENTS_TABLE,
    CREATE_ATTACHMENTS_TABLE,
]

ALL_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_daily_tasks_assigned_to ON daily_tasks(assigned_to)",
    "CREATE INDEX IF NOT EXISTS idx_daily_tasks_work_date ON daily_tasks(work_date)",
    "CREATE INDEX IF NOT EXISTS idx_daily_tasks_status ON daily_tasks(status)",
    "CREATE INDEX IF NOT EXISTS idx_daily_tasks_parent ON daily_tasks(parent_task_id)",
    "CREATE INDEX IF NOT EXISTS idx_notifications_user ON notifications(user_id, is_read)",
    "CREATE INDEX IF NOT EXISTS idx_comments_task ON comments(task_id)",
    "CREATE INDEX IF NOT EXISTS idx_attachments_task ON attachments(task_id)",
]


def apply_schema(connection) -> None:
    """Create all tables and indexes (idempotent)."""
    for statement in ALL_TABLES:
        connection.execute(statement)
    for statement in ALL_INDEXES:
        connection.execute(statement)
