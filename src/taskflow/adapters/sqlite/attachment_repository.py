"""SQLite implementation of AttachmentRepository.

Files are copied under ``<data_dir>/attachments/<task_id>/`` and recorded with
a path relative to the data directory, so relocating the data directory keeps
them valid.
"""

from __future__ import annotations

import shutil
import sqlite3
from datetime import UTC, datetime
from pathlib import Path

from taskflow.adapters.sqlite.base import SqliteRepositoryBase
from taskflow.adapters.sqlite.utils import now_iso, row_to_dict
from taskflow.models import Attachment
from taskflow.models.exceptions import TaskNotFoundError
from taskflow.repositories import AttachmentRepository
from taskflow.utils.logger import get_logger

logger = get_logger("sqlite.attachments")


class SqliteAttachmentRepository(SqliteRepositoryBase, AttachmentRepository):
    """Attachment storage in the local data directory."""

    def __init__(
        self,
        attachments_dir: str | Path,
        db_path: str | Path | None = None,
        user_id: int = 1,
        connection: sqlite3.Connection | None = None,
    ):
        super().__init__(db_path=db_path, user_id=user_id, connection=connection)
        self.attachments_dir = Path(attachments_dir)

    async def add(self, task_id: int, file_path: Path, mime_type: str | None) -> Attachment:
        exists = self.connection.execute(
            "SELECT 1 FROM daily_tasks WHERE id = ?", (task_id,)
        ).fetchone()
        if exists is None:
            raise TaskNotFoundError(f"Task not found: {task_id}")

        source = Path(file_path)
        target_dir = self.attachments_dir / str(task_id)
        target_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(UTC).strftime("%Y%m%d%H%M%S")
        target = target_dir / f"{stamp}_{source.name}"
        shutil.copy2(source, target)

        file_url = f"{self.attachments_dir.name}/{task_id}/{target.name}"
        cursor = self.connection.execute(
            """
            INSERT INTO attachments
                (task_id, task_type, file_name, file_url, file_size, mime_type, uploaded_by, created_at)
            VALUES (?, 'daily', ?, ?, ?, ?, ?, ?)
            """,
            (
                task_id,
                source.name,
                file_url,
                target.stat().st_size,
                mime_type,
                self.user_id,
                now_iso(),
            ),
        )
        self.connection.commit()
        logger.info("stored attachment %s for task %s", target, task_id)

        row = self.connection.execute(
            "SELECT * FROM attachments WHERE id = ?", (cursor.lastrowid,)
        ).fetchone()
        return Attachment.model_validate(row_to_dict(row))

    async def list_for_task(self, task_id: int) -> list[Attachment]:
        rows = self.connection.execute(
            "SELECT * FROM attachments WHERE task_id = ? ORDER BY created_at, id",
            (task_id,),
        ).fetchall()
        return [Attachment.model_validate(row_to_dict(row)) for row in rows]
