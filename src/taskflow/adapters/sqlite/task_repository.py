"""SQLite implementation of TaskRepository.

Plays the TaskFlow server's role for local storage: role-based visibility,
the follow-up confirmation workflow, and the notifications the server would
create on assignment, status change and comments.
"""

from __future__ import annotations

from typing import Any

from taskflow.adapters.sqlite.base import SqliteRepositoryBase
from taskflow.adapters.sqlite.notification_repository import create_notification
from taskflow.adapters.sqlite.user_manager import can_see_all_tasks
from taskflow.adapters.sqlite.utils import now_iso, row_to_dict, to_db_value
from taskflow.constants.task_configs import status_label
from taskflow.models import (
    Comment,
    NotificationType,
    Task,
    TaskCreate,
    TaskFilters,
    TaskStatus,
    TaskUpdate,
)
from taskflow.models.exceptions import TaskNotFoundError, ValidationError
from taskflow.repositories import TaskRepository
from taskflow.utils.logger import get_logger

logger = get_logger("sqlite.tasks")

AWAITING_CONFIRMATION_SQL = (
    "(t.is_follow_up_task = 1"
    " AND t.confirmation_requested_at IS NOT NULL"
    " AND t.confirmation_completed_at IS NULL"
    " AND t.status = 'scheduled')"
)

REJECT_MEMO_PREFIX = "반려사유: "
REJECT_DEFAULT_REASON = "사유 없음"


class SqliteTaskRepository(SqliteRepositoryBase, TaskRepository):
    """SQLite implementation of task repository."""

    def _fetch(self, task_id: int) -> Task:
        row = self.connection.execute(
            "SELECT * FROM daily_tasks WHERE id = ?", (task_id,)
        ).fetchone()
        if row is None:
            raise TaskNotFoundError(f"Task not found: {task_id}")
        return Task.model_validate(row_to_dict(row))

    def _notify(
        self,
        user_id: int | None,
        type: NotificationType,
        title: str,
        message: str,
        task_id: int,
    ) -> None:
        # Nobody is notified about their own actions
        if user_id is None or user_id == self.user_id:
            return
        create_notification(
            self.connection,
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            task_id=task_id,
        )

    def _visibility_clause(self) -> tuple[str, list[Any]]:
        if can_see_all_tasks(self.role):
            return "", []
        return " AND (t.assigned_to = ? OR t.created_by = ?)", [self.user_id, self.user_id]

    async def list_all(self, filters: TaskFilters | None = None) -> list[Task]:
        query = f"SELECT t.* FROM daily_tasks t WHERE NOT {AWAITING_CONFIRMATION_SQL}"
        visibility, params = self._visibility_clause()
        query += visibility

        if filters is not None:
            if filters.status is not None:
                query += " AND t.status = ?"
                params.append(filters.status.value)
            if filters.priority is not None:
                query += " AND t.priority = ?"
                params.append(filters.priority.value)
            if filters.category:
                query += " AND t.category = ?"
                params.append(filters.category)
            if filters.assigned_to is not None:
                query += " AND t.assigned_to = ?"
                params.append(filters.assigned_to)
            if filters.start_date:
                query += " AND t.work_date >= ?"
                params.append(filters.start_date.isoformat())
            if filters.end_date:
                query += " AND t.work_date <= ?"
                params.append(filters.end_date.isoformat())
            if filters.search:
                query += " AND (t.title LIKE ? OR t.description LIKE ? OR t.category LIKE ?)"
                term = f"%{filters.search}%"
                params.extend([term, term, term])

        query += " ORDER BY t.work_date DESC, t.created_at DESC, t.id DESC"
        rows = self.connection.execute(query, params).fetchall()
        return [Task.model_validate(row_to_dict(row)) for row in rows]

    async def get(self, task_id: int) -> Task:
        return self._fetch(task_id)

    async def add(self, task_data: TaskCreate) -> Task:
        task_id = self._insert(task_data)
        self.connection.commit()
        return self._fetch(task_id)

    async def bulk_create(self, tasks: list[TaskCreate]) -> int:
        try:
            for task_data in tasks:
                self._insert(task_data)
        except Exception:
            self.connection.rollback()
            raise
        self.connection.commit()
        logger.info("imported %d task(s)", len(tasks))
        return len(tasks)

    def _insert(self, task_data: TaskCreate) -> int:
        """Insert one task and its assignment notification. Does not commit."""
        now = now_iso()
        data = task_data.model_dump()
        completed_at = now if task_data.status == TaskStatus.COMPLETED else None
        requested_at = now if task_data.is_follow_up_task else None

        if task_data.parent_task_id is not None:
            self._fetch(task_data.parent_task_id)

        columns = list(data) + [
            "progress",
            "created_by",
            "confirmation_requested_at",
            "completed_at",
            "created_at",
            "updated_at",
        ]
        values = [to_db_value(v) for v in data.values()] + [
            100 if completed_at else 0,
            self.user_id,
            requested_at,
            completed_at,
            now,
            now,
        ]
        placeholders = ", ".join("?" for _ in columns)
        cursor = self.connection.execute(
            f"INSERT INTO daily_tasks ({', '.join(columns)}) VALUES ({placeholders})",
            values,
        )
        task_id = cursor.lastrowid

        if task_data.is_follow_up_task:
            self._notify(
                task_data.assigned_to,
                NotificationType.APPROVAL_REQUEST,
                "후속 업무 확인 요청",
                f"후속 업무 '{task_data.title}'의 확인이 필요합니다.",
                task_id,
            )
        else:
            self._notify(
                task_data.assigned_to,
                NotificationType.TASK_ASSIGNED,
                "새 업무 배정",
                f"'{task_data.title}' 업무가 배정되었습니다.",
                task_id,
            )
        return task_id

    def _apply_changes(self, task: Task, changes: dict[str, Any]) -> None:
        """Write a change set to one task. Does not commit."""
        if not changes:
            return
        changes = dict(changes)
        if "status" in changes:
            if changes["status"] == TaskStatus.COMPLETED:
                if task.completed_at is None:
                    changes["completed_at"] = now_iso()
                changes.setdefault("progress", 100)
            else:
                changes["completed_at"] = None
        changes["updated_at"] = now_iso()

        assignments = ", ".join(f"{column} = ?" for column in changes)
        self.connection.execute(
            f"UPDATE daily_tasks SET {assignments} WHERE id = ?",
            [to_db_value(v) for v in changes.values()] + [task.id],
        )

        new_assignee = changes.get("assigned_to")
        if new_assignee is not None and new_assignee != task.assigned_to:
            self._notify(
                new_assignee,
                NotificationType.TASK_ASSIGNED,
                "업무 배정 변경",
                f"'{task.title}' 업무가 배정되었습니다.",
                task.id,
            )
        new_status = changes.get("status")
        if new_status is not None and new_status != task.status:
            self._notify_status_change(task, new_status)

    def _notify_status_change(self, task: Task, new_status: TaskStatus) -> None:
        message = (
            f"'{task.title}' 상태가 {status_label(task.status)}에서 "
            f"{status_label(new_status)}(으)로 변경되었습니다."
        )
        recipient = task.assigned_to if task.assigned_to != self.user_id else task.created_by
        self._notify(recipient, NotificationType.STATUS_CHANGED, "업무 상태 변경", message, task.id)

    async def update(self, task_id: int, updates: TaskUpdate) -> Task:
        task = self._fetch(task_id)
        self._apply_changes(task, updates.changes())
        self.connection.commit()
        return self._fetch(task_id)

    async def change_status(self, task_id: int, status: TaskStatus) -> Task:
        task = self._fetch(task_id)
        self._apply_changes(task, {"status": status})
        self.connection.commit()
        return self._fetch(task_id)

    async def delete(self, task_id: int) -> bool:
        cursor = self.connection.execute("DELETE FROM daily_tasks WHERE id = ?", (task_id,))
        self.connection.commit()
        if cursor.rowcount == 0:
            raise TaskNotFoundError(f"Task not found: {task_id}")
        return True

    async def bulk_update(self, task_ids: list[int], updates: TaskUpdate) -> list[Task]:
        tasks = [self._fetch(task_id) for task_id in task_ids]
        changes = updates.changes()
        try:
            for task in tasks:
                self._apply_changes(task, changes)
        except Exception:
            self.connection.rollback()
            raise
        self.connection.commit()
        return [self._fetch(task.id) for task in tasks]

    async def bulk_delete(self, task_ids: list[int]) -> int:
        if not task_ids:
            return 0
        placeholders = ", ".join("?" for _ in task_ids)
        cursor = self.connection.execute(
            f"DELETE FROM daily_tasks WHERE id IN ({placeholders})", list(task_ids)
        )
        self.connection.commit()
        logger.info("bulk deleted %d of %d tasks", cursor.rowcount, len(task_ids))
        return cursor.rowcount

    async def list_follow_ups(self) -> list[Task]:
        rows = self.connection.execute(
            f"""
            SELECT t.* FROM daily_tasks t
            WHERE {AWAITING_CONFIRMATION_SQL} AND t.assigned_to = ?
            ORDER BY t.confirmation_requested_at DESC, t.id DESC
            """,
            (self.user_id,),
        ).fetchall()
        return [Task.model_validate(row_to_dict(row)) for row in rows]

    def _awaiting(self, task_id: int) -> Task:
        task = self._fetch(task_id)
        if not task.awaiting_confirmation:
            raise ValidationError(f"확인 대기 중인 후속 업무가 아닙니다: {task_id}")
        return task

    async def confirm(self, task_id: int) -> Task:
        task = self._awaiting(task_id)
        now = now_iso()
        self.connection.execute(
            """
            UPDATE daily_tasks
            SET status = ?, confirmation_completed_at = ?, updated_at = ?
            WHERE id = ?
            """,
            (TaskStatus.SCHEDULED.value, now, now, task_id),
        )
        self._notify(
            task.created_by,
            NotificationType.STATUS_CHANGED,
            "후속 업무 확인",
            f"후속 업무 '{task.title}'이(가) 확인되었습니다.",
            task_id,
        )
        self.connection.commit()
        return self._fetch(task_id)

    async def reject(self, task_id: int, reason: str | None = None) -> Task:
        task = self._awaiting(task_id)
        memo = f"{REJECT_MEMO_PREFIX}{reason or REJECT_DEFAULT_REASON}"
        self.connection.execute(
            "UPDATE daily_tasks SET status = ?, memo = ?, updated_at = ? WHERE id = ?",
            (TaskStatus.CANCELLED.value, memo, now_iso(), task_id),
        )
        self._notify(
            task.created_by,
            NotificationType.STATUS_CHANGED,
            "후속 업무 반려",
            f"후속 업무 '{task.title}'이(가) 반려되었습니다. {memo}",
            task_id,
        )
        self.connection.commit()
        return self._fetch(task_id)

    async def list_comments(self, task_id: int) -> list[Comment]:
        self._fetch(task_id)
        rows = self.connection.execute(
            "SELECT * FROM comments WHERE task_id = ? ORDER BY created_at, id", (task_id,)
        ).fetchall()
        return [Comment.model_validate(row_to_dict(row)) for row in rows]

    async def add_comment(self, task_id: int, content: str) -> Comment:
        task = self._fetch(task_id)
        cursor = self.connection.execute(
            "INSERT INTO comments (task_id, task_type, user_id, content, created_at) "
            "VALUES (?, 'daily', ?, ?, ?)",
            (task_id, self.user_id, content, now_iso()),
        )
        self._notify(
            task.assigned_to,
            NotificationType.COMMENT_ADDED,
            "새 댓글",
            f"'{task.title}'에 댓글이 달렸습니다.",
            task_id,
        )
        self.connection.commit()
        row = self.connection.execute(
            "SELECT * FROM comments WHERE id = ?", (cursor.lastrowid,)
        ).fetchone()
        return Comment.model_validate(row_to_dict(row))
