"""Domain models for TaskFlow.

Models accept both the camelCase keys served by the TaskFlow API
(``assignedTo``, ``workDate``) and snake_case attribute names.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from taskflow.utils.dates import now_utc, parse_task_date, parse_task_datetime


class TaskStatus(str, Enum):
    """Canonical task status."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    POSTPONED = "postponed"
    CANCELLED = "cancelled"


# Older screens used a second vocabulary; it only survives as input aliases.
LEGACY_STATUS_ALIASES: dict[str, TaskStatus] = {
    "pending": TaskStatus.SCHEDULED,
    "in-progress": TaskStatus.IN_PROGRESS,
    "review": TaskStatus.IN_PROGRESS,
}


def normalize_status(value: str | TaskStatus) -> TaskStatus:
    """Map a status string (canonical or legacy alias) to TaskStatus.

    Raises:
        ValueError: If the value is not a known status.
    """
    if isinstance(value, TaskStatus):
        return value
    key = str(value).strip().lower()
    if key in LEGACY_STATUS_ALIASES:
        return LEGACY_STATUS_ALIASES[key]
    return TaskStatus(key)


class TaskPriority(str, Enum):
    """Task priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class FollowUpType(str, Enum):
    """Which follow-up assignee a follow-up task was routed to."""

    GENERAL = "general"
    CONTRACT = "contract"


class NotificationType(str, Enum):
    """Kinds of server-generated notifications."""

    TASK_ASSIGNED = "task_assigned"
    COMMENT_ADDED = "comment_added"
    STATUS_CHANGED = "status_changed"
    APPROVAL_REQUEST = "approval_request"
    DEADLINE_APPROACHING = "deadline_approaching"
    GENERIC = "generic"


class CamelModel(BaseModel):
    """Base model speaking camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self, **kwargs: Any) -> dict[str, Any]:
        """Dump to a JSON-compatible camelCase dict."""
        return self.model_dump(mode="json", by_alias=True, **kwargs)


def _normalize_status_field(value: Any) -> Any:
    if value is None or isinstance(value, TaskStatus):
        return value
    return normalize_status(value)


class Task(CamelModel):
    """Task record as shared by every view.

    Attributes:
        id: Stable integer identifier
        title: Short task title
        description: Optional details
        category: Work category (업무구분)
        status: Canonical status
        priority: Priority level
        progress: Completion percentage (0-100)
        assigned_to: Assignee user ID
        created_by: Creator user ID
        work_date: Day the work is scheduled for
        due_date: Optional deadline
        memo: Free-form memo
        is_follow_up_task: Whether this task follows up a parent task
        parent_task_id: Parent task for follow-ups
        follow_up_type: Follow-up routing (general/contract)
        follow_up_memo: Note handed to the follow-up assignee
        confirmation_requested_at: When confirmation was requested
        confirmation_completed_at: When the assignee confirmed
        completed_at: Completion timestamp
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    id: int
    title: str
    description: str | None = None
    category: str = "일반"
    status: TaskStatus = TaskStatus.SCHEDULED
    priority: TaskPriority = TaskPriority.MEDIUM
    progress: int = Field(default=0, ge=0, le=100)
    assigned_to: int
    created_by: int | None = None
    work_date: date | None = None
    due_date: datetime | None = None
    memo: str | None = None

    is_follow_up_task: bool = False
    parent_task_id: int | None = None
    follow_up_type: FollowUpType | None = None
    follow_up_memo: str | None = None
    confirmation_requested_at: datetime | None = None
    confirmation_completed_at: datetime | None = None

    completed_at: datetime | None = None
    created_at: datetime = Field(default_factory=now_utc)
    updated_at: datetime = Field(default_factory=now_utc)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> Any:
        return _normalize_status_field(value)

    @field_validator(
        "due_date",
        "completed_at",
        "confirmation_requested_at",
        "confirmation_completed_at",
        mode="before",
    )
    @classmethod
    def _optional_datetime(cls, value: Any, info: ValidationInfo) -> Any:
        return parse_task_datetime(
            value, field=info.field_name, task_id=info.data.get("id")
        )

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _required_datetime(cls, value: Any, info: ValidationInfo) -> Any:
        parsed = parse_task_datetime(
            value, field=info.field_name, task_id=info.data.get("id")
        )
        return parsed if parsed is not None else now_utc()

    @field_validator("work_date", mode="before")
    @classmethod
    def _work_date(cls, value: Any, info: ValidationInfo) -> Any:
        return parse_task_date(value, field="work_date", task_id=info.data.get("id"))

    @model_validator(mode="after")
    def _follow_up_has_parent(self) -> Task:
        if self.is_follow_up_task and self.parent_task_id is None:
            raise ValueError(f"follow-up task {self.id} has no parent_task_id")
        return self

    @property
    def awaiting_confirmation(self) -> bool:
        """True for follow-ups that the assignee has not confirmed yet."""
        return (
            self.is_follow_up_task
            and self.confirmation_requested_at is not None
            and self.confirmation_completed_at is None
            and self.status == TaskStatus.SCHEDULED
        )


class TaskCreate(CamelModel):
    """Payload for creating a task."""

    title: str = Field(min_length=1)
    description: str | None = None
    category: str = "일반"
    status: TaskStatus = TaskStatus.SCHEDULED
    priority: TaskPriority = TaskPriority.MEDIUM
    assigned_to: int
    work_date: date | None = None
    due_date: datetime | None = None
    memo: str | None = None
    is_follow_up_task: bool = False
    parent_task_id: int | None = None
    follow_up_type: FollowUpType | None = None
    follow_up_memo: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> Any:
        return _normalize_status_field(value)

    @model_validator(mode="after")
    def _follow_up_has_parent(self) -> TaskCreate:
        if self.is_follow_up_task and self.parent_task_id is None:
            raise ValueError("a follow-up task requires parent_task_id")
        return self


class TaskUpdate(CamelModel):
    """Partial task update; only fields that are set are sent."""

    title: str | None = None
    description: str | None = None
    category: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    progress: int | None = Field(default=None, ge=0, le=100)
    assigned_to: int | None = None
    work_date: date | None = None
    due_date: datetime | None = None
    memo: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> Any:
        return _normalize_status_field(value)

    def changes(self) -> dict[str, Any]:
        """Snake_case dict of the explicitly set fields."""
        return self.model_dump(exclude_unset=True)


class TaskFilters(BaseModel):
    """Client-side and repository filters for task lists."""

    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    category: str | None = None
    assigned_to: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    search: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> Any:
        return _normalize_status_field(value)


class Notification(CamelModel):
    """Server-generated notification."""

    id: int
    user_id: int | None = None
    title: str = ""
    message: str
    type: NotificationType = NotificationType.GENERIC
    is_read: bool = False
    task_id: int | None = None
    created_at: datetime = Field(default_factory=now_utc)

    @field_validator("type", mode="before")
    @classmethod
    def _type(cls, value: Any) -> Any:
        if isinstance(value, NotificationType):
            return value
        try:
            return NotificationType(str(value))
        except ValueError:
            return NotificationType.GENERIC

    @field_validator("created_at", mode="before")
    @classmethod
    def _created_at(cls, value: Any, info: ValidationInfo) -> Any:
        parsed = parse_task_datetime(value, field="created_at", task_id=info.data.get("id"))
        return parsed if parsed is not None else now_utc()


class Comment(CamelModel):
    """Comment on a task."""

    id: int
    task_id: int
    user_id: int
    content: str
    created_at: datetime = Field(default_factory=now_utc)


class Attachment(CamelModel):
    """File attached to a task."""

    id: int
    task_id: int
    file_name: str
    file_url: str
    file_size: int
    mime_type: str | None = None
    uploaded_by: int | None = None
    created_at: datetime = Field(default_factory=now_utc)


class User(CamelModel):
    """TaskFlow user account (read-only from the client)."""

    id: int
    username: str
    email: str | None = None
    name: str
    role: str = "employee"
    department: str | None = None
