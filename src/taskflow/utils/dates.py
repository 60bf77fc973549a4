"""Lenient date/time parsing for task records.

Task payloads come from several producers (web forms, spreadsheet uploads,
older API versions) and occasionally carry garbage in date fields. Parsing
here never raises: a bad value is replaced by the current time and a warning
is logged, so one corrupt record cannot break a whole task list.
"""

from __future__ import annotations

from datetime import UTC, date, datetime

from taskflow.utils.logger import get_logger

logger = get_logger("dates")


def now_utc() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def _as_utc(value: datetime) -> datetime:
    # Timestamps without an offset are taken as UTC
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


def _parse(value: object) -> datetime | None:
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # epoch milliseconds
        return datetime.fromtimestamp(value / 1000, UTC)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        return _as_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))
    raise TypeError(f"unsupported date value type: {type(value).__name__}")


def parse_task_datetime(
    value: object, *, field: str = "date", task_id: object = None
) -> datetime | None:
    """Parse a task date/time value, substituting "now" when it is malformed.

    Args:
        value: ISO string, datetime, date, epoch milliseconds or None
        field: Field name, used in the warning message
        task_id: Task identifier, used in the warning message

    Returns:
        Parsed datetime, None for empty input, or the current time when the
        value cannot be parsed.
    """
    if value is None:
        return None
    try:
        return _parse(value)
    except (TypeError, ValueError, OverflowError, OSError):
        logger.warning(
            "invalid %s %r on task %s, falling back to now", field, value, task_id
        )
        return now_utc()


def parse_task_date(
    value: object, *, field: str = "date", task_id: object = None
) -> date | None:
    """Like :func:`parse_task_datetime` but returns a calendar date."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    parsed = parse_task_datetime(value, field=field, task_id=task_id)
    return parsed.date() if parsed is not None else None


def format_date(value: date | datetime | None) -> str:
    """Format as YYYY-MM-DD, or an empty string."""
    if value is None:
        return ""
    return value.strftime("%Y-%m-%d")


def format_datetime(value: datetime | None) -> str:
    """Format as YYYY-MM-DD HH:MM, or an empty string."""
    if value is None:
        return ""
    return value.strftime("%Y-%m-%d %H:%M")
