"""Spreadsheet import - task rows from an .xlsx upload template.

The first sheet is read with its first row as the header. Column names follow
the upload template (업무제목*, 시작날짜*, 업무구분*, ...); the trailing ``*`` of
a required column may be left out. Every row is checked before anything goes
to the store, and one bad row rejects the whole file.
"""

from __future__ import annotations

import re
import zipfile
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Any

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from pydantic import ValidationError as PydanticValidationError

from taskflow.models import TaskCreate, TaskPriority, TaskStatus
from taskflow.models.exceptions import ValidationError
from taskflow.utils.logger import get_logger

logger = get_logger("services.import")

SPREADSHEET_SUFFIXES = (".xlsx", ".xlsm")
CATEGORIES = ("경영지원", "계약관리", "신규계약", "계약해지")
STATUS_LABELS = {
    "예정": TaskStatus.SCHEDULED,
    "진행": TaskStatus.IN_PROGRESS,
    "완료": TaskStatus.COMPLETED,
    "취소": TaskStatus.CANCELLED,
    "연기": TaskStatus.POSTPONED,
}
PRIORITY_LABELS = {
    "낮음": TaskPriority.LOW,
    "보통": TaskPriority.MEDIUM,
    "높음": TaskPriority.HIGH,
    "긴급": TaskPriority.URGENT,
}
# A repeated header or a numbered title row, not a task
HEADER_TITLES = {"업무명", "업무제목", "업무제목*", "title"}
MAX_REPORTED_ERRORS = 10

EXCEL_EPOCH = date(1899, 12, 30)
_SLASH_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2,4})$")


@dataclass
class ImportPlan:
    """Outcome of checking a sheet.

    Attributes:
        tasks: Rows ready to create, in sheet order
        skipped: Header-like rows that were ignored
        errors: One message per problem, prefixed with the sheet row number
    """

    tasks: list[TaskCreate] = field(default_factory=list)
    skipped: int = 0
    errors: list[str] = field(default_factory=list)


def parse_sheet_date(value: Any) -> date | None:
    """Date cell value: a date, an Excel serial number or a date string.

    Strings may be YYYY-MM-DD, YYYY/MM/DD, YYYY.MM.DD or M/D/YY(YY).

    Raises:
        ValueError: If the value is not a date
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return EXCEL_EPOCH + timedelta(days=int(value))

    text = str(value).strip()
    match = _SLASH_DATE.match(text)
    if match:
        month, day, year = match.groups()
        if len(year) == 2:
            year = ("19" if int(year) > 50 else "20") + year
        return date(int(year), int(month), int(day))
    return date.fromisoformat(text.replace("/", "-").replace(".", "-"))


def parse_sheet_time(value: Any) -> time | None:
    """Time cell value: a time, a datetime or an HH:MM string.

    Raises:
        ValueError: If the value is not a time
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value
    return time.fromisoformat(str(value).strip())


def _column(row: dict[str, Any], name: str) -> Any:
    value = row.get(f"{name}*")
    return value if value is not None else row.get(name)


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _choice(label: str, labels: dict[str, Any], enum_cls: type) -> Any:
    if label in labels:
        return labels[label]
    return enum_cls(label)


def _parse_row(number: int, row: dict[str, Any], assigned_to: int) -> tuple[TaskCreate | None, list[str]]:
    errors: list[str] = []
    title = _text(_column(row, "업무제목"))
    if not title:
        errors.append(f"행 {number}: 업무제목은 필수 항목입니다.")

    work_date = None
    raw_start = _column(row, "시작날짜")
    if _text(raw_start) == "":
        errors.append(f"행 {number}: 시작날짜는 필수 항목입니다.")
    else:
        try:
            work_date = parse_sheet_date(raw_start)
        except ValueError:
            errors.append(f"행 {number}: 시작날짜 형식이 올바르지 않습니다. (YYYY-MM-DD, YYYY/MM/DD, MM/DD/YYYY 또는 엑셀 날짜)")

    category = _text(_column(row, "업무구분"))
    if not category:
        errors.append(f"행 {number}: 업무구분은 필수 항목입니다.")
    elif category not in CATEGORIES:
        errors.append(f"행 {number}: 업무구분은 {', '.join(CATEGORIES)} 중 하나여야 합니다.")

    due_date = None
    try:
        due_day = parse_sheet_date(row.get("마감날짜"))
        due_time = parse_sheet_time(row.get("마감시간"))
    except ValueError:
        errors.append(f"행 {number}: 마감날짜 또는 마감시간 형식이 올바르지 않습니다.")
    else:
        if due_day is not None:
            due_date = datetime.combine(due_day, due_time or time(0, 0))

    status = TaskStatus.SCHEDULED
    status_label = _text(row.get("상태"))
    if status_label:
        try:
            status = _choice(status_label, STATUS_LABELS, TaskStatus)
        except ValueError:
            errors.append(f"행 {number}: 상태는 {', '.join(STATUS_LABELS)} 중 하나여야 합니다.")

    priority = TaskPriority.MEDIUM
    priority_label = _text(row.get("우선순위"))
    if priority_label:
        try:
            priority = _choice(priority_label, PRIORITY_LABELS, TaskPriority)
        except ValueError:
            errors.append(f"행 {number}: 우선순위는 {', '.join(PRIORITY_LABELS)} 중 하나여야 합니다.")

    if errors:
        return None, errors

    target = _text(row.get("대상처"))
    try:
        task = TaskCreate(
            title=title,
            description=_text(row.get("설명")) or None,
            category=category,
            status=status,
            priority=priority,
            assigned_to=assigned_to,
            work_date=work_date,
            due_date=due_date,
            memo=f"대상처: {target}" if target else None,
        )
    except PydanticValidationError as e:
        return None, [f"행 {number}: {err['msg']}" for err in e.errors()]
    return task, []


def plan_import(rows: list[tuple[int, dict[str, Any]]], *, assigned_to: int) -> ImportPlan:
    """Check sheet rows and turn the valid ones into TaskCreate payloads.

    Args:
        rows: (sheet row number, {header: cell value}) pairs
        assigned_to: Assignee for every imported task
    """
    plan = ImportPlan()
    for number, row in rows:
        title = _text(_column(row, "업무제목"))
        if title in HEADER_TITLES or "번호" in title:
            plan.skipped += 1
            continue
        task, errors = _parse_row(number, row, assigned_to)
        if task is not None:
            plan.tasks.append(task)
        plan.errors.extend(errors)
    return plan


def read_sheet_rows(path: Path) -> list[tuple[int, dict[str, Any]]]:
    """Rows of the first sheet keyed by the header row. Blank rows are dropped."""
    try:
        workbook = load_workbook(path, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError) as e:
        raise ValidationError(f"엑셀 파일을 읽을 수 없습니다: {path.name}") from e

    try:
        rows = workbook.worksheets[0].iter_rows(values_only=True)
        header = next(rows, None)
        if header is None:
            return []
        names = [_text(cell) for cell in header]
        result = []
        for number, values in enumerate(rows, start=2):
            if all(_text(cell) == "" for cell in values):
                continue
            result.append((number, dict(zip(names, values))))
        return result
    finally:
        workbook.close()


def load_task_sheet(path: str | Path, *, assigned_to: int) -> ImportPlan:
    """Read and check an upload template.

    Raises:
        ValidationError: If the file is missing, unreadable, has no task rows,
            or any row is invalid
    """
    path = Path(path)
    if not path.is_file():
        raise ValidationError(f"파일을 찾을 수 없습니다: {path}")
    if path.suffix.lower() not in SPREADSHEET_SUFFIXES:
        raise ValidationError("엑셀 파일(.xlsx)만 가져올 수 있습니다.")

    rows = read_sheet_rows(path)
    plan = plan_import(rows, assigned_to=assigned_to)
    logger.info(
        "checked %s: %d task row(s), %d skipped, %d error(s)",
        path.name,
        len(plan.tasks),
        plan.skipped,
        len(plan.errors),
    )
    if plan.errors:
        shown = plan.errors[:MAX_REPORTED_ERRORS]
        more = len(plan.errors) - len(shown)
        if more:
            shown.append(f"... 외 {more}건")
        raise ValidationError("엑셀 데이터 검증에 실패했습니다:\n" + "\n".join(shown))
    if not plan.tasks:
        raise ValidationError("엑셀 파일에 데이터가 없거나 헤더만 있습니다. 최소 1행의 데이터가 필요합니다.")
    return plan
