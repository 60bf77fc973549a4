"""Backup service - timestamped online copies of the local database.

Backups live in ``<data_dir>/backups`` as ``taskflow-YYYYmmdd-HHMMSS.db`` and
are pruned to ``max_backup_files``, oldest first.
"""

from __future__ import annotations

import re
import sqlite3
from datetime import UTC, datetime, timedelta
from pathlib import Path

from taskflow.models.exceptions import TaskFlowError
from taskflow.services.config_service import ConfigService
from taskflow.utils.logger import get_logger

logger = get_logger("services.backup")

BACKUP_PREFIX = "taskflow-"
STAMP_FORMAT = "%Y%m%d-%H%M%S"
_BACKUP_NAME = re.compile(r"^taskflow-(\d{8}-\d{6})(?:-(\d+))?\.db$")


def backup_timestamp(path: Path) -> datetime | None:
    """Creation time encoded in a backup file name."""
    match = _BACKUP_NAME.match(path.name)
    if match is None:
        return None
    return datetime.strptime(match.group(1), STAMP_FORMAT).replace(tzinfo=UTC)


def _backup_order(path: Path) -> tuple[datetime, int]:
    # Same-second backups carry a -N suffix and are newer than the plain name
    match = _BACKUP_NAME.match(path.name)
    return backup_timestamp(path), int(match.group(2) or 0)


class BackupService:
    def __init__(self, config_service: ConfigService):
        self.config_service = config_service

    @property
    def backup_dir(self) -> Path:
        return self.config_service.get_backup_dir()

    def list_backups(self) -> list[Path]:
        """Backups, newest first."""
        if not self.backup_dir.is_dir():
            return []
        backups = [p for p in self.backup_dir.iterdir() if backup_timestamp(p) is not None]
        return sorted(backups, key=_backup_order, reverse=True)

    def create_backup(self, now: datetime | None = None) -> Path:
        """Copy the live database with SQLite's online backup API.

        Raises:
            TaskFlowError: If there is no database to back up
        """
        source_path = self.config_service.get_main_db_path()
        if not source_path.exists():
            raise TaskFlowError(f"백업할 데이터베이스가 없습니다: {source_path}")

        self.backup_dir.mkdir(parents=True, exist_ok=True)
        stamp = (now or datetime.now(UTC)).strftime(STAMP_FORMAT)
        target = self.backup_dir / f"{BACKUP_PREFIX}{stamp}.db"
        counter = 1
        while target.exists():
            target = self.backup_dir / f"{BACKUP_PREFIX}{stamp}-{counter}.db"
            counter += 1

        source = sqlite3.connect(str(source_path))
        destination = sqlite3.connect(str(target))
        try:
            source.backup(destination)
        finally:
            destination.close()
            source.close()

        logger.info("created backup %s", target)
        self.prune()
        return target

    def prune(self) -> list[Path]:
        """Delete backups beyond ``max_backup_files``. Returns the removed paths."""
        keep = self.config_service.config.max_backup_files
        removed = self.list_backups()[keep:]
        for path in removed:
            path.unlink()
            logger.info("pruned old backup %s", path)
        return removed

    def is_backup_due(self, now: datetime | None = None) -> bool:
        """True when auto backup is on and the newest backup is older than the interval."""
        config = self.config_service.config
        if not config.auto_backup:
            return False
        backups = self.list_backups()
        if not backups:
            return True
        latest = backup_timestamp(backups[0])
        return (now or datetime.now(UTC)) - latest >= timedelta(hours=config.backup_interval)
