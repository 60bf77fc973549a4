"""Data management commands (backups)."""

import typer

from taskflow.services.backup_service import BackupService, backup_timestamp
from taskflow.services.config_service import get_config_service
from taskflow.utils.typer_helpers import SuggestingGroup
from taskflow.utils.ui.formatters import format_dict_table, format_info, format_success

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Data management (backups)")


@app.command("backup")
@command_wrapper
def backup() -> None:
    """Back up the local database now."""
    path = BackupService(get_config_service()).create_backup()
    format_success(f"백업이 생성되었습니다: {path}")


@app.command("backups")
@command_wrapper
def list_backups() -> None:
    """List database backups, newest first."""
    backups = BackupService(get_config_service()).list_backups()
    if not backups:
        format_info("백업이 없습니다.")
        return
    format_dict_table(
        [
            {
                "file": path.name,
                "created": backup_timestamp(path).isoformat(),
                "size_kb": f"{path.stat().st_size / 1024:.1f}",
            }
            for path in backups
        ]
    )
