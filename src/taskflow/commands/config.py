"""Configuration management commands."""

import json

import typer

from taskflow.services.config_service import get_config_service
from taskflow.utils.typer_helpers import SuggestingGroup
from taskflow.utils.ui.formatters import format_info, format_output, format_success

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Configuration management commands")


def parse_value(raw: str):
    """Interpret a command-line value as JSON where possible (numbers, booleans, lists)."""
    lowered = raw.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


@app.command("show")
@command_wrapper
def show_config(
    output: str = typer.Option("table", "--output", "-o", help="Output format (table, json, yaml)"),
) -> None:
    """Show the current configuration."""
    config_service = get_config_service()
    format_output(config_service.config.model_dump(mode="json"), output)
    if output == "table":
        format_info(f"설정 파일: {config_service.config_path}")


@app.command("set")
@command_wrapper
def set_config(
    key: str = typer.Argument(..., help="Configuration key (e.g. cache.stale_time)"),
    value: str = typer.Argument(..., help="Configuration value"),
) -> None:
    """Set a configuration value."""
    parsed = parse_value(value)
    get_config_service().set_value(key, parsed)
    format_success(f"'{key}' 설정이 {parsed!r}(으)로 변경되었습니다.")


@app.command("reset")
@command_wrapper
def reset_config(yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation")) -> None:
    """Reset configuration to defaults."""
    if not yes and not typer.confirm("모든 설정을 기본값으로 되돌릴까요?"):
        format_info("취소되었습니다.")
        raise typer.Exit(0)
    get_config_service().reset_config()
    format_success("설정이 초기화되었습니다.")


@app.command("set-data-dir")
@command_wrapper
def set_data_dir(
    path: str = typer.Argument(..., help="New data folder"),
    no_move: bool = typer.Option(False, "--no-move", help="Do not move existing data"),
) -> None:
    """Relocate the data folder (database, attachments, backups)."""
    target = get_config_service().set_data_dir(path, move_files=not no_move)
    format_success(f"데이터 폴더가 변경되었습니다: {target}")
