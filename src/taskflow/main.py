"""Main entry point for the TaskFlow CLI."""

import typer

from taskflow import __version__
from taskflow.commands import attachments, config, data, notifications, tasks
from taskflow.commands.auth import login, logout
from taskflow.commands.dashboard import dashboard
from taskflow.services.config_service import get_config_service
from taskflow.utils.typer_helpers import SuggestingGroup
from taskflow.utils.ui.console import get_console

app = typer.Typer(
    name="taskflow",
    cls=SuggestingGroup,
    help="TaskFlow task management from the command line",
    no_args_is_help=True,
)

console = get_console()

app.add_typer(tasks.app, name="tasks", help="Task management commands")
app.add_typer(notifications.app, name="notifications", help="Notification commands")
app.add_typer(attachments.app, name="attachments", help="Task attachment commands")
app.add_typer(config.app, name="config", help="Configuration management")
app.add_typer(data.app, name="data", help="Data management (backups)")
app.command("dashboard")(dashboard)
app.command("login")(login)
app.command("logout")(logout)


@app.command()
def version() -> None:
    """Show version information."""
    cfg = get_config_service().config
    console.print(f"[bold]{cfg.system_name}[/bold] CLI version [cyan]{__version__}[/cyan]")
    console.print(f"Storage: {cfg.storage}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
