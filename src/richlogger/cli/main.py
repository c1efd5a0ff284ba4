"""
RichLogger CLI - Main entry point
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from richlogger import __version__
from richlogger.cli.commands import config, logs
from richlogger.core.config.settings import EngineConfig

app = typer.Typer(
    name="richlogger",
    help="Inspect and change RichLogger settings and log files",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()

app.add_typer(config.app, name="config", help="Logger settings commands")
app.add_typer(logs.app, name="logs", help="Log file commands")


@app.callback()
def main(
    ctx: typer.Context,
    settings_path: Optional[Path] = typer.Option(
        None, "--settings", "-s", help="Settings file path"
    ),
    log_dir: Optional[Path] = typer.Option(
        None, "--log-dir", "-d", help="Log file directory"
    ),
) -> None:
    """
    RichLogger CLI - change logger settings from outside the running process

    A running Logger picks up edits made here within one reload interval.
    """
    overrides = {}
    if settings_path is not None:
        overrides["settings_path"] = settings_path
    if log_dir is not None:
        overrides["log_dir"] = log_dir
    ctx.obj = EngineConfig(**overrides)


@app.command()
def version() -> None:
    """Show RichLogger version information"""
    table = Table(title="RichLogger Version Information")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("RichLogger", __version__)

    console.print(table)


if __name__ == "__main__":
    app()
