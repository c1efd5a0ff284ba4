"""
Settings commands for RichLogger CLI.

These commands edit the shared settings file from a separate process. A
running Logger that uses the same file notices the edit on its next log
call after the reload interval and applies the new settings without a
restart.

Example Usage:
    # Show the current settings
    $ richlogger config show

    # Only show warnings and errors, with 5-frame stack traces
    $ richlogger config set --level warning --stack-traces --depth 5

    # Back to defaults
    $ richlogger config reset
"""

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from richlogger.core.config.settings import EngineConfig, LoggerSettings
from richlogger.core.config.store import SettingsStore
from richlogger.core.logging.logger import get_logger
from richlogger.engine.records import Severity

app = typer.Typer(help="Logger settings commands")
console = Console()
logger = get_logger(__name__)


def _store(ctx: typer.Context) -> SettingsStore:
    config = ctx.obj if isinstance(ctx.obj, EngineConfig) else EngineConfig()
    return SettingsStore(config.settings_path)


def _print_settings(store: SettingsStore, settings: LoggerSettings) -> None:
    table = Table(title="Logger Settings")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("LogLevel", f"{int(settings.level)} ({settings.level.name})")
    table.add_row("IncludeStackTraces", str(settings.include_stack_traces).lower())
    table.add_row("StackTraceDepth", str(settings.stack_trace_depth))
    table.add_row("LogToFile", str(settings.log_to_file).lower())

    console.print(table)
    console.print(f"Settings file: {store.path}", style="dim", markup=False)


@app.command()
def show(ctx: typer.Context) -> None:
    """Show the settings a Logger would load from the settings file"""
    store = _store(ctx)
    if not store.exists():
        console.print(
            "Settings file does not exist yet, showing defaults", style="yellow"
        )
    _print_settings(store, store.load(LoggerSettings()))


@app.command(name="set")
def set_settings(
    ctx: typer.Context,
    level: Optional[str] = typer.Option(
        None, "--level", "-l", help="error, warning, info, debug, verbose or 0-4"
    ),
    stack_traces: Optional[bool] = typer.Option(
        None,
        "--stack-traces/--no-stack-traces",
        help="Append a captured stack to every record",
    ),
    depth: Optional[int] = typer.Option(
        None, "--depth", min=0, help="Maximum frames per stack trace"
    ),
    log_to_file: Optional[bool] = typer.Option(
        None, "--log-to-file/--no-log-to-file", help="Persist records to log files"
    ),
) -> None:
    """
    Change one or more settings in the settings file.

    Unspecified settings keep the value currently stored in the file.

    Examples:
      richlogger config set --level debug
      richlogger config set --stack-traces --depth 8
    """
    changes = {}
    if level is not None:
        try:
            changes["level"] = Severity.parse(level)
        except ValueError as e:
            console.print(str(e), style="red", markup=False)
            raise typer.Exit(1)
    if stack_traces is not None:
        changes["include_stack_traces"] = stack_traces
    if depth is not None:
        changes["stack_trace_depth"] = depth
    if log_to_file is not None:
        changes["log_to_file"] = log_to_file

    if not changes:
        console.print("Nothing to change; pass at least one option", style="yellow")
        raise typer.Exit(1)

    store = _store(ctx)
    settings = store.load(LoggerSettings()).model_copy(update=changes)
    if not store.save(settings):
        console.print(f"Failed to write {store.path}", style="red", markup=False)
        raise typer.Exit(1)

    logger.info(f"Logger settings updated in {store.path}: {sorted(changes)}")
    console.print("Settings updated", style="green")
    _print_settings(store, settings)


@app.command()
def reset(ctx: typer.Context) -> None:
    """Write the default settings to the settings file"""
    store = _store(ctx)
    if not store.save(LoggerSettings()):
        console.print(f"Failed to write {store.path}", style="red", markup=False)
        raise typer.Exit(1)
    console.print("Settings reset to defaults", style="green")
    _print_settings(store, LoggerSettings())
