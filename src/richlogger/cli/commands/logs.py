"""
Log file commands for RichLogger CLI
"""

from collections import deque
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from richlogger.core.config.settings import EngineConfig
from richlogger.engine.file_sink import list_log_files

app = typer.Typer(help="Log file commands")
console = Console()


def _log_dir(ctx: typer.Context) -> Path:
    config = ctx.obj if isinstance(ctx.obj, EngineConfig) else EngineConfig()
    return config.log_dir


@app.command(name="list")
def list_files(ctx: typer.Context) -> None:
    """List retained log files, newest first"""
    log_dir = _log_dir(ctx)
    files = list_log_files(log_dir)
    if not files:
        console.print(f"No log files in {log_dir}", style="yellow", markup=False)
        return

    table = Table(title="Log Files")
    table.add_column("File", style="cyan")
    table.add_column("Size", style="green", justify="right")
    table.add_column("Modified", style="yellow")

    for path in files:
        stat = path.stat()
        modified = datetime.fromtimestamp(stat.st_mtime).strftime("%Y-%m-%d %H:%M:%S")
        table.add_row(path.name, f"{stat.st_size:,} B", modified)

    console.print(table)


@app.command()
def tail(
    ctx: typer.Context,
    file: Optional[Path] = typer.Argument(
        None, help="Log file to read, the newest one if omitted"
    ),
    lines: int = typer.Option(20, "--lines", "-n", min=1, help="Lines to show"),
) -> None:
    """Print the last lines of a log file"""
    if file is None:
        files = list_log_files(_log_dir(ctx))
        if not files:
            console.print("No log files found", style="yellow")
            raise typer.Exit(1)
        file = files[0]

    if not file.is_file():
        console.print(f"Log file does not exist: {file}", style="red", markup=False)
        raise typer.Exit(1)

    with open(file, "r", encoding="utf-8", errors="replace") as f:
        last = deque(f, maxlen=lines)

    for line in last:
        console.print(line.rstrip("\n"), markup=False, highlight=False, soft_wrap=True)
