"""
CLI: ``coordinator db``: database management commands.
"""

from __future__ import annotations

from pathlib import Path

import typer

from coordinator.cli.utils import console, make_context
from coordinator.core.errors import CoordinatorError
from coordinator.core.schema import TABLES

app = typer.Typer(no_args_is_help=True)


@app.command()
def init(
    config: Path | None = typer.Option(None, "--config", "-c", help="YAML config file"),
    database: str | None = typer.Option(None, "--database", "-d", help="Database URL"),
) -> None:
    """Create the profiles and tasks tables if they are missing."""
    with make_context(config, database):
        # the store runs ensure_schema when it opens
        console.print(f"[green]Schema ready[/green]: {', '.join(TABLES.values())}")


@app.command()
def health(
    config: Path | None = typer.Option(None, "--config", "-c", help="YAML config file"),
    database: str | None = typer.Option(None, "--database", "-d", help="Database URL"),
) -> None:
    """Ping the database and show pool occupancy."""
    with make_context(config, database) as ctx:
        try:
            info = ctx.store.health()
        except CoordinatorError as e:
            console.print(f"[bold red]Error[/bold red] ({e.code}): {e.message}")
            raise typer.Exit(code=1) from e
    console.print(f"  [cyan]backend[/cyan]: {info['backend']}")
    for key, value in info["pool"].items():
        console.print(f"  [cyan]pool.{key}[/cyan]: {value}")
