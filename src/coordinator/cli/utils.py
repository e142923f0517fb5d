"""
CLI utility helpers: output formatting and store management.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from coordinator.core.errors import CoordinatorError
from coordinator.core.logging import configure_logging
from coordinator.core.settings import CoordinatorSettings, load_settings
from coordinator.core.store import Store
from coordinator.ops.context import OperationContext
from coordinator.ops.result import OperationResult

console = Console()
err_console = Console(stderr=True)


# ── Settings / store helpers ─────────────────────────────────────────────


def resolve_settings(
    config: Path | None = None,
    database: str | None = None,
    **overrides: Any,
) -> CoordinatorSettings:
    """Load settings for a CLI command; ``--database`` wins over every other source."""
    if database:
        overrides["database_url"] = database
    overrides = {k: v for k, v in overrides.items() if v is not None}
    try:
        return load_settings(config, **overrides)
    except CoordinatorError as e:
        err_console.print(f"[bold red]Error[/bold red] ({e.code}): {e.message}")
        raise typer.Exit(code=1) from e


@contextmanager
def make_context(
    config: Path | None = None,
    database: str | None = None,
) -> Iterator[OperationContext]:
    """Open the store for one CLI command and yield an ``OperationContext``."""
    settings = resolve_settings(config, database)
    # keep stdout clean for command output
    level = settings.log_level if settings.debug else "WARNING"
    configure_logging(level=level, json_format=False, route_stdlib=False)
    try:
        store = Store.from_settings(settings).open()
    except CoordinatorError as e:
        err_console.print(f"[bold red]Error[/bold red] ({e.code}): {e.message}")
        raise typer.Exit(code=1) from e
    try:
        yield OperationContext(store=store, caller="cli")
    finally:
        store.close()


# ── Output helpers ───────────────────────────────────────────────────────


def _to_dict(obj: Any) -> dict[str, Any]:
    """Convert dataclass / pydantic model / dict to plain dict."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump(by_alias=True)
    if hasattr(obj, "__dataclass_fields__"):
        return asdict(obj)
    if isinstance(obj, dict):
        return obj
    return {"id": obj}


def output_result(
    result: OperationResult,
    *,
    as_json: bool = False,
    title: str = "",
    transform: Any = None,
) -> None:
    """Render an ``OperationResult`` to the terminal.

    ``transform`` maps the payload before rendering (e.g. domain record →
    wire model).
    """
    if not result.success:
        err = result.error
        msg = err.message if err else "Unknown error"
        code = err.code if err else "ERROR"
        err_console.print(f"[bold red]Error[/bold red] ({code}): {msg}")
        raise typer.Exit(code=1)

    data = transform(result.data) if transform is not None else result.data

    if as_json:
        payload = [_to_dict(d) for d in data] if isinstance(data, list | tuple) else _to_dict(data)
        console.print_json(json.dumps(payload, default=str))
        return

    if isinstance(data, list):
        if not data:
            console.print("[dim]No items.[/dim]")
            return
        _print_table(data, title=title)
    else:
        _print_dict(_to_dict(data), title=title)


# ── Private helpers ──────────────────────────────────────────────────────


def _print_table(items: list, *, title: str = "") -> None:
    """Render a list of dataclasses/dicts/ids as a Rich table."""
    first = _to_dict(items[0])
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in first:
        table.add_column(col, overflow="fold")
    for item in items:
        d = _to_dict(item)
        table.add_row(*(str(v) for v in d.values()))
    console.print(table)


def _print_dict(data: dict[str, Any], *, title: str = "") -> None:
    """Render a single dict as key-value pairs."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {v}")
