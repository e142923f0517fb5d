"""
CLI: ``coordinator task``: submit, list and show tasks.
"""

from __future__ import annotations

from pathlib import Path

import typer

from coordinator.api.schemas import TaskOut
from coordinator.cli.utils import console, make_context, output_result
from coordinator.core.types import MAX_ID
from coordinator.ops.requests import CreateTaskRequest, ListTasksRequest
from coordinator.ops.tasks import create_task, fetch_task, list_tasks

app = typer.Typer(no_args_is_help=True)

ConfigOpt = typer.Option(None, "--config", "-c", help="YAML config file")
DatabaseOpt = typer.Option(None, "--database", "-d", help="Database URL")


@app.command("submit")
def submit_cmd(
    profile_id: int = typer.Argument(..., min=0, max=MAX_ID, help="Owning profile id"),
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Payload file"),
    file_name: str | None = typer.Option(None, "--name", "-n", help="Stored file name (default: basename)"),
    config: Path | None = ConfigOpt,
    database: str | None = DatabaseOpt,
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Store a file as a task payload."""
    request = CreateTaskRequest(
        profile=profile_id,
        file_name=file_name or path.name,
        data=path.read_bytes(),
    )
    with make_context(config, database) as ctx:
        result = create_task(ctx, request)
    output_result(result, as_json=json_out, title="Task Submitted")


@app.command("list")
def list_cmd(
    profile: int | None = typer.Option(None, "--profile", "-p", min=0, max=MAX_ID, help="Only tasks of this profile"),
    config: Path | None = ConfigOpt,
    database: str | None = DatabaseOpt,
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """List task ids."""
    with make_context(config, database) as ctx:
        result = list_tasks(ctx, ListTasksRequest(by_profile=profile))
    output_result(result, as_json=json_out, title="Tasks")


@app.command("show")
def show_cmd(
    task_id: int = typer.Argument(..., min=0, max=MAX_ID, help="Task id"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the payload to this file"),
    config: Path | None = ConfigOpt,
    database: str | None = DatabaseOpt,
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Show one task; optionally write its payload to a file."""
    with make_context(config, database) as ctx:
        result = fetch_task(ctx, task_id)
    output_result(result, as_json=json_out, title=f"Task {task_id}", transform=TaskOut.from_task)
    if output is not None and result.data is not None:
        output.write_bytes(result.data.data)
        if not json_out:
            console.print(f"[dim]Wrote {len(result.data.data)} bytes to {output}[/dim]")
