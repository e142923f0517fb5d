"""
CLI: ``coordinator profile``: create, list and show profiles.
"""

from __future__ import annotations

from pathlib import Path

import typer

from coordinator.api.schemas import ProfileOut
from coordinator.cli.utils import make_context, output_result
from coordinator.core.types import MAX_ID
from coordinator.ops.profiles import create_profile, fetch_profile, list_profiles
from coordinator.ops.requests import CreateProfileRequest, ListProfilesRequest

app = typer.Typer(no_args_is_help=True)

ConfigOpt = typer.Option(None, "--config", "-c", help="YAML config file")
DatabaseOpt = typer.Option(None, "--database", "-d", help="Database URL")


@app.command("create")
def create_cmd(
    base: str = typer.Argument(..., help="Grouping label"),
    name: str = typer.Argument(..., help="Unique profile name"),
    json_doc: str = typer.Option("{}", "--json-doc", "-j", help="Configuration document"),
    json_file: Path | None = typer.Option(None, "--json-file", help="Read the document from a file"),
    config: Path | None = ConfigOpt,
    database: str | None = DatabaseOpt,
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Register a new profile."""
    document = json_file.read_text(encoding="utf-8") if json_file else json_doc
    with make_context(config, database) as ctx:
        result = create_profile(ctx, CreateProfileRequest(base=base, name=name, json=document))
    output_result(result, as_json=json_out, title="Profile Created")


@app.command("list")
def list_cmd(
    base: str | None = typer.Option(None, "--base", "-b", help="Only profiles with this base"),
    config: Path | None = ConfigOpt,
    database: str | None = DatabaseOpt,
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """List profile ids."""
    with make_context(config, database) as ctx:
        result = list_profiles(ctx, ListProfilesRequest(by_base=base))
    output_result(result, as_json=json_out, title="Profiles")


@app.command("show")
def show_cmd(
    profile_id: int = typer.Argument(..., min=0, max=MAX_ID, help="Profile id"),
    config: Path | None = ConfigOpt,
    database: str | None = DatabaseOpt,
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Show one profile."""
    with make_context(config, database) as ctx:
        result = fetch_profile(ctx, profile_id)
    output_result(result, as_json=json_out, title=f"Profile {profile_id}", transform=ProfileOut.from_profile)
