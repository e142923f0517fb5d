"""
Root Typer application for the coordinator CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from coordinator import __version__

app = Typer(
    name="coordinator",
    help="coordinator: content-addressed task store and profile registry.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"coordinator {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Manage profiles and tasks, or run the JSON-RPC server."""


# ── Sub-command registration ─────────────────────────────────────────────

from coordinator.cli.db import app as db_app  # noqa: E402
from coordinator.cli.profiles import app as profile_app  # noqa: E402
from coordinator.cli.serve import serve  # noqa: E402
from coordinator.cli.tasks import app as task_app  # noqa: E402

app.command("serve")(serve)
app.add_typer(db_app, name="db", help="Database operations.")
app.add_typer(profile_app, name="profile", help="Profile registry.")
app.add_typer(task_app, name="task", help="Task store.")


if __name__ == "__main__":
    app()
