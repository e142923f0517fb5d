"""
CLI: ``coordinator serve``: start the JSON-RPC server.
"""

from __future__ import annotations

from pathlib import Path

import typer
import uvicorn

from coordinator.cli.utils import console, resolve_settings
from coordinator.core.logging import configure_logging


def serve(
    config: Path | None = typer.Option(None, "--config", "-c", help="YAML config file"),
    host: str | None = typer.Option(None, "--host", "-h", help="Bind address (overrides config)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port (overrides config)"),
    database: str | None = typer.Option(None, "--database", "-d", help="Database URL"),
) -> None:
    """Start the coordinator JSON-RPC server."""
    from coordinator.api.app import create_app

    settings = resolve_settings(
        config,
        database,
        rpc_listen_address=host,
        rpc_listen_port=port,
    )
    configure_logging(level=settings.log_level, json_format=settings.log_json)

    console.print(
        f"[bold green]Starting coordinator[/bold green] on "
        f"{settings.rpc_listen_address}:{settings.rpc_listen_port}"
    )
    uvicorn.run(
        create_app(settings=settings),
        host=settings.rpc_listen_address,
        port=settings.rpc_listen_port,
        log_level=settings.log_level.lower(),
        log_config=None,
    )
