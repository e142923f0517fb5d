"""HTTP surface: JSON-RPC at ``POST /rpc`` and health endpoints."""

from coordinator.api.app import create_app

__all__ = ["create_app"]
