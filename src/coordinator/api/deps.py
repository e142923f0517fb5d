"""
FastAPI dependency injection: shared singletons and per-request factories.

Usage in routes::

    from coordinator.api.deps import OpContext, Settings

    @router.get("/something")
    def handler(ctx: OpContext, settings: Settings):
        ...
"""

from __future__ import annotations

import uuid
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from coordinator.core.settings import CoordinatorSettings, load_settings
from coordinator.core.store import Store
from coordinator.ops.context import OperationContext

# ── Settings (singleton) ─────────────────────────────────────────────────


@lru_cache(maxsize=1)
def get_settings() -> CoordinatorSettings:
    """Cached settings, loaded once per process."""
    return load_settings()


# ── Store (process-scoped, opened in the lifespan) ───────────────────────


def get_store(request: Request) -> Store:
    """The store opened by the application lifespan."""
    return request.app.state.store


# ── Operation context (per-request) ──────────────────────────────────────


def get_operation_context(
    request: Request,
    store: Annotated[Store, Depends(get_store)],
) -> OperationContext:
    """Build an :class:`OperationContext` from the current request."""
    request_id = getattr(request.state, "request_id", str(uuid.uuid4()))
    return OperationContext(store=store, request_id=request_id, caller="rpc")


# ── Convenience type aliases ─────────────────────────────────────────────

Settings = Annotated[CoordinatorSettings, Depends(get_settings)]
StoreDep = Annotated[Store, Depends(get_store)]
OpContext = Annotated[OperationContext, Depends(get_operation_context)]
