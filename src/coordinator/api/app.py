"""
FastAPI application factory.

``create_app()`` wires middleware, the JSON-RPC and health routers, the
catch-all error handler and the store lifecycle into one ``FastAPI``
instance.

Tags:
    coordinator, api, app-factory, composition-root, FastAPI

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from coordinator import __version__
from coordinator.api.deps import get_settings
from coordinator.api.health import create_health_router
from coordinator.api.middleware.request_id import RequestIDMiddleware
from coordinator.api.rpc import INTERNAL_ERROR, create_rpc_router
from coordinator.core.logging import get_logger
from coordinator.core.settings import CoordinatorSettings
from coordinator.core.store import Store

log = get_logger("coordinator.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the store (pool + schema) on startup, close it on shutdown."""
    settings: CoordinatorSettings = app.state.settings
    log.info("coordinator_starting", version=app.version)

    store = Store.from_settings(settings).open()
    app.state.store = store
    try:
        yield
    finally:
        store.close()
        log.info("coordinator_stopped")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all: answer with a JSON-RPC internal error instead of a bare 500 page."""
    log.error("unhandled_exception", path=str(request.url.path), error=str(exc))
    message = str(exc) if request.app.state.settings.debug else "Internal error"
    return JSONResponse(
        status_code=500,
        content={
            "jsonrpc": "2.0",
            "error": {"code": INTERNAL_ERROR, "message": message, "data": {"kind": "INTERNAL", "retryable": False}},
            "id": None,
        },
    )


def create_app(
    *,
    settings: CoordinatorSettings | None = None,
) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    Parameters
    ----------
    settings : CoordinatorSettings | None
        Override settings (useful for testing). When ``None`` the cached
        singleton from :func:`get_settings` is used.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="coordinator",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.state.settings = settings
    app.dependency_overrides[get_settings] = lambda: settings

    app.add_middleware(RequestIDMiddleware)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(
        create_health_router(
            "coordinator",
            version=__version__,
            checks={"store": lambda: app.state.store.health()},
        ),
    )
    app.include_router(create_rpc_router("/rpc"))

    return app
