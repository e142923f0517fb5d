"""``GET /health`` for the coordinator HTTP service.

The endpoint pings each named dependency (in practice only the relational
store) and reports per-check latency plus whatever details the check returns,
such as pool occupancy. Any failing check makes the response ``unhealthy``
with HTTP 503.

Checks block on a pooled connection, so they run on the worker threadpool.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any, Literal

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from coordinator.core.logging import get_logger

logger = get_logger(__name__)

_START_TIME = time.monotonic()

Check = Callable[[], dict[str, Any]]


class CheckResult(BaseModel):
    status: Literal["healthy", "unhealthy"]
    latency_ms: float | None = None
    error: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    status: Literal["healthy", "unhealthy"] = "healthy"
    service: str = ""
    version: str = ""
    uptime_s: float = 0.0
    timestamp: str = ""
    checks: dict[str, CheckResult] = Field(default_factory=dict)


async def _run_check(name: str, check: Check) -> CheckResult:
    start = time.monotonic()
    try:
        details = await run_in_threadpool(check)
    except Exception as exc:  # noqa: BLE001
        logger.warning("health_check_failed", check=name, error=str(exc))
        return CheckResult(
            status="unhealthy",
            latency_ms=round((time.monotonic() - start) * 1000, 2),
            error=str(exc)[:200],
        )
    return CheckResult(
        status="healthy",
        latency_ms=round((time.monotonic() - start) * 1000, 2),
        details=details or {},
    )


def create_health_router(service_name: str, version: str, checks: Mapping[str, Check]) -> APIRouter:
    """Router serving ``GET /health`` over *checks* (name -> blocking callable)."""
    router = APIRouter(tags=["health"])

    @router.get("/health", response_model=HealthResponse)
    async def health() -> JSONResponse:
        results = {name: await _run_check(name, check) for name, check in checks.items()}
        healthy = all(r.status == "healthy" for r in results.values())
        body = HealthResponse(
            status="healthy" if healthy else "unhealthy",
            service=service_name,
            version=version,
            uptime_s=round(time.monotonic() - _START_TIME, 1),
            timestamp=datetime.now(UTC).isoformat(),
            checks=results,
        )
        return JSONResponse(content=body.model_dump(), status_code=200 if healthy else 503)

    return router


__all__ = [
    "CheckResult",
    "HealthResponse",
    "create_health_router",
]
