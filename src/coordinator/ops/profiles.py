"""
Profile operations.

Thin wrappers around :class:`coordinator.core.profiles.ProfileRegistry` that
turn typed errors into :class:`OperationResult` failures.
"""

from __future__ import annotations

from coordinator.core.errors import CoordinatorError
from coordinator.core.logging import LogContext, get_logger
from coordinator.core.types import Profile, ProfileId
from coordinator.ops.context import OperationContext
from coordinator.ops.requests import CreateProfileRequest, ListProfilesRequest
from coordinator.ops.result import OperationResult, start_timer

logger = get_logger(__name__)


def create_profile(
    ctx: OperationContext,
    request: CreateProfileRequest,
) -> OperationResult[ProfileId]:
    """Register a new profile. Fails with ``CONFLICT`` when the name is taken."""
    timer = start_timer()
    with LogContext(request_id=ctx.request_id, operation="create_profile"):
        try:
            profile_id = ctx.store.profiles.create_profile(request.base, request.name, request.json)
            return OperationResult.ok(profile_id, elapsed_ms=timer.elapsed_ms)
        except CoordinatorError as exc:
            return OperationResult.from_error(exc, elapsed_ms=timer.elapsed_ms)
        except Exception as exc:
            logger.exception("op_failed", error=str(exc))
            return OperationResult.fail(
                "INTERNAL",
                f"Failed to create profile: {exc}",
                elapsed_ms=timer.elapsed_ms,
            )


def list_profiles(
    ctx: OperationContext,
    request: ListProfilesRequest | None = None,
) -> OperationResult[list[ProfileId]]:
    """List profile ids, optionally only those with a given ``base``."""
    request = request or ListProfilesRequest()
    timer = start_timer()
    with LogContext(request_id=ctx.request_id, operation="list_profiles"):
        try:
            ids = ctx.store.profiles.list_profiles(by_base=request.by_base)
            return OperationResult.ok(ids, elapsed_ms=timer.elapsed_ms)
        except CoordinatorError as exc:
            return OperationResult.from_error(exc, elapsed_ms=timer.elapsed_ms)
        except Exception as exc:
            logger.exception("op_failed", error=str(exc))
            return OperationResult.fail(
                "INTERNAL",
                f"Failed to list profiles: {exc}",
                elapsed_ms=timer.elapsed_ms,
            )


def fetch_profile(ctx: OperationContext, profile_id: int) -> OperationResult[Profile]:
    """Fetch one profile. Fails with ``NOT_FOUND`` when it does not exist."""
    timer = start_timer()
    with LogContext(request_id=ctx.request_id, operation="fetch_profile"):
        try:
            profile = ctx.store.profiles.fetch_profile(ProfileId(profile_id))
            return OperationResult.ok(profile, elapsed_ms=timer.elapsed_ms)
        except CoordinatorError as exc:
            return OperationResult.from_error(exc, elapsed_ms=timer.elapsed_ms)
        except Exception as exc:
            logger.exception("op_failed", error=str(exc), profile_id=profile_id)
            return OperationResult.fail(
                "INTERNAL",
                f"Failed to fetch profile {profile_id}: {exc}",
                elapsed_ms=timer.elapsed_ms,
            )
