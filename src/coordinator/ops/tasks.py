"""
Task operations.

Thin wrappers around :class:`coordinator.core.tasks.TaskStore`.
"""

from __future__ import annotations

from coordinator.core.errors import CoordinatorError
from coordinator.core.logging import LogContext, get_logger
from coordinator.core.types import ProfileId, Task, TaskId
from coordinator.ops.context import OperationContext
from coordinator.ops.requests import CreateTaskRequest, ListTasksRequest
from coordinator.ops.result import OperationResult, start_timer

logger = get_logger(__name__)


def create_task(
    ctx: OperationContext,
    request: CreateTaskRequest,
) -> OperationResult[TaskId]:
    """Store a task payload against an existing profile.

    Fails with ``NOT_FOUND`` when the profile is missing; no row is written.
    """
    timer = start_timer()
    with LogContext(request_id=ctx.request_id, operation="create_task"):
        try:
            task_id = ctx.store.tasks.create_task(
                ProfileId(request.profile), request.file_name, request.data
            )
            return OperationResult.ok(task_id, elapsed_ms=timer.elapsed_ms)
        except CoordinatorError as exc:
            return OperationResult.from_error(exc, elapsed_ms=timer.elapsed_ms)
        except Exception as exc:
            logger.exception("op_failed", error=str(exc), profile_id=request.profile)
            return OperationResult.fail(
                "INTERNAL",
                f"Failed to create task: {exc}",
                elapsed_ms=timer.elapsed_ms,
            )


def list_tasks(
    ctx: OperationContext,
    request: ListTasksRequest | None = None,
) -> OperationResult[list[TaskId]]:
    """List task ids, optionally only those of one profile."""
    request = request or ListTasksRequest()
    timer = start_timer()
    by_profile = ProfileId(request.by_profile) if request.by_profile is not None else None
    with LogContext(request_id=ctx.request_id, operation="list_tasks"):
        try:
            ids = ctx.store.tasks.list_tasks(by_profile=by_profile)
            return OperationResult.ok(ids, elapsed_ms=timer.elapsed_ms)
        except CoordinatorError as exc:
            return OperationResult.from_error(exc, elapsed_ms=timer.elapsed_ms)
        except Exception as exc:
            logger.exception("op_failed", error=str(exc))
            return OperationResult.fail(
                "INTERNAL",
                f"Failed to list tasks: {exc}",
                elapsed_ms=timer.elapsed_ms,
            )


def fetch_task(ctx: OperationContext, task_id: int) -> OperationResult[Task]:
    """Fetch one task including its payload and digest."""
    timer = start_timer()
    with LogContext(request_id=ctx.request_id, operation="fetch_task"):
        try:
            task = ctx.store.tasks.fetch_task(TaskId(task_id))
            return OperationResult.ok(task, elapsed_ms=timer.elapsed_ms)
        except CoordinatorError as exc:
            return OperationResult.from_error(exc, elapsed_ms=timer.elapsed_ms)
        except Exception as exc:
            logger.exception("op_failed", error=str(exc), task_id=task_id)
            return OperationResult.fail(
                "INTERNAL",
                f"Failed to fetch task {task_id}: {exc}",
                elapsed_ms=timer.elapsed_ms,
            )
