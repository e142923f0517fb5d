"""
Typed request objects for operations.

Each dataclass is the input contract of one operation function. Requests
carry transport-agnostic values only: payloads are already decoded to
``bytes``, identifiers are plain ints.
"""

from __future__ import annotations

from dataclasses import dataclass

# ------------------------------------------------------------------ #
# Profile operations
# ------------------------------------------------------------------ #


@dataclass(frozen=True, slots=True)
class CreateProfileRequest:
    """Request for :func:`coordinator.ops.profiles.create_profile`."""

    base: str
    name: str
    json: str


@dataclass(frozen=True, slots=True)
class ListProfilesRequest:
    """Request for :func:`coordinator.ops.profiles.list_profiles`.

    ``by_base=None`` lists every profile.
    """

    by_base: str | None = None


# ------------------------------------------------------------------ #
# Task operations
# ------------------------------------------------------------------ #


@dataclass(frozen=True, slots=True)
class CreateTaskRequest:
    """Request for :func:`coordinator.ops.tasks.create_task`."""

    profile: int
    file_name: str
    data: bytes


@dataclass(frozen=True, slots=True)
class ListTasksRequest:
    """Request for :func:`coordinator.ops.tasks.list_tasks`."""

    by_profile: int | None = None
