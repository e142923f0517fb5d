"""Record types shared by the profile registry and the task store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NewType

# Largest id a BIGINT column holds
MAX_ID = 2**63 - 1

ProfileId = NewType("ProfileId", int)
TaskId = NewType("TaskId", int)


@dataclass(frozen=True, slots=True)
class Profile:
    """A named configuration template tasks are submitted against.

    Attributes:
        id: Server-assigned, never reused.
        base: Free-text grouping label; many profiles may share one.
        name: Globally unique.
        json: Configuration document, stored and returned verbatim.
    """

    id: ProfileId
    base: str
    name: str
    json: str

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Profile:
        return cls(
            id=ProfileId(int(row["id"])),
            base=row["base"],
            name=row["name"],
            json=row["json"],
        )


@dataclass(frozen=True, slots=True)
class Task:
    """An immutable unit of submitted work.

    ``digest`` is the multihash of ``data`` computed when the task was stored.
    """

    id: TaskId
    profile_id: ProfileId
    file_name: str
    data: bytes
    digest: bytes

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Task:
        # psycopg2 hands BYTEA back as memoryview
        return cls(
            id=TaskId(int(row["id"])),
            profile_id=ProfileId(int(row["profile_id"])),
            file_name=row["file_name"],
            data=bytes(row["data"]),
            digest=bytes(row["digest"]),
        )


__all__ = [
    "MAX_ID",
    "ProfileId",
    "TaskId",
    "Profile",
    "Task",
]
