"""
Pydantic models for the JSON-RPC surface.

Envelope models describe JSON-RPC 2.0 requests and responses. Params models
validate each method's arguments; ``data`` payloads are accepted either as a
base64 string or as an array of byte values and always leave as base64.
"""

from __future__ import annotations

import base64
import binascii
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from coordinator.core.hashing import digest_hex
from coordinator.core.types import MAX_ID, Profile, Task

# ── Envelope ─────────────────────────────────────────────────────────────


class RpcRequest(BaseModel):
    """One JSON-RPC 2.0 call. ``id`` absent means notification."""

    model_config = ConfigDict(extra="forbid")

    jsonrpc: Literal["2.0"]
    method: str
    params: dict[str, Any] | list[Any] | None = None
    id: int | str | None = None


class RpcErrorObject(BaseModel):
    code: int
    message: str
    data: dict[str, Any] | None = None


# ── Params ───────────────────────────────────────────────────────────────

# ids are unsigned and must fit the BIGINT id columns
RecordId = Annotated[int, Field(ge=0, le=MAX_ID)]


class RpcParams(BaseModel):
    """Base for method params. Field order defines positional binding."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    @classmethod
    def positional_names(cls) -> list[str]:
        return [info.alias or name for name, info in cls.model_fields.items()]


class CreateProfileParams(RpcParams):
    base: str
    name: str
    json_: str = Field(alias="json")


class ListProfilesParams(RpcParams):
    by_base: str | None = None


class FetchByIdParams(RpcParams):
    id: RecordId


class CreateTaskParams(RpcParams):
    profile: RecordId
    file_name: str
    data: bytes

    @field_validator("data", mode="before")
    @classmethod
    def _decode_data(cls, value: Any) -> bytes:
        return decode_payload(value)


class ListTasksParams(RpcParams):
    by_profile: RecordId | None = None


def decode_payload(value: Any) -> bytes:
    """Accept a base64 string or a list of ints in 0..255."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        try:
            return base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError("data must be valid base64") from e
    if isinstance(value, list):
        if not all(isinstance(b, int) and not isinstance(b, bool) and 0 <= b <= 255 for b in value):
            raise ValueError("data array must contain integers in 0..255")
        return bytes(value)
    raise ValueError("data must be a base64 string or an array of byte values")


# ── Results ──────────────────────────────────────────────────────────────


class ProfileOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: RecordId
    base: str
    name: str
    json_: str = Field(alias="json")

    @classmethod
    def from_profile(cls, profile: Profile) -> ProfileOut:
        return cls(id=profile.id, base=profile.base, name=profile.name, json_=profile.json)


class TaskOut(BaseModel):
    """Task as returned over the wire: ``data`` base64, ``digest`` hex multihash."""

    id: RecordId
    profile_id: int
    file_name: str
    data: str
    digest: str

    @classmethod
    def from_task(cls, task: Task) -> TaskOut:
        return cls(
            id=task.id,
            profile_id=task.profile_id,
            file_name=task.file_name,
            data=base64.b64encode(task.data).decode("ascii"),
            digest=digest_hex(task.digest),
        )


__all__ = [
    "RpcRequest",
    "RpcErrorObject",
    "RpcParams",
    "CreateProfileParams",
    "ListProfilesParams",
    "FetchByIdParams",
    "CreateTaskParams",
    "ListTasksParams",
    "ProfileOut",
    "TaskOut",
    "decode_payload",
]
