"""
Request-scoped context for operations.

Every operation function receives an :class:`OperationContext` as its first
argument. The context carries the shared store, the caller's origin and a
request id that is bound into the log context while the operation runs.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

from coordinator.core.store import Store


@dataclass
class OperationContext:
    """Context passed to every operation function.

    Attributes:
        store: Process-scoped :class:`Store` (adapter + registries).
        request_id: Unique ID for this invocation (auto-generated).
        caller: Origin of the request: ``"rpc"``, ``"cli"`` or ``"sdk"``.
        metadata: Arbitrary key/value pairs forwarded to logging.
    """

    store: Store
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    caller: str = "sdk"
    metadata: dict[str, Any] = field(default_factory=dict)
