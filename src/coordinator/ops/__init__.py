"""
Operations layer: the six coordinator operations behind every transport.

- All functions accept ``OperationContext`` as first argument
- All functions return ``OperationResult[T]`` (never raise)
- All functions are transport-agnostic (no HTTP, no CLI knowledge)
- Failures carry the stable code of the underlying ``CoordinatorError``

Usage::

    from coordinator.ops import OperationContext
    from coordinator.ops.profiles import create_profile
    from coordinator.ops.requests import CreateProfileRequest

    ctx = OperationContext(store=store)
    result = create_profile(ctx, CreateProfileRequest(base="ci", name="nightly", json="{}"))
    assert result.success
"""

from coordinator.ops.context import OperationContext
from coordinator.ops.result import OperationError, OperationResult

__all__ = [
    "OperationContext",
    "OperationError",
    "OperationResult",
]
