"""
Structured error types for the coordinator.

Every failure the store can produce is one of a small, closed set of typed
errors. Each carries a stable machine-readable ``code`` that survives the trip
through the ops layer and out to JSON-RPC faults, so callers can branch on the
kind of failure without parsing messages.

Manifesto:
    - **Typed hierarchy:** NotFound, Conflict, ResourceExhausted and
      StoreUnavailable are distinct classes, not message strings
    - **Stable codes:** ``code`` is part of the wire contract
    - **Explicit retry semantics:** each error knows if a retry may succeed
    - **Error chaining:** the driver exception is kept as ``cause``

Architecture:
    ::

        CoordinatorError (code, category, retryable, context, cause)
        ├── NotFoundError            NOT_FOUND
        │   ├── ProfileNotFoundError
        │   └── TaskNotFoundError
        ├── ConflictError            CONFLICT
        │   ├── UniqueViolationError
        │   │   └── DuplicateNameError
        │   └── MissingReferenceError
        ├── TransientError           (retryable)
        │   ├── ResourceExhaustedError   RESOURCE_EXHAUSTED
        │   └── StoreUnavailableError    STORE_UNAVAILABLE
        ├── DigestMismatchError      DATA_CORRUPTED
        ├── ValidationError          VALIDATION_FAILED
        └── ConfigError              CONFIG

Examples:
    >>> err = ProfileNotFoundError(7)
    >>> err.code
    'NOT_FOUND'
    >>> err.to_dict()["context"]
    {'profile_id': 7}

Guardrails:
    ❌ DON'T: Raise plain Exception for an expected failure
    ✅ DO: Pick the narrowest CoordinatorError subclass

    ❌ DON'T: Swallow the driver exception
    ✅ DO: Pass it as ``cause=`` so tracebacks keep the root cause

Tags:
    error-handling, exception-hierarchy, error-codes, coordinator

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Coarse classification used for routing and log filtering."""

    DATABASE = "DATABASE"         # Pool, connectivity, statement failures
    VALIDATION = "VALIDATION"     # Bad input, constraint violations
    CONFIG = "CONFIG"             # Missing or invalid settings
    INTEGRITY = "INTEGRITY"       # Stored payload no longer matches digest
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Typed fields cover the identifiers the store deals in; anything else goes
    into ``metadata``. ``to_dict()`` drops unset fields so log lines stay short.
    """

    rpc_method: str | None = None
    request_id: str | None = None
    profile_id: int | None = None
    task_id: int | None = None
    table: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["rpc_method", "request_id", "profile_id", "task_id", "table"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class CoordinatorError(Exception):
    """
    Base exception for all coordinator errors.

    Subclasses set ``default_code``, ``default_category`` and
    ``default_retryable``; instances may override them.
    """

    default_code: str = "INTERNAL"
    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> CoordinatorError:
        """
        Add context to this error (fluent API).

        Usage:
            raise StoreUnavailableError("ping failed").with_context(table="tasks")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, code={self.code})"


# =============================================================================
# LOOKUP ERRORS
# =============================================================================


class NotFoundError(CoordinatorError):
    """A lookup by identifier found no row."""

    default_code = "NOT_FOUND"
    default_category = ErrorCategory.VALIDATION


class ProfileNotFoundError(NotFoundError):
    """No profile with the requested id."""

    def __init__(self, profile_id: int, **kwargs: Any):
        self.profile_id = profile_id
        super().__init__(f"Profile {profile_id} not found", **kwargs)
        self.context.profile_id = profile_id


class TaskNotFoundError(NotFoundError):
    """No task with the requested id."""

    def __init__(self, task_id: int, **kwargs: Any):
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found", **kwargs)
        self.context.task_id = task_id


# =============================================================================
# CONFLICT ERRORS
# =============================================================================


class ConflictError(CoordinatorError):
    """A uniqueness or referential constraint rejected the write."""

    default_code = "CONFLICT"
    default_category = ErrorCategory.VALIDATION


class UniqueViolationError(ConflictError):
    """A unique constraint rejected the write."""


class DuplicateNameError(UniqueViolationError):
    """A profile with this name already exists."""

    def __init__(self, name: str, **kwargs: Any):
        self.name = name
        super().__init__(f"Profile name {name!r} is already taken", **kwargs)


class MissingReferenceError(ConflictError):
    """A row references a parent row that does not exist."""


# =============================================================================
# TRANSIENT ERRORS (Retryable)
# =============================================================================


class TransientError(CoordinatorError):
    """Temporary condition that may clear on retry."""

    default_category = ErrorCategory.DATABASE
    default_retryable = True


class ResourceExhaustedError(TransientError):
    """The connection pool could not hand out a connection in time."""

    default_code = "RESOURCE_EXHAUSTED"


class StoreUnavailableError(TransientError):
    """The backing store is unreachable or failed at the I/O level."""

    default_code = "STORE_UNAVAILABLE"


# =============================================================================
# INTEGRITY / INPUT / CONFIG
# =============================================================================


class DigestMismatchError(CoordinatorError):
    """Stored payload bytes no longer hash to the stored digest."""

    default_code = "DATA_CORRUPTED"
    default_category = ErrorCategory.INTEGRITY


class ValidationError(CoordinatorError):
    """
    Input validation error.

    Never retryable - the request must be fixed.
    """

    default_code = "VALIDATION_FAILED"
    default_category = ErrorCategory.VALIDATION

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.value is not None:
            result["value"] = repr(self.value)
        return result


class ConfigError(CoordinatorError):
    """Configuration is missing or invalid."""

    default_code = "CONFIG"
    default_category = ErrorCategory.CONFIG


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "CoordinatorError",
    "NotFoundError",
    "ProfileNotFoundError",
    "TaskNotFoundError",
    "ConflictError",
    "UniqueViolationError",
    "DuplicateNameError",
    "MissingReferenceError",
    "TransientError",
    "ResourceExhaustedError",
    "StoreUnavailableError",
    "DigestMismatchError",
    "ValidationError",
    "ConfigError",
]
