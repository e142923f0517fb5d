"""Tests for coordinator.core.errors module."""

from coordinator.core.errors import (
    ConfigError,
    ConflictError,
    CoordinatorError,
    DigestMismatchError,
    DuplicateNameError,
    ErrorCategory,
    ErrorContext,
    MissingReferenceError,
    NotFoundError,
    ProfileNotFoundError,
    ResourceExhaustedError,
    StoreUnavailableError,
    TaskNotFoundError,
    TransientError,
    UniqueViolationError,
    ValidationError,
)


class TestErrorContext:
    """Test ErrorContext dataclass."""

    def test_empty_context(self):
        ctx = ErrorContext()
        assert ctx.profile_id is None
        assert ctx.to_dict() == {}

    def test_to_dict_includes_set_fields_and_metadata(self):
        ctx = ErrorContext(task_id=3, rpc_method="fetch_task", metadata={"pool": "sqlite"})
        assert ctx.to_dict() == {"rpc_method": "fetch_task", "task_id": 3, "pool": "sqlite"}


class TestCodes:
    """Each error class carries a stable wire code."""

    def test_not_found_codes(self):
        assert ProfileNotFoundError(1).code == "NOT_FOUND"
        assert TaskNotFoundError(1).code == "NOT_FOUND"

    def test_conflict_codes(self):
        assert DuplicateNameError("nightly").code == "CONFLICT"
        assert MissingReferenceError("fk").code == "CONFLICT"
        assert UniqueViolationError("dup").code == "CONFLICT"

    def test_transient_codes(self):
        assert ResourceExhaustedError("busy").code == "RESOURCE_EXHAUSTED"
        assert StoreUnavailableError("down").code == "STORE_UNAVAILABLE"

    def test_other_codes(self):
        assert DigestMismatchError("bad").code == "DATA_CORRUPTED"
        assert ValidationError("bad").code == "VALIDATION_FAILED"
        assert ConfigError("bad").code == "CONFIG"
        assert CoordinatorError("boom").code == "INTERNAL"

    def test_code_override(self):
        err = CoordinatorError("boom", code="CUSTOM")
        assert err.code == "CUSTOM"


class TestHierarchy:
    def test_not_found_hierarchy(self):
        err = ProfileNotFoundError(7)
        assert isinstance(err, NotFoundError)
        assert isinstance(err, CoordinatorError)

    def test_duplicate_name_is_unique_violation(self):
        err = DuplicateNameError("nightly")
        assert isinstance(err, UniqueViolationError)
        assert isinstance(err, ConflictError)

    def test_transient_errors_are_retryable(self):
        assert isinstance(ResourceExhaustedError("x"), TransientError)
        assert ResourceExhaustedError("x").retryable is True
        assert StoreUnavailableError("x").retryable is True

    def test_permanent_errors_are_not_retryable(self):
        assert ProfileNotFoundError(1).retryable is False
        assert DuplicateNameError("n").retryable is False
        assert DigestMismatchError("d").retryable is False


class TestProfileAndTaskNotFound:
    def test_profile_id_in_context(self):
        err = ProfileNotFoundError(7)
        assert err.profile_id == 7
        assert err.to_dict()["context"] == {"profile_id": 7}
        assert "7" in err.message

    def test_task_id_in_context(self):
        err = TaskNotFoundError(9)
        assert err.context.task_id == 9
        assert err.category == ErrorCategory.VALIDATION


class TestWithContext:
    def test_known_field_and_metadata(self):
        err = StoreUnavailableError("ping failed").with_context(table="tasks", host="db")
        assert err.context.table == "tasks"
        assert err.context.metadata == {"host": "db"}

    def test_returns_self(self):
        err = ConflictError("x")
        assert err.with_context(profile_id=1) is err


class TestCauseChaining:
    def test_cause_kept(self):
        root = RuntimeError("driver said no")
        err = StoreUnavailableError("down", cause=root)
        assert err.__cause__ is root
        assert err.to_dict()["cause"] == "driver said no"


class TestValidationError:
    def test_field_and_value_in_dict(self):
        err = ValidationError("bad data", field="data", value=123)
        d = err.to_dict()
        assert d["field"] == "data"
        assert d["value"] == "123"
