"""SQLite database adapter."""

from __future__ import annotations

import sqlite3
from typing import Any

from coordinator.core.errors import (
    ConflictError,
    CoordinatorError,
    MissingReferenceError,
    StoreUnavailableError,
    UniqueViolationError,
)

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType


def _is_memory(path: str) -> bool:
    return path == ":memory:" or "mode=memory" in path


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter.

    Uses the built-in sqlite3 module. Suitable for:
    - Development and testing
    - Single-node deployments

    File databases run in WAL mode so readers do not block the writer.
    An in-memory database lives inside a single connection, so its pool
    is pinned to one connection.
    """

    def __init__(
        self,
        path: str = ":memory:",
        *,
        timeout: float = 5.0,
        pool_size: int = 5,
        pool_timeout: float = 30.0,
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.SQLITE,
            path=path,
            pool_size=pool_size,
            pool_timeout=pool_timeout,
            options=kwargs,
        )
        super().__init__(config)
        self._timeout = timeout

    @property
    def path(self) -> str:
        return self._config.path or ":memory:"

    def _pool_size(self) -> int:
        if _is_memory(self.path):
            return 1
        return self._config.pool_size

    def _open_connection(self) -> Any:
        path = self.path
        uri = path.startswith("file:")

        try:
            conn = sqlite3.connect(
                path,
                timeout=self._timeout,
                check_same_thread=False,
                uri=uri,
                **self._config.options,
            )
            conn.execute("PRAGMA foreign_keys = ON")
            if not _is_memory(path):
                conn.execute("PRAGMA journal_mode = WAL")
            return conn
        except sqlite3.Error as e:
            raise StoreUnavailableError(
                f"Failed to connect to SQLite: {e}",
                cause=e,
            ) from e

    def _should_discard(self, error: CoordinatorError) -> bool:
        # closing the only connection would drop an in-memory database
        return not _is_memory(self.path) and super()._should_discard(error)

    def translate_error(self, exc: Exception) -> CoordinatorError | None:
        if isinstance(exc, (sqlite3.ProgrammingError, sqlite3.InterfaceError)):
            return None
        if isinstance(exc, sqlite3.IntegrityError):
            message = str(exc)
            if "UNIQUE constraint failed" in message:
                return UniqueViolationError(message, cause=exc)
            if "FOREIGN KEY constraint failed" in message:
                return MissingReferenceError(message, cause=exc)
            return ConflictError(message, cause=exc)
        if isinstance(exc, (sqlite3.OperationalError, sqlite3.DatabaseError)):
            # includes "database is locked" and "disk I/O error"
            return StoreUnavailableError(f"SQLite error: {exc}", cause=exc)
        return None


__all__ = [
    "SQLiteAdapter",
]
