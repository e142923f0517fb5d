"""PostgreSQL database adapter."""

from __future__ import annotations

from typing import Any

from coordinator.core.errors import (
    ConfigError,
    ConflictError,
    CoordinatorError,
    MissingReferenceError,
    StoreUnavailableError,
    UniqueViolationError,
)

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType

# SQLSTATE codes
_UNIQUE_VIOLATION = "23505"
_FOREIGN_KEY_VIOLATION = "23503"
_INTEGRITY_CLASS = "23"


class PostgreSQLAdapter(DatabaseAdapter):
    """
    PostgreSQL database adapter.

    Uses psycopg2 connections held in the adapter's SQLAlchemy QueuePool, so a
    saturated pool makes callers wait ``pool_timeout`` seconds instead of
    failing immediately. Suitable for production deployments.

    psycopg2 is optional: install the ``postgresql`` extra. The import happens
    at ``connect()`` time.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 5432,
        database: str = "",
        username: str | None = None,
        password: str | None = None,
        *,
        pool_size: int = 5,
        pool_timeout: float = 30.0,
        connect_timeout: int = 10,
        ssl_mode: str = "prefer",
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.POSTGRESQL,
            host=host,
            port=port,
            database=database,
            username=username,
            password=password,
            pool_size=pool_size,
            pool_timeout=pool_timeout,
            connect_timeout=connect_timeout,
            ssl_mode=ssl_mode,
            options=kwargs,
        )
        super().__init__(config)
        self._driver: Any = None

    def connect(self) -> None:
        """Import psycopg2, then open the pool."""
        try:
            import psycopg2
        except ImportError:
            raise ConfigError(
                "psycopg2 is required for PostgreSQL. Install with: pip install coordinator[postgresql]"
            ) from None

        self._driver = psycopg2
        super().connect()

    def _open_connection(self) -> Any:
        psycopg2 = self._driver
        try:
            return psycopg2.connect(
                host=self._config.host,
                port=self._config.port,
                dbname=self._config.database,
                user=self._config.username,
                password=self._config.password,
                connect_timeout=self._config.connect_timeout,
                sslmode=self._config.ssl_mode,
                **self._config.options,
            )
        except psycopg2.Error as e:
            raise StoreUnavailableError(
                f"Failed to connect to PostgreSQL: {e}",
                cause=e,
            ) from e

    def translate_error(self, exc: Exception) -> CoordinatorError | None:
        psycopg2 = self._driver
        if psycopg2 is None or not isinstance(exc, psycopg2.Error):
            return None

        pgcode = getattr(exc, "pgcode", None) or ""
        message = str(exc).strip()
        if pgcode == _UNIQUE_VIOLATION:
            return UniqueViolationError(message, cause=exc)
        if pgcode == _FOREIGN_KEY_VIOLATION:
            return MissingReferenceError(message, cause=exc)
        if pgcode.startswith(_INTEGRITY_CLASS):
            return ConflictError(message, cause=exc)
        if isinstance(exc, (psycopg2.OperationalError, psycopg2.InterfaceError)):
            return StoreUnavailableError(f"PostgreSQL error: {message}", cause=exc)
        return None


__all__ = [
    "PostgreSQLAdapter",
]
