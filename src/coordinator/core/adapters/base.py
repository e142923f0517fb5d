"""Database adapter base class.

Manifesto:
    The profile registry and the task store never see a driver. They borrow
    a pooled connection from the adapter, run dialect-built statements with
    bind parameters, and get typed coordinator errors back when the driver
    complains.

Features:
    - Lifecycle: ``connect()`` opens a SQLAlchemy ``QueuePool`` and probes
      the store, ``disconnect()`` disposes of it
    - ``connection()`` / ``transaction()`` context managers (one pooled
      connection each, returned on exit)
    - Statement helpers that work on a held connection: ``fetch_all``,
      ``fetch_one``, ``run``, ``insert_returning_id``
    - Driver error translation into ``UniqueViolationError``,
      ``MissingReferenceError`` and ``StoreUnavailableError``
    - ``ping()`` and ``pool_stats()`` for the health endpoint

Tags:
    coordinator, database, abstract-base, adapter-pattern, pool

Doc-Types:
    api-reference
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from sqlalchemy import exc as sa_exc
from sqlalchemy.pool import QueuePool

from coordinator.core.dialect import Dialect, get_dialect
from coordinator.core.errors import CoordinatorError, ResourceExhaustedError, StoreUnavailableError
from coordinator.core.logging import get_logger

from .types import DatabaseConfig, DatabaseType

logger = get_logger(__name__)


class DatabaseAdapter(ABC):
    """
    Abstract base class for pooled database adapters.

    Subclasses open raw driver connections (``_open_connection``) and map
    driver exceptions to coordinator errors (``translate_error``); pooling,
    transactions and row shaping live here.

    Connections are held in a SQLAlchemy ``QueuePool`` with no overflow, so
    at most ``pool_size`` are ever open. A checkout that finds none free
    waits ``pool_timeout`` seconds and then raises ``ResourceExhaustedError``.
    Returned connections are rolled back by the pool.
    """

    def __init__(self, config: DatabaseConfig):
        self._config = config
        self._pool: QueuePool | None = None
        self._dialect: Dialect = get_dialect(config.db_type.value)

    @property
    def dialect(self) -> Dialect:
        """SQL dialect for this adapter's database type."""
        return self._dialect

    @property
    def db_type(self) -> DatabaseType:
        """Database type."""
        return self._config.db_type

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def is_connected(self) -> bool:
        """Whether the pool is open."""
        return self._pool is not None

    # ── Driver hooks ─────────────────────────────────────────────────

    @abstractmethod
    def _open_connection(self) -> Any:
        """Open one raw driver connection.

        Raises:
            StoreUnavailableError: the store could not be reached.
        """
        ...

    @abstractmethod
    def translate_error(self, exc: Exception) -> CoordinatorError | None:
        """Map a driver exception to a coordinator error, or ``None`` to re-raise as is."""
        ...

    def _pool_size(self) -> int:
        return self._config.pool_size

    def _should_discard(self, error: CoordinatorError) -> bool:
        """Whether a connection that raised *error* must be closed instead of reused."""
        return isinstance(error, StoreUnavailableError)

    # ── Lifecycle ────────────────────────────────────────────────────

    def _create_pool(self) -> QueuePool:
        return QueuePool(
            self._open_connection,
            pool_size=self._pool_size(),
            max_overflow=0,
            timeout=self._config.pool_timeout,
            reset_on_return="rollback",
        )

    def connect(self) -> None:
        """Open the pool and check one connection out and back in."""
        if self.is_connected:
            return
        pool = self._create_pool()
        # Probe so a bad URL fails at startup rather than on the first call
        self._checkout(pool).close()
        self._pool = pool
        logger.info(
            "database_connected",
            backend=self.db_type.value,
            url=self._config.to_connection_string(),
            pool_size=self._pool_size(),
        )

    def disconnect(self) -> None:
        """Close idle connections and drop the pool."""
        if self._pool is not None:
            self._pool.dispose()
            self._pool = None
            logger.info("database_disconnected", backend=self.db_type.value)

    def _require_pool(self) -> QueuePool:
        if self._pool is None:
            self.connect()
        assert self._pool is not None
        return self._pool

    def _checkout(self, pool: QueuePool) -> Any:
        try:
            return pool.connect()
        except sa_exc.TimeoutError as e:
            size = self._pool_size()
            wait = self._config.pool_timeout
            logger.warning("pool_exhausted", backend=self.db_type.value, size=size, waited_s=wait)
            raise ResourceExhaustedError(
                f"No connection available in the {self.db_type.value} pool after {wait:g}s (size={size})",
                cause=e,
            ).with_context(pool=self.db_type.value, pool_size=size) from e

    # ── Connections & transactions ───────────────────────────────────

    @contextmanager
    def connection(self) -> Iterator[Any]:
        """Borrow one pooled connection; driver errors come out translated.

        Any transaction left open by the block is rolled back when the
        connection goes back to the pool.
        """
        conn = self._checkout(self._require_pool())
        invalidated = False
        try:
            yield conn
        except CoordinatorError:
            raise
        except Exception as exc:
            translated = self.translate_error(exc)
            if translated is None:
                raise
            if self._should_discard(translated):
                conn.invalidate(exc)
                invalidated = True
            raise translated from exc
        finally:
            if not invalidated:
                conn.close()

    @contextmanager
    def transaction(self) -> Iterator[Any]:
        """Borrow one connection and commit on success, roll back on error."""
        with self.connection() as conn:
            yield conn
            conn.commit()

    # ── Statement helpers (on a held connection) ─────────────────────

    def run(self, conn: Any, sql: str, params: Sequence[Any] = ()) -> Any:
        """Execute one statement and return the cursor."""
        cursor = conn.cursor()
        cursor.execute(sql, tuple(params))
        return cursor

    def fetch_all(self, conn: Any, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """Execute a query and return rows as dicts keyed by column name."""
        cursor = self.run(conn, sql, params)
        columns = [desc[0] for desc in cursor.description]
        return [dict(zip(columns, row, strict=False)) for row in cursor.fetchall()]

    def fetch_one(self, conn: Any, sql: str, params: Sequence[Any] = ()) -> dict[str, Any] | None:
        rows = self.fetch_all(conn, sql, params)
        return rows[0] if rows else None

    def insert_returning_id(
        self,
        conn: Any,
        table: str,
        columns: Sequence[str],
        values: Sequence[Any],
    ) -> int:
        """Insert one row and return its server-assigned ``id``."""
        sql = (
            f"INSERT INTO {table} ({', '.join(columns)}) "
            f"VALUES ({self._dialect.placeholders(len(columns))})"
        )
        if self._dialect.supports_returning():
            cursor = self.run(conn, sql + " RETURNING id", values)
            return int(cursor.fetchone()[0])
        cursor = self.run(conn, sql, values)
        return int(cursor.lastrowid)

    # ── One-shot conveniences ────────────────────────────────────────

    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Execute a write in its own transaction. Returns the affected row count."""
        with self.transaction() as conn:
            return self.run(conn, sql, params).rowcount

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """Execute a query on a borrowed connection and return rows as dicts."""
        with self.connection() as conn:
            return self.fetch_all(conn, sql, params)

    def query_one(self, sql: str, params: Sequence[Any] = ()) -> dict[str, Any] | None:
        """Execute query and return single result."""
        results = self.query(sql, params)
        return results[0] if results else None

    def ping(self) -> bool:
        """Round-trip a trivial query. Raises on failure."""
        self.query("SELECT 1")
        return True

    def pool_stats(self) -> dict[str, Any]:
        pool = self._pool
        if pool is None:
            return {"size": self._pool_size(), "in_use": 0, "idle": 0, "closed": True}
        return {
            "size": self._pool_size(),
            "in_use": pool.checkedout(),
            "idle": pool.checkedin(),
            "closed": False,
        }

    def __enter__(self) -> DatabaseAdapter:
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.disconnect()


__all__ = [
    "DatabaseAdapter",
]
