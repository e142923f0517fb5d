"""SQL dialect abstraction for the profile and task stores.

The registries build statements from dialect fragments (placeholders,
primary-key DDL, binary column types, id retrieval) so the same code runs on
SQLite and PostgreSQL without importing either driver.

Architecture::

    ProfileRegistry / TaskStore
        sql = f"SELECT ... WHERE id = {d.placeholder(0)}"
                              │
                              ▼
    ┌───────────────────────────┐   ┌───────────────────────────────┐
    │ SQLiteDialect             │   │ PostgreSQLDialect             │
    │ ?, ?, ?                   │   │ %s, %s, %s                    │
    │ INTEGER PK AUTOINCREMENT  │   │ BIGINT GENERATED ... IDENTITY │
    │ BLOB / lastrowid          │   │ BYTEA / RETURNING id          │
    └───────────────────────────┘   └───────────────────────────────┘

Examples:
    >>> d = SQLiteDialect()
    >>> d.placeholders(3)
    '?, ?, ?'
    >>> get_dialect("postgresql").placeholders(2)
    '%s, %s'

Guardrails:
    ❌ DON'T: Format user values into statement text
    ✅ DO: Use ``placeholder()``/``placeholders()`` and bind parameters

Tags:
    dialect, sql, portability, database, coordinator

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract.

    Every method returns a SQL fragment valid for the target database.
    """

    @property
    def name(self) -> str:
        """Short backend name (``sqlite``, ``postgresql``)."""
        ...

    def placeholder(self, index: int) -> str:
        """Bind placeholder for the parameter at 0-based *index*."""
        ...

    def placeholders(self, count: int) -> str:
        """Comma-separated placeholders for *count* parameters."""
        ...

    def auto_increment(self) -> str:
        """Column definition for a never-reused integer primary key."""
        ...

    def binary_type(self) -> str:
        """Column type for raw bytes."""
        ...

    def supports_returning(self) -> bool:
        """Whether ``INSERT ... RETURNING id`` is used to read the new id."""
        ...

    def table_exists_query(self) -> str:
        """Query with one placeholder returning a row when the table exists."""
        ...


class SQLiteDialect:
    """SQLite dialect: ``?`` placeholders, ``AUTOINCREMENT`` keys."""

    @property
    def name(self) -> str:
        return "sqlite"

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "?"

    def placeholders(self, count: int) -> str:
        return ", ".join("?" for _ in range(count))

    def auto_increment(self) -> str:
        # AUTOINCREMENT keeps ids strictly increasing even after the max row goes away
        return "INTEGER PRIMARY KEY AUTOINCREMENT"

    def binary_type(self) -> str:
        return "BLOB"

    def supports_returning(self) -> bool:
        return False

    def table_exists_query(self) -> str:
        return "SELECT name FROM sqlite_master WHERE type='table' AND name = ?"


class PostgreSQLDialect:
    """PostgreSQL dialect: ``%s`` placeholders (psycopg2), identity keys."""

    @property
    def name(self) -> str:
        return "postgresql"

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "%s"

    def placeholders(self, count: int) -> str:
        return ", ".join("%s" for _ in range(count))

    def auto_increment(self) -> str:
        return "BIGINT GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY"

    def binary_type(self) -> str:
        return "BYTEA"

    def supports_returning(self) -> bool:
        return True

    def table_exists_query(self) -> str:
        return (
            "SELECT table_name FROM information_schema.tables "
            "WHERE table_schema = current_schema() AND table_name = %s"
        )


# Dialects are stateless
_DIALECTS: dict[str, Dialect] = {
    "sqlite": SQLiteDialect(),
    "postgresql": PostgreSQLDialect(),
    "postgres": PostgreSQLDialect(),  # alias
}


def get_dialect(db_type: str) -> Dialect:
    """Get a dialect by database type name.

    Raises:
        ValueError: If ``db_type`` is not recognised.
    """
    key = db_type.lower() if isinstance(db_type, str) else db_type.value
    if key not in _DIALECTS:
        raise ValueError(
            f"Unknown dialect '{db_type}'. "
            f"Supported: {sorted(set(_DIALECTS) - {'postgres'})}"
        )
    return _DIALECTS[key]


__all__ = [
    "Dialect",
    "SQLiteDialect",
    "PostgreSQLDialect",
    "get_dialect",
]
