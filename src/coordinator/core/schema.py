"""
Relational schema for profiles and tasks.

Two tables, created idempotently at startup. There is no migration tooling:
``ensure_schema()`` only ever issues ``CREATE ... IF NOT EXISTS``.

Architecture:
    ::

        profiles                          tasks
        ┌─────────────────────┐           ┌──────────────────────────────┐
        │ id    PK (identity) │◄──────────│ profile_id  FK profiles(id)  │
        │ base  TEXT          │           │ id          PK (identity)    │
        │ name  TEXT UNIQUE   │           │ file_name   TEXT             │
        │ json  TEXT          │           │ data        BLOB / BYTEA     │
        └─────────────────────┘           │ digest      BLOB / BYTEA     │
                                          └──────────────────────────────┘

        idx_profiles_base ON profiles(base)
        idx_tasks_profile ON tasks(profile_id)

Examples:
    >>> TABLES["tasks"]
    'tasks'
    >>> ensure_schema(adapter)
    ['profiles', 'tasks']

Tags:
    schema, ddl, sqlite, postgresql, coordinator

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from coordinator.core.adapters.base import DatabaseAdapter
from coordinator.core.dialect import Dialect
from coordinator.core.logging import get_logger

logger = get_logger(__name__)

TABLES = {
    "profiles": "profiles",
    "tasks": "tasks",
}


def build_ddl(dialect: Dialect) -> dict[str, str]:
    """DDL statements for *dialect*, in creation order."""
    pk = dialect.auto_increment()
    blob = dialect.binary_type()
    return {
        "profiles": f"""
            CREATE TABLE IF NOT EXISTS {TABLES["profiles"]} (
                id {pk},
                base TEXT NOT NULL,
                name TEXT NOT NULL UNIQUE,
                json TEXT NOT NULL
            )
        """,
        "tasks": f"""
            CREATE TABLE IF NOT EXISTS {TABLES["tasks"]} (
                id {pk},
                profile_id BIGINT NOT NULL REFERENCES {TABLES["profiles"]}(id),
                file_name TEXT NOT NULL,
                data {blob} NOT NULL,
                digest {blob} NOT NULL
            )
        """,
        "profiles_idx_base": f"""
            CREATE INDEX IF NOT EXISTS idx_profiles_base
            ON {TABLES["profiles"]}(base)
        """,
        "tasks_idx_profile": f"""
            CREATE INDEX IF NOT EXISTS idx_tasks_profile
            ON {TABLES["tasks"]}(profile_id)
        """,
    }


def ensure_schema(adapter: DatabaseAdapter) -> list[str]:
    """
    Create the coordinator tables and indexes if they are missing.

    Safe to call on every startup. Returns the table names.
    """
    ddl = build_ddl(adapter.dialect)
    with adapter.transaction() as conn:
        for _name, statement in ddl.items():
            adapter.run(conn, statement)
    tables = list(TABLES.values())
    logger.info("schema_ensured", backend=adapter.dialect.name, tables=tables)
    return tables


def table_exists(adapter: DatabaseAdapter, table: str) -> bool:
    """Whether *table* exists in the connected database."""
    return adapter.query_one(adapter.dialect.table_exists_query(), (table,)) is not None


__all__ = [
    "TABLES",
    "build_ddl",
    "ensure_schema",
    "table_exists",
]
