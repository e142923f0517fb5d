"""Database adapters -- pooled access to the coordinator's relational store.

Each adapter is **import-guarded**: the database driver is only required at
``connect()`` time, not at import time. SQLite ships with Python; for
PostgreSQL install the extra::

    pip install coordinator[postgresql]   # psycopg2-binary

Architecture::

    DatabaseAdapter (base.py)        Pool lifecycle, transactions, error translation
        |-- SQLiteAdapter            stdlib sqlite3
        |-- PostgreSQLAdapter        psycopg2 (optional)

    QueuePool (sqlalchemy.pool)      Bounded, waits pool_timeout then fails
    AdapterRegistry (registry.py)    name -> adapter class, URL parsing
    DatabaseConfig (types.py)        Connection + pool parameters
    DatabaseType (types.py)          Enum of supported backends

Guardrails:
    ❌ ``run(conn, "SELECT * FROM profiles WHERE name='" + name + "'")``
    ✅ ``run(conn, f"SELECT * FROM profiles WHERE name = {d.placeholder(0)}", (name,))``
    ❌ ``adapter = PostgreSQLAdapter(...)`` from service code
    ✅ ``adapter = get_adapter(settings.database_url, pool_size=...)``

Tags:
    coordinator, database, adapters, import-guarded, postgresql, sqlite

Doc-Types:
    package-overview
"""

from coordinator.core.dialect import Dialect, get_dialect

from .base import DatabaseAdapter
from .postgresql import PostgreSQLAdapter
from .registry import AdapterRegistry, adapter_registry, get_adapter, parse_database_url
from .sqlite import SQLiteAdapter
from .types import DatabaseConfig, DatabaseType

__all__ = [
    "Dialect",
    "get_dialect",
    "DatabaseType",
    "DatabaseConfig",
    "DatabaseAdapter",
    "SQLiteAdapter",
    "PostgreSQLAdapter",
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
    "parse_database_url",
]
