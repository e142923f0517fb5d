"""Database adapter registry and factory.

Manifesto:
    The service is configured with one connection string. ``get_adapter()``
    turns it (or an explicit backend name plus keyword arguments) into a
    configured adapter, so nothing outside this package names adapter classes.

Features:
    - ``AdapterRegistry`` with pre-registered ``sqlite`` and ``postgresql``
    - ``register()`` for custom adapters (test doubles included)
    - ``get_adapter()``: backend name or connection string → adapter

Accepted connection strings::

    sqlite:///relative/path.db     sqlite:////abs/path.db
    sqlite://:memory:              memory
    ./coordinator.db               (bare path → SQLite)
    postgresql://user:pw@host:5432/db   postgres://...

Tags:
    coordinator, database, registry, factory

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Any
from urllib.parse import parse_qsl, unquote, urlsplit

from coordinator.core.errors import ConfigError

from .base import DatabaseAdapter
from .postgresql import PostgreSQLAdapter
from .sqlite import SQLiteAdapter
from .types import DatabaseType


class AdapterRegistry:
    """
    Registry for database adapter factories.

    Pre-registered adapters:
    - ``sqlite``: :class:`SQLiteAdapter`
    - ``postgresql`` / ``postgres``: :class:`PostgreSQLAdapter`
    """

    def __init__(self):
        self._factories: dict[str, type[DatabaseAdapter]] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        self._factories["sqlite"] = SQLiteAdapter
        self._factories["postgresql"] = PostgreSQLAdapter
        self._factories["postgres"] = PostgreSQLAdapter  # Alias

    def register(self, name: str, adapter_class: type[DatabaseAdapter]) -> None:
        """Register an adapter factory."""
        self._factories[name.lower()] = adapter_class

    def create(self, name: str, **kwargs: Any) -> DatabaseAdapter:
        """Create an adapter by name."""
        name = name.lower()
        if name not in self._factories:
            raise ConfigError(f"Unknown database adapter: {name}")
        return self._factories[name](**kwargs)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._factories

    def list_adapters(self) -> list[str]:
        """List registered adapter names."""
        return sorted(self._factories.keys())


# Global registry
adapter_registry = AdapterRegistry()


def parse_database_url(url: str) -> tuple[str, dict[str, Any]]:
    """Split a connection string into ``(adapter name, constructor kwargs)``.

    Raises:
        ConfigError: empty string or unsupported scheme.
    """
    url = url.strip()
    if not url:
        raise ConfigError("Database URL is empty")

    if url in (":memory:", "memory"):
        return "sqlite", {"path": ":memory:"}

    if "://" not in url:
        return "sqlite", {"path": url}

    scheme = url.split("://", 1)[0].lower()

    if scheme == "sqlite":
        rest = url.split("://", 1)[1]
        # sqlite:///rel.db -> "/rel.db" -> "rel.db"; sqlite:////abs.db -> "//abs.db" -> "/abs.db"
        path = rest[1:] if rest.startswith("/") else rest
        if path in ("", ":memory:", "memory"):
            path = ":memory:"
        return "sqlite", {"path": path}

    if scheme in ("postgresql", "postgres"):
        parts = urlsplit(url)
        kwargs: dict[str, Any] = {
            "host": parts.hostname or "localhost",
            "port": parts.port or 5432,
            "database": unquote(parts.path.lstrip("/")),
            "username": unquote(parts.username) if parts.username else None,
            "password": unquote(parts.password) if parts.password else None,
        }
        query = dict(parse_qsl(parts.query))
        if "sslmode" in query:
            kwargs["ssl_mode"] = query.pop("sslmode")
        kwargs.update(query)
        return "postgresql", kwargs

    raise ConfigError(f"Unsupported database URL scheme: {scheme!r}")


def get_adapter(
    target: DatabaseType | str,
    **kwargs: Any,
) -> DatabaseAdapter:
    """
    Get a database adapter by backend name or connection string.

    Usage:
        adapter = get_adapter(DatabaseType.SQLITE, path="data.db")
        adapter = get_adapter("postgresql://coordinator:pw@db:5432/coordinator", pool_size=10)
        adapter = get_adapter("sqlite:///coordinator.db")
    """
    if isinstance(target, DatabaseType):
        return adapter_registry.create(target.value, **kwargs)
    if target in adapter_registry:
        return adapter_registry.create(target, **kwargs)

    name, url_kwargs = parse_database_url(target)
    if name == "sqlite":
        # SQLite has no network connect timeout
        kwargs.pop("connect_timeout", None)
    return adapter_registry.create(name, **{**url_kwargs, **kwargs})


__all__ = [
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
    "parse_database_url",
]
