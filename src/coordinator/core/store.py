"""
Process-scoped store: one adapter shared by the profile registry and the task store.

Created once at startup (the FastAPI lifespan or a CLI command), opened
explicitly, closed on shutdown. Registries receive the adapter through their
constructors; nothing reaches for a global connection.

Examples:
    >>> with Store.from_settings(CoordinatorSettings(database_url="memory")) as store:
    ...     pid = store.profiles.create_profile("ci", "nightly", "{}")
    ...     store.tasks.create_task(pid, "out.log", b"hello")
    1

Tags:
    store, lifecycle, dependency-injection, coordinator

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from typing import Any

from coordinator.core.adapters import DatabaseAdapter, get_adapter
from coordinator.core.logging import get_logger
from coordinator.core.profiles import ProfileRegistry
from coordinator.core.schema import ensure_schema
from coordinator.core.settings import CoordinatorSettings
from coordinator.core.tasks import TaskStore

logger = get_logger(__name__)


class Store:
    """Adapter plus the two repositories built on it."""

    def __init__(
        self,
        adapter: DatabaseAdapter,
        *,
        digest_algorithm: str = "sha2-256",
        verify_on_fetch: bool = False,
    ) -> None:
        self.adapter = adapter
        self.profiles = ProfileRegistry(adapter)
        self.tasks = TaskStore(
            adapter,
            self.profiles,
            digest_algorithm=digest_algorithm,
            verify_on_fetch=verify_on_fetch,
        )

    @classmethod
    def from_settings(cls, settings: CoordinatorSettings) -> Store:
        adapter = get_adapter(
            settings.database_url,
            pool_size=settings.pool_size,
            pool_timeout=settings.pool_timeout,
            connect_timeout=settings.connect_timeout,
        )
        return cls(
            adapter,
            digest_algorithm=settings.digest_algorithm,
            verify_on_fetch=settings.verify_digest_on_fetch,
        )

    def open(self, *, init_schema: bool = True) -> Store:
        """Connect the pool and, by default, create missing tables."""
        self.adapter.connect()
        if init_schema:
            ensure_schema(self.adapter)
        return self

    def close(self) -> None:
        self.adapter.disconnect()

    def health(self) -> dict[str, Any]:
        """Ping result plus pool occupancy. Raises if the store is unreachable."""
        self.adapter.ping()
        return {"backend": self.adapter.dialect.name, "pool": self.adapter.pool_stats()}

    def __enter__(self) -> Store:
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


__all__ = [
    "Store",
]
