"""Base repository over a pooled database adapter.

Provides :class:`BaseRepository`, the shared base of the profile registry and
the task store. It pairs a :class:`DatabaseAdapter` with its dialect so that
subclasses write portable SQL with bind placeholders only.

Architecture::

    ┌──────────────────────────────────────────────────────────────┐
    │                       BaseRepository                         │
    │                                                              │
    │   adapter: DatabaseAdapter   ← pool + transactions           │
    │   dialect: Dialect           ← adapter.dialect               │
    │                                                              │
    │   ph(n)                      → placeholder fragment          │
    └──────────────────────────────────────────────────────────────┘

Usage:
    >>> class TagRepo(BaseRepository):
    ...     def get(self, conn, tag_id: int):
    ...         return self.adapter.fetch_one(
    ...             conn, f"SELECT * FROM tags WHERE id = {self.ph(1)}", (tag_id,)
    ...         )

Tags:
    repository, database, abstraction, portability
"""

from __future__ import annotations

from coordinator.core.adapters.base import DatabaseAdapter
from coordinator.core.dialect import Dialect


class BaseRepository:
    """Dialect-aware base class for the coordinator's repositories.

    Parameters:
        adapter: Connected (or lazily connecting) database adapter. The
            repository never owns its lifecycle.
    """

    def __init__(self, adapter: DatabaseAdapter) -> None:
        self.adapter = adapter
        self.dialect: Dialect = adapter.dialect

    def ph(self, count: int) -> str:
        """Shortcut for ``self.dialect.placeholders(count)``.

        Embed directly in f-strings:
            f"SELECT * FROM t WHERE id = {self.ph(1)}"
        """
        return self.dialect.placeholders(count)


__all__ = [
    "BaseRepository",
]
