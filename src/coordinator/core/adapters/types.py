"""Database types and configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import quote

from coordinator.core.errors import ConfigError


class DatabaseType(str, Enum):
    """Supported database types."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"


@dataclass
class DatabaseConfig:
    """
    Configuration for a pooled database connection.

    Different fields are used by different database types.
    """

    db_type: DatabaseType = DatabaseType.SQLITE

    # SQLite
    path: str | None = None

    # PostgreSQL
    host: str = "localhost"
    port: int = 5432
    database: str = ""
    username: str | None = None
    password: str | None = None
    ssl_mode: str = "prefer"

    # Connection pool
    pool_size: int = 5
    pool_timeout: float = 30.0
    connect_timeout: int = 10

    # Extra driver keyword arguments
    options: dict[str, Any] = field(default_factory=dict)

    def to_connection_string(self, *, redact: bool = True) -> str:
        """Connection string for logs (password masked unless ``redact=False``)."""
        match self.db_type:
            case DatabaseType.SQLITE:
                return f"sqlite:///{self.path or ':memory:'}"
            case DatabaseType.POSTGRESQL:
                auth = ""
                if self.username:
                    auth = quote(self.username, safe="")
                    if self.password:
                        auth += ":" + ("***" if redact else quote(self.password, safe=""))
                    auth += "@"
                return f"postgresql://{auth}{self.host}:{self.port}/{self.database}"
            case _:
                raise ConfigError(f"Connection string not supported for: {self.db_type}")


__all__ = [
    "DatabaseType",
    "DatabaseConfig",
]
