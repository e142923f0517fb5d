"""Coordinator settings.

Configuration is explicit, validated, and environment-driven. Values are
resolved in this order (highest first):

1. Keyword arguments passed to :class:`CoordinatorSettings`
2. ``COORDINATOR_*`` environment variables
3. ``.env`` file
4. YAML config file (``coordinator.yaml`` unless ``-c/--config`` says otherwise)
5. Defaults below

The YAML file keeps the key names of the original deployment format
(``postgres_uri``, ``rpc_listen_address``, ``rpc_listen_port``)::

    postgres_uri: postgresql://coordinator:secret@db:5432/coordinator
    rpc_listen_address: 0.0.0.0
    rpc_listen_port: 12001

Tags:
    settings, configuration, pydantic, yaml, environment, coordinator

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError as PydanticValidationError, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from coordinator.core.errors import ConfigError
from coordinator.core.hashing import ALGORITHMS_BY_NAME

DEFAULT_CONFIG_FILE = "coordinator.yaml"

# Legacy/short key -> field name
_KEY_ALIASES: dict[str, str] = {
    "postgres_uri": "database_url",
    "host": "rpc_listen_address",
    "port": "rpc_listen_port",
}


class CoordinatorSettings(BaseSettings):
    """Settings for the coordinator service.

    Fields
    ──────
    database_url           : Backing-store connection string
    rpc_listen_address     : Bind address for the RPC transport
    rpc_listen_port        : Bind port for the RPC transport
    pool_size              : Maximum pooled connections
    pool_timeout           : Seconds to wait for a free connection
    connect_timeout        : Seconds to wait when opening a connection
    digest_algorithm       : Multihash name used for new task digests
    verify_digest_on_fetch : Recompute and compare digests on fetch_task
    log_level / log_json   : Logging knobs
    """

    model_config = SettingsConfigDict(
        env_prefix="COORDINATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        yaml_file=DEFAULT_CONFIG_FILE,
        extra="ignore",
    )

    # ── Store ────────────────────────────────────────────────────
    database_url: str = Field(
        default="sqlite:///coordinator.db",
        description="sqlite:///path, postgresql://user:pw@host:port/db",
    )
    pool_size: int = Field(default=5, ge=1, description="Maximum pooled connections")
    pool_timeout: float = Field(default=30.0, gt=0, description="Seconds to wait for a connection")
    connect_timeout: int = Field(default=10, ge=1, description="Seconds to wait when connecting")

    # ── RPC ──────────────────────────────────────────────────────
    rpc_listen_address: str = Field(default="127.0.0.1", description="Bind address")
    rpc_listen_port: int = Field(default=12001, ge=1, le=65535, description="Bind port")

    # ── Integrity ────────────────────────────────────────────────
    digest_algorithm: str = Field(default="sha2-256", description="Multihash name for new digests")
    verify_digest_on_fetch: bool = Field(
        default=False,
        description="Recompute the payload digest on every fetch_task",
    )

    # ── Observability ────────────────────────────────────────────
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool | None = None

    @model_validator(mode="before")
    @classmethod
    def _map_legacy_keys(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            for legacy, name in _KEY_ALIASES.items():
                if legacy in data:
                    value = data.pop(legacy)
                    data.setdefault(name, value)
        return data

    @field_validator("digest_algorithm")
    @classmethod
    def _known_algorithm(cls, value: str) -> str:
        if value not in ALGORITHMS_BY_NAME:
            raise ValueError(f"unsupported digest algorithm {value!r}")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level {value!r}")
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def load_settings(config_file: str | Path | None = None, **overrides: Any) -> CoordinatorSettings:
    """Build settings, optionally from an explicit YAML config file.

    Args:
        config_file: Path to a YAML file. Must exist when given explicitly.
        **overrides: Highest-precedence field values.

    Raises:
        ConfigError: missing config file or invalid values.
    """
    settings_cls: type[CoordinatorSettings] = CoordinatorSettings
    if config_file is not None:
        path = Path(config_file)
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")

        class _FileSettings(CoordinatorSettings):
            model_config = SettingsConfigDict(**{**CoordinatorSettings.model_config, "yaml_file": path})

        settings_cls = _FileSettings

    try:
        return settings_cls(**overrides)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}", cause=e) from e


__all__ = [
    "CoordinatorSettings",
    "DEFAULT_CONFIG_FILE",
    "load_settings",
]
