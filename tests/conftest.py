"""
Shared pytest fixtures for coordinator tests.

Every store-backed fixture uses a fresh SQLite file under ``tmp_path`` so
tests never share rows and never touch the working directory.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import pytest

from coordinator.core.adapters import SQLiteAdapter
from coordinator.core.schema import ensure_schema
from coordinator.core.settings import CoordinatorSettings
from coordinator.core.store import Store
from coordinator.ops.context import OperationContext


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep COORDINATOR_* variables and stray config files out of tests."""
    for key in list(os.environ):
        if key.startswith("COORDINATOR_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "coordinator.db"


@pytest.fixture
def adapter(db_path: Path) -> Iterator[SQLiteAdapter]:
    """Connected SQLite adapter with the schema in place."""
    a = SQLiteAdapter(str(db_path), pool_size=4, pool_timeout=2.0)
    a.connect()
    ensure_schema(a)
    yield a
    a.disconnect()


@pytest.fixture
def settings(db_path: Path) -> CoordinatorSettings:
    return CoordinatorSettings(database_url=f"sqlite:///{db_path}", pool_timeout=2.0)


@pytest.fixture
def store(settings: CoordinatorSettings) -> Iterator[Store]:
    with Store.from_settings(settings) as s:
        yield s


@pytest.fixture
def verifying_store(db_path: Path) -> Iterator[Store]:
    """Store that recomputes digests on every fetch."""
    settings = CoordinatorSettings(database_url=f"sqlite:///{db_path}", verify_digest_on_fetch=True)
    with Store.from_settings(settings) as s:
        yield s


@pytest.fixture
def ctx(store: Store) -> OperationContext:
    return OperationContext(store=store, caller="test")
