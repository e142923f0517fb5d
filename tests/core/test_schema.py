"""Tests for coordinator.core.schema and coordinator.core.dialect."""

from __future__ import annotations

import pytest

from coordinator.core.dialect import PostgreSQLDialect, SQLiteDialect, get_dialect
from coordinator.core.schema import TABLES, build_ddl, ensure_schema, table_exists


class TestDialects:
    def test_sqlite(self):
        d = get_dialect("sqlite")
        assert isinstance(d, SQLiteDialect)
        assert d.placeholders(3) == "?, ?, ?"
        assert d.binary_type() == "BLOB"
        assert d.supports_returning() is False

    def test_postgresql(self):
        d = get_dialect("postgres")
        assert isinstance(d, PostgreSQLDialect)
        assert d.placeholders(2) == "%s, %s"
        assert d.binary_type() == "BYTEA"
        assert d.supports_returning() is True

    def test_unknown(self):
        with pytest.raises(ValueError):
            get_dialect("oracle")


class TestBuildDdl:
    def test_postgresql_ddl(self):
        ddl = build_ddl(PostgreSQLDialect())
        assert "GENERATED BY DEFAULT AS IDENTITY" in ddl["profiles"]
        assert "BYTEA" in ddl["tasks"]
        assert "REFERENCES profiles(id)" in ddl["tasks"]

    def test_sqlite_ddl(self):
        ddl = build_ddl(SQLiteDialect())
        assert "AUTOINCREMENT" in ddl["tasks"]
        assert "name TEXT NOT NULL UNIQUE" in ddl["profiles"]


class TestEnsureSchema:
    def test_creates_tables(self, adapter):
        assert table_exists(adapter, TABLES["profiles"])
        assert table_exists(adapter, TABLES["tasks"])
        assert not table_exists(adapter, "runs")

    def test_idempotent(self, adapter):
        adapter.execute("INSERT INTO profiles (base, name, json) VALUES (?, ?, ?)", ("b", "n", "{}"))
        assert ensure_schema(adapter) == ["profiles", "tasks"]
        assert adapter.query("SELECT name FROM profiles") == [{"name": "n"}]

    def test_indexes(self, adapter):
        rows = adapter.query("SELECT name FROM sqlite_master WHERE type = 'index' ORDER BY name")
        names = {r["name"] for r in rows}
        assert {"idx_profiles_base", "idx_tasks_profile"} <= names
