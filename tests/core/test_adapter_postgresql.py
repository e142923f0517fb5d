"""Tests for coordinator.core.adapters.postgresql.PostgreSQLAdapter.

psycopg2 is replaced by a mock module so these run without a server.
"""

from __future__ import annotations

import sys
from unittest.mock import MagicMock, patch

import pytest

from coordinator.core.adapters import DatabaseType, PostgreSQLAdapter
from coordinator.core.errors import (
    ConfigError,
    ConflictError,
    MissingReferenceError,
    StoreUnavailableError,
    UniqueViolationError,
)


class _Error(Exception):
    def __init__(self, msg: str = "", pgcode: str | None = None):
        super().__init__(msg)
        self.pgcode = pgcode


class _OperationalError(_Error):
    pass


class _InterfaceError(_Error):
    pass


def _fake_psycopg2() -> MagicMock:
    mod = MagicMock()
    mod.Error = _Error
    mod.OperationalError = _OperationalError
    mod.InterfaceError = _InterfaceError
    return mod


@pytest.fixture
def psycopg2_mock():
    mod = _fake_psycopg2()
    with patch.dict(sys.modules, {"psycopg2": mod}):
        yield mod


@pytest.fixture
def pg(psycopg2_mock):
    a = PostgreSQLAdapter(
        host="db",
        port=5433,
        database="coordinator",
        username="svc",
        password="secret",
        pool_size=2,
        pool_timeout=0.5,
    )
    a.connect()
    yield a
    a.disconnect()


class TestConnect:
    def test_missing_driver(self):
        with patch.dict(sys.modules, {"psycopg2": None}):
            a = PostgreSQLAdapter(database="x")
            with pytest.raises(ConfigError):
                a.connect()

    def test_connect_kwargs(self, pg, psycopg2_mock):
        psycopg2_mock.connect.assert_called_once_with(
            host="db",
            port=5433,
            dbname="coordinator",
            user="svc",
            password="secret",
            connect_timeout=10,
            sslmode="prefer",
        )
        assert pg.db_type == DatabaseType.POSTGRESQL

    def test_connect_failure(self, psycopg2_mock):
        psycopg2_mock.connect.side_effect = _OperationalError("could not connect")
        a = PostgreSQLAdapter(database="x")
        with pytest.raises(StoreUnavailableError):
            a.connect()

    def test_password_redacted(self, pg):
        url = pg.config.to_connection_string()
        assert "secret" not in url
        assert url == "postgresql://svc:***@db:5433/coordinator"


class TestStatements:
    def test_insert_uses_returning(self, pg, psycopg2_mock):
        conn = psycopg2_mock.connect.return_value
        cursor = conn.cursor.return_value
        cursor.fetchone.return_value = (17,)

        with pg.transaction() as c:
            new_id = pg.insert_returning_id(c, "profiles", ("base", "name"), ("ci", "n"))

        assert new_id == 17
        sql, params = cursor.execute.call_args[0]
        assert sql == "INSERT INTO profiles (base, name) VALUES (%s, %s) RETURNING id"
        assert params == ("ci", "n")
        conn.commit.assert_called_once()


class TestErrorTranslation:
    @pytest.mark.parametrize(
        ("pgcode", "expected"),
        [
            ("23505", UniqueViolationError),
            ("23503", MissingReferenceError),
            ("23502", ConflictError),
        ],
    )
    def test_integrity_codes(self, pg, pgcode, expected):
        assert isinstance(pg.translate_error(_Error("x", pgcode)), expected)

    def test_operational_error(self, pg):
        assert isinstance(pg.translate_error(_OperationalError("gone")), StoreUnavailableError)

    def test_unrelated_error(self, pg):
        assert pg.translate_error(ValueError("x")) is None
        assert pg.translate_error(_Error("syntax", "42601")) is None

    def test_broken_connection_discarded(self, pg, psycopg2_mock):
        conn = psycopg2_mock.connect.return_value
        conn.cursor.return_value.execute.side_effect = _OperationalError("server closed")

        with pytest.raises(StoreUnavailableError):
            pg.query("SELECT 1")

        conn.close.assert_called_once()
        assert pg.pool_stats()["in_use"] == 0

        conn.cursor.return_value.execute.side_effect = None
        pg.ping()
        assert psycopg2_mock.connect.call_count == 2
