"""Tests for the JSON-RPC surface (POST /rpc) using FastAPI's TestClient."""

from __future__ import annotations

import base64
from collections.abc import Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from coordinator.api.app import create_app
from coordinator.core.settings import CoordinatorSettings


@pytest.fixture
def client(db_path) -> Iterator[TestClient]:
    settings = CoordinatorSettings(database_url=f"sqlite:///{db_path}", pool_timeout=2.0)
    with TestClient(create_app(settings=settings)) as c:
        yield c


def call(client: TestClient, method: str, params: Any = None, id_: Any = 1) -> dict[str, Any]:
    body: dict[str, Any] = {"jsonrpc": "2.0", "method": method, "id": id_}
    if params is not None:
        body["params"] = params
    resp = client.post("/rpc", json=body)
    assert resp.status_code == 200
    return resp.json()


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


class TestProfiles:
    def test_create_and_fetch(self, client):
        created = call(client, "create_profile", {"base": "ci", "name": "nightly", "json": '{"a": 1}'})
        assert created == {"jsonrpc": "2.0", "result": 1, "id": 1}

        fetched = call(client, "fetch_profile", {"id": 1})["result"]
        assert fetched == {"id": 1, "base": "ci", "name": "nightly", "json": '{"a": 1}'}

    def test_list_profiles(self, client):
        call(client, "create_profile", {"base": "x", "name": "a", "json": "{}"})
        call(client, "create_profile", {"base": "y", "name": "b", "json": "{}"})
        assert call(client, "list_profiles")["result"] == [1, 2]
        assert call(client, "list_profiles", {"by_base": "y"})["result"] == [2]
        assert call(client, "list_profiles", {"by_base": None})["result"] == [1, 2]

    def test_duplicate_name_conflict(self, client):
        call(client, "create_profile", {"base": "ci", "name": "n", "json": "{}"})
        error = call(client, "create_profile", {"base": "ci", "name": "n", "json": "{}"})["error"]
        assert error["code"] == -32002
        assert error["data"]["kind"] == "CONFLICT"
        assert error["data"]["retryable"] is False

    def test_fetch_missing(self, client):
        error = call(client, "fetch_profile", {"id": 9})["error"]
        assert error["code"] == -32001
        assert error["data"] == {"kind": "NOT_FOUND", "retryable": False, "profile_id": 9}

    def test_positional_params(self, client):
        assert call(client, "create_profile", ["ci", "pos", "{}"])["result"] == 1
        assert call(client, "fetch_profile", [1])["result"]["name"] == "pos"


class TestTasks:
    @pytest.fixture
    def profile(self, client) -> int:
        return call(client, "create_profile", {"base": "ci", "name": "n", "json": "{}"})["result"]

    def test_create_and_fetch_base64(self, client, profile):
        tid = call(client, "create_task", {"profile": profile, "file_name": "f.txt", "data": b64(b"hello")})["result"]
        task = call(client, "fetch_task", {"id": tid})["result"]
        assert task["profile_id"] == profile
        assert task["file_name"] == "f.txt"
        assert base64.b64decode(task["data"]) == b"hello"
        assert task["digest"] == "12202cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"

    def test_create_with_byte_array(self, client, profile):
        tid = call(client, "create_task", {"profile": profile, "file_name": "f", "data": [104, 105]})["result"]
        assert call(client, "fetch_task", [tid])["result"]["data"] == b64(b"hi")

    def test_empty_payload(self, client, profile):
        tid = call(client, "create_task", [profile, "", ""])["result"]
        assert call(client, "fetch_task", [tid])["result"]["data"] == ""

    def test_list_tasks(self, client, profile):
        other = call(client, "create_profile", {"base": "ci", "name": "m", "json": "{}"})["result"]
        a = call(client, "create_task", [profile, "a", b64(b"a")])["result"]
        b = call(client, "create_task", [other, "b", b64(b"b")])["result"]
        assert call(client, "list_tasks")["result"] == [a, b]
        assert call(client, "list_tasks", {"by_profile": other})["result"] == [b]

    def test_unknown_profile(self, client):
        error = call(client, "create_task", {"profile": 5, "file_name": "f", "data": ""})["error"]
        assert error["code"] == -32001
        assert call(client, "list_tasks")["result"] == []

    def test_fetch_missing_task(self, client):
        assert call(client, "fetch_task", {"id": 1})["error"]["code"] == -32001

    @pytest.mark.parametrize("data", ["not base64!", [256], [1, True], 12])
    def test_bad_payload(self, client, profile, data):
        error = call(client, "create_task", {"profile": profile, "file_name": "f", "data": data})["error"]
        assert error["code"] == -32602
        assert error["data"]["kind"] == "INVALID_PARAMS"


class TestProtocol:
    def test_parse_error(self, client):
        resp = client.post("/rpc", content=b"{not json", headers={"content-type": "application/json"})
        body = resp.json()
        assert body["error"]["code"] == -32700
        assert body["id"] is None

    def test_invalid_request(self, client):
        resp = client.post("/rpc", json={"jsonrpc": "1.0", "method": "list_tasks", "id": 3})
        body = resp.json()
        assert body["error"]["code"] == -32600
        assert body["id"] == 3

    def test_invalid_request_without_id_is_answered(self, client):
        resp = client.post("/rpc", json={"jsonrpc": "2.0", "method": 1})
        assert resp.status_code == 200
        assert resp.json()["error"]["code"] == -32600

    def test_method_not_found(self, client):
        error = call(client, "delete_task", {"id": 1})["error"]
        assert error["code"] == -32601
        assert error["data"]["method"] == "delete_task"

    def test_missing_params(self, client):
        assert call(client, "fetch_task")["error"]["code"] == -32602

    def test_unknown_param(self, client):
        assert call(client, "fetch_task", {"id": 1, "verbose": True})["error"]["code"] == -32602

    def test_too_many_positional(self, client):
        assert call(client, "fetch_task", [1, 2])["error"]["code"] == -32602

    def test_string_id_echoed(self, client):
        assert call(client, "list_profiles", id_="abc")["id"] == "abc"

    def test_notification_gets_no_body(self, client):
        resp = client.post("/rpc", json={"jsonrpc": "2.0", "method": "create_profile", "params": ["b", "n", "{}"]})
        assert resp.status_code == 204
        assert call(client, "list_profiles")["result"] == [1]

    def test_batch(self, client):
        resp = client.post(
            "/rpc",
            json=[
                {"jsonrpc": "2.0", "method": "create_profile", "params": ["b", "n", "{}"], "id": 1},
                {"jsonrpc": "2.0", "method": "list_profiles", "id": 2},
                {"jsonrpc": "2.0", "method": "list_profiles"},
                {"jsonrpc": "2.0", "method": "nope", "id": 3},
            ],
        )
        body = resp.json()
        assert [r["id"] for r in body] == [1, 2, 3]
        assert body[1]["result"] == [1]
        assert body[2]["error"]["code"] == -32601

    def test_empty_batch(self, client):
        assert client.post("/rpc", json=[]).json()["error"]["code"] == -32600

    def test_batch_of_notifications(self, client):
        resp = client.post("/rpc", json=[{"jsonrpc": "2.0", "method": "list_tasks"}])
        assert resp.status_code == 204

    def test_request_id_header(self, client):
        resp = client.post(
            "/rpc",
            json={"jsonrpc": "2.0", "method": "list_tasks", "id": 1},
            headers={"X-Request-ID": "req-123"},
        )
        assert resp.headers["X-Request-ID"] == "req-123"


class TestVerifyOnFetch:
    def test_corrupted_payload(self, db_path):
        settings = CoordinatorSettings(database_url=f"sqlite:///{db_path}", verify_digest_on_fetch=True)
        app = create_app(settings=settings)
        with TestClient(app) as client:
            pid = call(client, "create_profile", ["b", "n", "{}"])["result"]
            tid = call(client, "create_task", [pid, "f", b64(b"hello")])["result"]
            app.state.store.adapter.execute("UPDATE tasks SET data = ? WHERE id = ?", (b"hullo", tid))

            error = call(client, "fetch_task", [tid])["error"]
            assert error["code"] == -32005
            assert error["data"]["kind"] == "DATA_CORRUPTED"
            assert error["data"]["task_id"] == tid


class TestIdRange:
    @pytest.mark.parametrize(
        ("method", "params"),
        [
            ("fetch_profile", {"id": 2**64}),
            ("fetch_task", {"id": 2**63}),
            ("fetch_task", {"id": -1}),
            ("create_task", {"profile": 2**64, "file_name": "f", "data": ""}),
            ("list_tasks", {"by_profile": 2**64}),
        ],
    )
    def test_out_of_range_id_is_invalid_params(self, client, method, params):
        error = call(client, method, params)["error"]
        assert error["code"] == -32602
        assert error["data"]["kind"] == "INVALID_PARAMS"

    def test_largest_id_is_not_found(self, client):
        error = call(client, "fetch_profile", {"id": 2**63 - 1})["error"]
        assert error["code"] == -32001


class TestTransientFaults:
    def test_pool_exhausted(self, db_path):
        settings = CoordinatorSettings(database_url=f"sqlite:///{db_path}", pool_size=1, pool_timeout=0.05)
        app = create_app(settings=settings)
        with TestClient(app) as client:
            with app.state.store.adapter.connection():
                error = call(client, "list_profiles")["error"]
            assert call(client, "list_profiles")["result"] == []
        assert error["code"] == -32003
        assert error["data"]["kind"] == "RESOURCE_EXHAUSTED"
        assert error["data"]["retryable"] is True

    def test_store_unavailable(self, client):
        client.app.state.store.adapter.execute("DROP TABLE tasks")
        error = call(client, "list_tasks")["error"]
        assert error["code"] == -32004
        assert error["data"]["kind"] == "STORE_UNAVAILABLE"
        assert error["data"]["retryable"] is True
