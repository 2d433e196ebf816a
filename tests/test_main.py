"""FastAPI app behavior tests."""

from __future__ import annotations

import json
import uuid
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from toolserver import __version__
from toolserver.config import ALL_TOOLSETS
from toolserver.main import MAX_REQUEST_SIZE, MESSAGE_PATH, SSE_PATH
from toolserver.store import SnapshotDatabase


def test_request_size_middleware_rejects_large_payload(client) -> None:
    response = client.post(
        "/tools/call",
        content=b"{}",
        headers={"content-length": str(MAX_REQUEST_SIZE + 1)},
    )
    assert response.status_code == 413
    assert response.json()["error"] == "Request body too large"


def test_correlation_id_passthrough(client) -> None:
    response = client.get("/health", headers={"X-Correlation-ID": "cid-123"})
    assert response.headers["X-Correlation-ID"] == "cid-123"


def test_correlation_id_generated(client) -> None:
    response = client.get("/health")
    assert uuid.UUID(response.headers["X-Correlation-ID"])


def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["timestamp"]


def test_root_describes_endpoints(client) -> None:
    body = client.get("/").json()
    assert body["name"] == "mcp-toolserver"
    assert body["version"] == __version__
    assert body["endpoints"]["sse"] == SSE_PATH
    assert body["endpoints"]["message"] == MESSAGE_PATH
    assert body["toolsets"] == list(ALL_TOOLSETS)


def test_tools_list(client) -> None:
    body = client.get("/tools/list").json()
    names = [tool["name"] for tool in body["tools"]]
    assert names[:4] == ["get_users", "get_user_by_id", "get_server_stats", "calculate"]
    assert "pyright_check" in names
    calculate = next(tool for tool in body["tools"] if tool["name"] == "calculate")
    assert calculate["input_schema"]["required"] == ["operation", "a", "b"]
    assert {r["uri"] for r in body["resources"]} == {"data://users", "data://stats"}


def test_tools_call_success(client) -> None:
    response = client.post(
        "/tools/call",
        json={"tool_name": "calculate", "arguments": {"operation": "divide", "a": 10, "b": 2}},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["result"] == {"operation": "divide", "a": 10, "b": 2, "result": 5}
    assert body["error"] is None


def test_tools_call_invalid_request(client) -> None:
    response = client.post(
        "/tools/call",
        json={"tool_name": "calculate", "arguments": {"operation": "divide", "a": 1, "b": 0}},
    )
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error_kind"] == "InvalidRequest"
    assert "Division by zero" in body["error"]


def test_tools_call_unknown_tool(client) -> None:
    response = client.post("/tools/call", json={"tool_name": "nope", "arguments": {}})
    assert response.status_code == 404
    assert response.json()["error_kind"] == "MethodNotFound"


def test_tools_call_validation_error_has_example(client) -> None:
    response = client.post("/tools/call", json={"arguments": {}})
    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "Invalid request"
    assert body["example"]["tool_name"] == "calculate"

    blank = client.post("/tools/call", json={"tool_name": "   ", "arguments": {}})
    assert blank.status_code == 422


def test_tools_call_unexpected_failure(app: FastAPI, client) -> None:
    async def explode(tool_name, arguments):
        raise RuntimeError("disk on fire")

    app.state.dispatcher.dispatch_structured = explode
    response = client.post("/tools/call", json={"tool_name": "get_users", "arguments": {}})
    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Tool execution failed: disk on fire"


def test_tools_call_writes_call_log(client, log_path: Path) -> None:
    client.post("/tools/call", json={"tool_name": "get_server_stats", "arguments": {}})
    entries = [json.loads(line) for line in log_path.read_text().splitlines()]
    assert entries[-1]["tool"] == "get_server_stats"
    assert entries[-1]["status"] == "ok"


def test_database_round_trip_over_http(client) -> None:
    client.post(
        "/tools/call",
        json={"tool_name": "db_create", "arguments": {"schema_sql": "CREATE TABLE t(x INTEGER)"}},
    )
    response = client.post("/tools/call", json={"tool_name": "db_list_tables"})
    assert response.json()["result"] == [{"name": "t"}]


def test_message_post_requires_session_id(client) -> None:
    response = client.post(MESSAGE_PATH, json={"jsonrpc": "2.0", "method": "ping", "id": 1})
    assert response.status_code == 400


def test_message_post_unknown_session(client) -> None:
    response = client.post(
        f"{MESSAGE_PATH}?session_id={uuid.uuid4().hex}",
        json={"jsonrpc": "2.0", "method": "ping", "id": 1},
    )
    assert response.status_code == 404


def test_lifespan_closes_database(app: FastAPI, database: SnapshotDatabase) -> None:
    with TestClient(app) as lifespan_client:
        lifespan_client.post(
            "/tools/call", json={"tool_name": "db_list_tables", "arguments": {}}
        )
        assert database.is_open
    assert not database.is_open


@pytest.mark.asyncio
async def test_async_client_calls(async_client) -> None:
    response = await async_client.post(
        "/tools/call",
        json={"tool_name": "erp_get_customer", "arguments": {"id": "C-1002"}},
    )
    assert response.status_code == 200
    assert response.json()["result"]["id"] == "C-1002"
