"""Call logger tests."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import pytest

from toolserver import calllog
from toolserver.calllog import CallLogger, snapshot_arguments
from toolserver.errors import InvalidRequestError


class RecordingLogger:
    """Stand-in for the module's structlog logger."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict[str, Any]]] = []

    def info(self, event: str, **kwargs: Any) -> None:
        self.events.append(("info", event, kwargs))

    def warning(self, event: str, **kwargs: Any) -> None:
        self.events.append(("warning", event, kwargs))


def _read_entries(path: Path) -> list[dict[str, Any]]:
    return [json.loads(line) for line in path.read_text().splitlines()]


@pytest.mark.asyncio
async def test_success_appends_ok_entry(log_path: Path) -> None:
    logger = CallLogger(log_path)

    async def work() -> int:
        return 42

    result = await logger.around("calculate", {"a": 1}, work)

    assert result == 42
    (entry,) = _read_entries(log_path)
    assert entry["tool"] == "calculate"
    assert entry["status"] == "ok"
    assert entry["args"] == {"a": 1}
    assert entry["duration_ms"] >= 0
    assert entry["ts"]
    assert "error" not in entry


@pytest.mark.asyncio
async def test_failure_logs_and_reraises_original(log_path: Path) -> None:
    logger = CallLogger(log_path)
    original = InvalidRequestError("Customer C-9999 not found")

    async def work() -> None:
        raise original

    with pytest.raises(InvalidRequestError) as excinfo:
        await logger.around("erp_get_customer", {"id": "C-9999"}, work)

    assert excinfo.value is original
    (entry,) = _read_entries(log_path)
    assert entry["status"] == "error"
    assert entry["error"] == "Customer C-9999 not found"
    assert entry["args"] == {"id": "C-9999"}


@pytest.mark.asyncio
async def test_argument_snapshot_taken_at_start(log_path: Path) -> None:
    logger = CallLogger(log_path)
    arguments: dict[str, Any] = {"row": {"name": "before"}}

    async def work() -> None:
        arguments["row"]["name"] = "after"

    await logger.around("db_insert", arguments, work)

    (entry,) = _read_entries(log_path)
    assert entry["args"] == {"row": {"name": "before"}}


@pytest.mark.asyncio
async def test_console_fallback_without_file(monkeypatch) -> None:
    recorder = RecordingLogger()
    monkeypatch.setattr(calllog, "logger", recorder)
    logger = CallLogger()

    async def work() -> str:
        return "ok"

    await logger.around("get_users", {}, work)

    assert len(recorder.events) == 1
    level, event, fields = recorder.events[0]
    assert (level, event) == ("info", "tool_call")
    assert fields["tool"] == "get_users"
    assert fields["status"] == "ok"


@pytest.mark.asyncio
async def test_console_fallback_when_file_append_fails(tmp_path: Path, monkeypatch) -> None:
    recorder = RecordingLogger()
    monkeypatch.setattr(calllog, "logger", recorder)
    # A directory cannot be opened for appending.
    logger = CallLogger(tmp_path)

    async def work() -> None:
        raise ValueError("boom")

    with pytest.raises(ValueError, match="boom"):
        await logger.around("calculate", {"a": 1}, work)

    events = [(level, event) for level, event, _ in recorder.events]
    assert events == [("warning", "call_log_file_unavailable"), ("info", "tool_call")]
    fields = recorder.events[-1][2]
    assert fields["status"] == "error"
    assert fields["error"] == "boom"


@pytest.mark.asyncio
async def test_logging_failure_never_masks_result(monkeypatch) -> None:
    class BrokenLogger:
        def info(self, event: str, **kwargs: Any) -> None:
            raise RuntimeError("sink down")

        def warning(self, event: str, **kwargs: Any) -> None:
            raise RuntimeError("sink down")

    monkeypatch.setattr(calllog, "logger", BrokenLogger())
    logger = CallLogger()

    async def work() -> str:
        return "value"

    assert await logger.around("get_users", None, work) == "value"


def test_snapshot_arguments_is_json_safe() -> None:
    snapshot = snapshot_arguments({"path": Path("/tmp/x"), "n": 1})
    assert snapshot == {"path": "/tmp/x", "n": 1}
    assert snapshot_arguments(None) == {}


@pytest.mark.asyncio
async def test_concurrent_writes_append_whole_lines(log_path: Path) -> None:
    logger = CallLogger(log_path)

    async def work() -> str:
        return "ok"

    await asyncio.gather(
        *(logger.around(f"tool_{n}", {"n": n}, work) for n in range(25))
    )

    entries = _read_entries(log_path)
    assert sorted(entry["args"]["n"] for entry in entries) == list(range(25))
    assert all(entry["status"] == "ok" for entry in entries)


def test_append_line_writes_to_given_path(tmp_path: Path) -> None:
    target = tmp_path / "direct.jsonl"
    calllog._append_line(target, '{"tool": "x"}')
    calllog._append_line(target, '{"tool": "y"}')
    assert [e["tool"] for e in _read_entries(target)] == ["x", "y"]
