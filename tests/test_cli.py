"""CLI entrypoint tests."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from toolserver.__main__ import main


@pytest.fixture()
def cli_env(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.setenv("TOOLSERVER_DB_PATH", str(tmp_path / "cli.db"))
    monkeypatch.setenv("TOOLSERVER_LOG_FILE", str(tmp_path / "cli-calls.jsonl"))
    monkeypatch.setenv("PYRIGHT_ROOT", str(tmp_path))
    return tmp_path


def test_cli_version(capsys, monkeypatch) -> None:
    monkeypatch.setattr(sys, "argv", ["toolserver", "--version"])
    with pytest.raises(SystemExit) as excinfo:
        main()
    assert excinfo.value.code == 0
    output = capsys.readouterr().out
    assert "mcp-toolserver" in output


def test_cli_help(capsys, monkeypatch) -> None:
    monkeypatch.setattr(sys, "argv", ["toolserver", "--help"])
    with pytest.raises(SystemExit) as excinfo:
        main()
    assert excinfo.value.code == 0
    output = capsys.readouterr().out
    assert "usage:" in output.lower()
    assert "--list-tools" in output


def test_cli_runs_uvicorn(monkeypatch) -> None:
    captured: dict[str, object] = {}

    class DummyUvicorn:
        @staticmethod
        def run(app: str, host: str, port: int, reload: bool) -> None:
            captured["app"] = app
            captured["host"] = host
            captured["port"] = port
            captured["reload"] = reload

    monkeypatch.setitem(sys.modules, "uvicorn", DummyUvicorn)
    monkeypatch.setattr(sys, "argv", ["toolserver", "--host", "127.0.0.1", "--port", "9001"])
    main()
    assert captured == {
        "app": "toolserver.main:app",
        "host": "127.0.0.1",
        "port": 9001,
        "reload": False,
    }


def test_cli_port_defaults_from_env(monkeypatch) -> None:
    captured: dict[str, object] = {}

    class DummyUvicorn:
        @staticmethod
        def run(app: str, host: str, port: int, reload: bool) -> None:
            captured["port"] = port

    monkeypatch.setenv("PORT", "9123")
    monkeypatch.setitem(sys.modules, "uvicorn", DummyUvicorn)
    monkeypatch.setattr(sys, "argv", ["toolserver"])
    main()
    assert captured["port"] == 9123


def test_cli_call_prints_result(cli_env: Path, capsys, monkeypatch) -> None:
    monkeypatch.setattr(
        sys,
        "argv",
        ["toolserver", "--call", "calculate", "--args", '{"operation": "add", "a": 2, "b": 3}'],
    )
    with pytest.raises(SystemExit) as excinfo:
        main()
    assert excinfo.value.code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["result"] == 5

    entries = (cli_env / "cli-calls.jsonl").read_text().splitlines()
    assert json.loads(entries[-1])["tool"] == "calculate"


def test_cli_call_reports_tool_error(cli_env: Path, capsys, monkeypatch) -> None:
    monkeypatch.setattr(
        sys, "argv", ["toolserver", "--call", "erp_get_customer", "--args", '{"id": "C-9999"}']
    )
    with pytest.raises(SystemExit) as excinfo:
        main()
    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert err.startswith("InvalidRequest:")
    assert "C-9999" in err


def test_cli_call_rejects_bad_args(cli_env: Path, capsys, monkeypatch) -> None:
    monkeypatch.setattr(sys, "argv", ["toolserver", "--call", "get_users", "--args", "[1, 2]"])
    with pytest.raises(SystemExit) as excinfo:
        main()
    assert excinfo.value.code == 2
    assert "JSON object" in capsys.readouterr().err


def test_cli_list_tools(cli_env: Path, capsys, monkeypatch) -> None:
    monkeypatch.setenv("TOOLSERVER_TOOLSETS", "demo")
    monkeypatch.setattr(sys, "argv", ["toolserver", "--list-tools"])
    main()
    output = capsys.readouterr().out
    assert "calculate" in output
    assert "get_users" in output
    assert "db_query" not in output


def test_cli_self_check_unreachable(capsys, monkeypatch) -> None:
    monkeypatch.setattr(
        sys, "argv", ["toolserver", "--self-check", "--base-url", "http://127.0.0.1:9"]
    )
    with pytest.raises(SystemExit) as excinfo:
        main()
    assert excinfo.value.code == 1
    assert json.loads(capsys.readouterr().out)["status"] == "fail"
