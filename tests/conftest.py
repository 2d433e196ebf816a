"""pytest fixtures for the tool server."""

from __future__ import annotations

import sys
from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from toolserver.calllog import CallLogger
from toolserver.config import ServerSettings
from toolserver.dispatcher import ToolDispatcher
from toolserver.main import create_app
from toolserver.registry import ToolRegistry
from toolserver.store import SnapshotDatabase
from toolserver.tools import build_registry


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "erp.db"


@pytest.fixture()
def log_path(tmp_path: Path) -> Path:
    return tmp_path / "calls.jsonl"


@pytest.fixture()
def settings(tmp_path: Path, db_path: Path, log_path: Path) -> ServerSettings:
    pyright_root = tmp_path / "project"
    pyright_root.mkdir()
    return ServerSettings(
        host="127.0.0.1",
        port=8080,
        log_level="INFO",
        log_file=log_path,
        db_path=db_path,
        pyright_root=pyright_root.resolve(),
        pyright_bin="pyright",
    )


@pytest.fixture()
def database(db_path: Path) -> Iterator[SnapshotDatabase]:
    db = SnapshotDatabase(db_path)
    yield db
    db.close()


@pytest.fixture()
def call_logger(log_path: Path) -> CallLogger:
    return CallLogger(log_path)


@pytest.fixture()
def registry(settings: ServerSettings, database: SnapshotDatabase) -> ToolRegistry:
    return build_registry(settings, database)


@pytest.fixture()
def dispatcher(registry: ToolRegistry, call_logger: CallLogger) -> ToolDispatcher:
    return ToolDispatcher(registry, call_logger)


@pytest.fixture()
def app(
    settings: ServerSettings, database: SnapshotDatabase, call_logger: CallLogger
) -> FastAPI:
    return create_app(settings=settings, database=database, call_logger=call_logger)


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture()
async def async_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
