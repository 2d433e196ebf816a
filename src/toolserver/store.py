"""Embedded single-file SQLite database with snapshot persistence.

The whole database lives in memory. It is loaded from the backing file on
first use and every mutating statement rewrites the full file, so the last
successful write wins. There is no write-ahead log and no incremental diff.
"""

from __future__ import annotations

import asyncio
import os
import sqlite3
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from toolserver.logging import get_logger

logger = get_logger(__name__)

# Authorizer actions refused while running read-only queries.
_MUTATING_ACTIONS = frozenset(
    {
        sqlite3.SQLITE_INSERT,
        sqlite3.SQLITE_UPDATE,
        sqlite3.SQLITE_DELETE,
        sqlite3.SQLITE_CREATE_INDEX,
        sqlite3.SQLITE_CREATE_TABLE,
        sqlite3.SQLITE_CREATE_TEMP_INDEX,
        sqlite3.SQLITE_CREATE_TEMP_TABLE,
        sqlite3.SQLITE_CREATE_TEMP_TRIGGER,
        sqlite3.SQLITE_CREATE_TEMP_VIEW,
        sqlite3.SQLITE_CREATE_TRIGGER,
        sqlite3.SQLITE_CREATE_VIEW,
        sqlite3.SQLITE_CREATE_VTABLE,
        sqlite3.SQLITE_DROP_INDEX,
        sqlite3.SQLITE_DROP_TABLE,
        sqlite3.SQLITE_DROP_TEMP_INDEX,
        sqlite3.SQLITE_DROP_TEMP_TABLE,
        sqlite3.SQLITE_DROP_TEMP_TRIGGER,
        sqlite3.SQLITE_DROP_TEMP_VIEW,
        sqlite3.SQLITE_DROP_TRIGGER,
        sqlite3.SQLITE_DROP_VIEW,
        sqlite3.SQLITE_DROP_VTABLE,
        sqlite3.SQLITE_ALTER_TABLE,
        sqlite3.SQLITE_ATTACH,
        sqlite3.SQLITE_DETACH,
        sqlite3.SQLITE_REINDEX,
        sqlite3.SQLITE_ANALYZE,
    }
)


def _read_only_authorizer(action: int, *_: Any) -> int:
    if action in _MUTATING_ACTIONS:
        return sqlite3.SQLITE_DENY
    return sqlite3.SQLITE_OK


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of a mutating statement."""

    rowcount: int
    lastrowid: int | None


class SnapshotDatabase:
    """In-memory SQLite store persisted as a full snapshot file.

    The instance is created once by the application and shared by every
    database tool. The connection is opened lazily behind a one-time
    initialization lock. Statements run in a worker thread and are
    serialized by a connection lock, so a query's read-only authorizer never
    applies to a concurrent write and two writes cannot interleave their
    snapshot rewrites.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._conn: sqlite3.Connection | None = None
        self._open_lock = asyncio.Lock()
        self._conn_lock = asyncio.Lock()
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    async def open(self) -> sqlite3.Connection:
        """Return the live connection, loading the snapshot on first use."""
        if self._conn is not None:
            return self._conn
        async with self._open_lock:
            if self._conn is not None:
                return self._conn
            if self._closed:
                raise RuntimeError("Database has been closed")
            data = await asyncio.to_thread(self._read_snapshot)
            conn = sqlite3.connect(
                ":memory:", check_same_thread=False, isolation_level=None
            )
            conn.row_factory = sqlite3.Row
            if data:
                conn.deserialize(data)
            self._conn = conn
            logger.info(
                "database_opened",
                path=str(self.path),
                loaded_bytes=len(data),
            )
            return conn

    async def query(
        self, sql: str, params: Sequence[Any] = ()
    ) -> list[dict[str, Any]]:
        """Run a read-only statement and return every row as a dict."""
        conn = await self.open()
        async with self._conn_lock:
            return await asyncio.to_thread(_run_read_only, conn, sql, tuple(params))

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> ExecutionResult:
        """Run a mutating statement and rewrite the snapshot file."""
        conn = await self.open()
        async with self._conn_lock:
            result, data = await asyncio.to_thread(
                _run_and_serialize, conn, sql, tuple(params)
            )
            await asyncio.to_thread(self._write_snapshot, data)
        logger.info("database_persisted", path=str(self.path), bytes=len(data))
        return result

    def close(self) -> None:
        """Release the connection at shutdown."""
        self._closed = True
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None

    def _read_snapshot(self) -> bytes:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            return b""
        return self.path.read_bytes()

    def _write_snapshot(self, data: bytes) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        tmp_path.write_bytes(data)
        os.replace(tmp_path, self.path)


def _run_read_only(
    conn: sqlite3.Connection, sql: str, params: tuple[Any, ...]
) -> list[dict[str, Any]]:
    conn.set_authorizer(_read_only_authorizer)
    try:
        cursor = conn.execute(sql, params)
        try:
            rows = cursor.fetchall()
        finally:
            cursor.close()
    finally:
        conn.set_authorizer(None)
    return [dict(row) for row in rows]


def _run_and_serialize(
    conn: sqlite3.Connection, sql: str, params: tuple[Any, ...]
) -> tuple[ExecutionResult, bytes]:
    cursor = conn.execute(sql, params)
    try:
        result = ExecutionResult(rowcount=cursor.rowcount, lastrowid=cursor.lastrowid)
    finally:
        cursor.close()
    return result, conn.serialize()
