"""Database toolset backed by the embedded snapshot store.

Statement policy is enforced by the argument models before the store is
touched: ``db_create`` only accepts CREATE statements and ``db_query`` only
accepts SELECT/WITH statements. Identifiers that are interpolated into SQL
are reduced to ``[A-Za-z0-9_]``; values are always bound parameters.
"""

from __future__ import annotations

import re
import sqlite3
from collections.abc import Awaitable
from typing import Any, TypeVar

from pydantic import Field, field_validator

from toolserver.errors import InvalidRequestError
from toolserver.registry import NoArgs, ToolArgs, ToolRegistry, ToolSpec
from toolserver.store import SnapshotDatabase

TOOLSET = "db"

_IDENTIFIER_STRIP_RE = re.compile(r"[^a-zA-Z0-9_]")

T = TypeVar("T")


def sanitize_identifier(name: str) -> str:
    """Strip every character outside ``[a-zA-Z0-9_]``."""
    return _IDENTIFIER_STRIP_RE.sub("", name)


def _statement_head(sql: str) -> str:
    return sql.strip().lower()


class CreateArgs(ToolArgs):
    schema_sql: str = Field(..., description="CREATE statement, e.g. CREATE TABLE t(x INTEGER)")

    @field_validator("schema_sql")
    @classmethod
    def validate_create(cls, value: str) -> str:
        if not _statement_head(value).startswith("create"):
            raise ValueError("only CREATE statements are allowed")
        return value


class QueryArgs(ToolArgs):
    sql: str = Field(..., description="SELECT or WITH statement")
    params: list[Any] = Field(default_factory=list, description="Positional parameters")

    @field_validator("sql")
    @classmethod
    def validate_read_only(cls, value: str) -> str:
        head = _statement_head(value)
        if not (head.startswith("select") or head.startswith("with")):
            raise ValueError("only SELECT or WITH statements are allowed")
        return value


class InsertArgs(ToolArgs):
    table: str = Field(..., description="Target table name")
    row: dict[str, Any] = Field(..., description="Column name to value mapping")

    @field_validator("row")
    @classmethod
    def validate_row(cls, value: dict[str, Any]) -> dict[str, Any]:
        if not value:
            raise ValueError("row must contain at least one column")
        return value


class TableArgs(ToolArgs):
    table: str = Field(..., description="Table name")


async def _sqlite_guard(awaitable: Awaitable[T]) -> T:
    """Report statement failures (bad SQL, missing table) as InvalidRequest."""
    try:
        return await awaitable
    except sqlite3.Error as exc:
        raise InvalidRequestError(f"SQLite error: {exc}") from exc


def _require_identifier(raw: str, label: str) -> str:
    name = sanitize_identifier(raw)
    if not name:
        raise InvalidRequestError(f"Invalid {label}: {raw!r}")
    return name


class DatabaseTools:
    """Tool handlers bound to one database instance."""

    def __init__(self, database: SnapshotDatabase) -> None:
        self.database = database

    async def create(self, args: CreateArgs) -> dict[str, Any]:
        await _sqlite_guard(self.database.execute(args.schema_sql))
        return {"status": "ok", "schema_sql": args.schema_sql}

    async def query(self, args: QueryArgs) -> list[dict[str, Any]]:
        return await _sqlite_guard(self.database.query(args.sql, args.params))

    async def insert(self, args: InsertArgs) -> dict[str, Any]:
        table = _require_identifier(args.table, "table name")
        columns: list[str] = []
        for raw_column in args.row:
            column = _require_identifier(raw_column, "column name")
            if column in columns:
                raise InvalidRequestError(f"Duplicate column after sanitizing: {column}")
            columns.append(column)
        placeholders = ", ".join("?" for _ in columns)
        column_list = ", ".join(f'"{column}"' for column in columns)
        sql = f'INSERT INTO "{table}" ({column_list}) VALUES ({placeholders})'
        result = await _sqlite_guard(
            self.database.execute(sql, list(args.row.values()))
        )
        return {"table": table, "inserted_id": result.lastrowid}

    async def list_tables(self, _: NoArgs) -> list[dict[str, Any]]:
        return await _sqlite_guard(
            self.database.query(
                "SELECT name FROM sqlite_master "
                "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' "
                "ORDER BY name"
            )
        )

    async def describe_table(self, args: TableArgs) -> list[dict[str, Any]]:
        table = _require_identifier(args.table, "table name")
        columns = await _sqlite_guard(
            self.database.query(f'PRAGMA table_info("{table}")')
        )
        if not columns:
            raise InvalidRequestError(f"Table {table} not found")
        return columns


def register(registry: ToolRegistry, database: SnapshotDatabase) -> None:
    """Register the database tools against ``database``."""
    tools = DatabaseTools(database)
    specs = (
        ToolSpec(
            name="db_create",
            description="Execute a CREATE statement and persist the database",
            args_model=CreateArgs,
            handler=tools.create,
            toolset=TOOLSET,
        ),
        ToolSpec(
            name="db_query",
            description="Run a read-only SELECT/WITH query with positional parameters",
            args_model=QueryArgs,
            handler=tools.query,
            toolset=TOOLSET,
        ),
        ToolSpec(
            name="db_insert",
            description="Insert one row into a table and persist the database",
            args_model=InsertArgs,
            handler=tools.insert,
            toolset=TOOLSET,
        ),
        ToolSpec(
            name="db_list_tables",
            description="List user tables in the database",
            args_model=NoArgs,
            handler=tools.list_tables,
            toolset=TOOLSET,
        ),
        ToolSpec(
            name="db_describe_table",
            description="Show the column layout of a table",
            args_model=TableArgs,
            handler=tools.describe_table,
            toolset=TOOLSET,
        ),
    )
    for spec in specs:
        registry.register(spec)
