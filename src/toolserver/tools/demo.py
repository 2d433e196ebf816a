"""Demo toolset: users, server stats, a calculator, and two resources."""

from __future__ import annotations

import json
import math
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import Field

from toolserver import __version__
from toolserver.errors import InvalidRequestError
from toolserver.models import ResourceDescriptor
from toolserver.registry import NoArgs, ToolArgs, ToolRegistry, ToolSpec

TOOLSET = "demo"

USERS: tuple[dict[str, Any], ...] = (
    {"id": 1, "name": "Ahmet", "role": "developer"},
    {"id": 2, "name": "Mehmet", "role": "designer"},
    {"id": 3, "name": "Ayse", "role": "manager"},
)


class UserIdArgs(ToolArgs):
    id: int = Field(..., description="User ID")


class CalculateArgs(ToolArgs):
    operation: Literal["add", "subtract", "multiply", "divide"] = Field(
        ..., description="Operation to apply"
    )
    a: int | float = Field(..., description="First operand")
    b: int | float = Field(..., description="Second operand")


def list_users() -> list[dict[str, Any]]:
    return [dict(user) for user in USERS]


def server_stats() -> dict[str, Any]:
    """Return user count, version and a fresh server timestamp."""
    return {
        "totalUsers": len(USERS),
        "version": __version__,
        "serverTime": datetime.now(UTC).isoformat(timespec="milliseconds"),
    }


def calculate(operation: str, a: int | float, b: int | float) -> int | float:
    """Apply an arithmetic operation.

    Division by zero and results outside the float range are reported as
    InvalidRequest rather than numeric exceptions or non-finite values.
    Exact integer division keeps an integer result.
    """
    if operation == "divide" and b == 0:
        raise InvalidRequestError("Division by zero")
    try:
        result = _apply(operation, a, b)
    except OverflowError as exc:
        raise InvalidRequestError(f"Result of {operation} is out of range") from exc
    if isinstance(result, float) and not math.isfinite(result):
        raise InvalidRequestError(f"Result of {operation} is not a finite number")
    return result


def _apply(operation: str, a: int | float, b: int | float) -> int | float:
    if operation == "add":
        return a + b
    if operation == "subtract":
        return a - b
    if operation == "multiply":
        return a * b
    if operation == "divide":
        if isinstance(a, int) and isinstance(b, int) and a % b == 0:
            return a // b
        return a / b
    raise InvalidRequestError(f"Unknown operation: {operation}")


async def _get_users(_: NoArgs) -> list[dict[str, Any]]:
    return list_users()


async def _get_user_by_id(args: UserIdArgs) -> dict[str, Any]:
    for user in USERS:
        if user["id"] == args.id:
            return dict(user)
    raise InvalidRequestError(f"User ID {args.id} not found")


async def _get_server_stats(_: NoArgs) -> dict[str, Any]:
    return server_stats()


async def _calculate(args: CalculateArgs) -> dict[str, Any]:
    result = calculate(args.operation, args.a, args.b)
    return {"operation": args.operation, "a": args.a, "b": args.b, "result": result}


def register(registry: ToolRegistry) -> None:
    """Register the demo tools and the users/stats resources."""
    registry.register(
        ToolSpec(
            name="get_users",
            description="List all users",
            args_model=NoArgs,
            handler=_get_users,
            toolset=TOOLSET,
        )
    )
    registry.register(
        ToolSpec(
            name="get_user_by_id",
            description="Get a user by ID",
            args_model=UserIdArgs,
            handler=_get_user_by_id,
            toolset=TOOLSET,
        )
    )
    registry.register(
        ToolSpec(
            name="get_server_stats",
            description="Get server statistics",
            args_model=NoArgs,
            handler=_get_server_stats,
            toolset=TOOLSET,
        )
    )
    registry.register(
        ToolSpec(
            name="calculate",
            description="Perform a basic arithmetic operation",
            args_model=CalculateArgs,
            handler=_calculate,
            toolset=TOOLSET,
        )
    )

    registry.add_resource(
        ResourceDescriptor(
            uri="data://users",
            name="User list",
            description="All users",
        ),
        lambda: json.dumps(list_users(), indent=2),
    )
    registry.add_resource(
        ResourceDescriptor(
            uri="data://stats",
            name="Server statistics",
            description="Live server statistics",
        ),
        lambda: json.dumps(server_stats(), indent=2),
    )
