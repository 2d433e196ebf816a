"""Tool error kinds surfaced to callers.

Only two kinds exist. ``InvalidRequest`` covers bad input, policy violations
and lookups that find nothing; ``MethodNotFound`` covers unknown tools and
operations. Both carry a human-readable message and are never retried.
"""

from __future__ import annotations

from typing import ClassVar, Literal

from mcp.shared.exceptions import McpError
from mcp.types import INVALID_REQUEST, METHOD_NOT_FOUND, ErrorData
from pydantic import ValidationError

ErrorKind = Literal["InvalidRequest", "MethodNotFound"]


class ToolError(Exception):
    """Base class for errors returned to the requesting client."""

    kind: ClassVar[ErrorKind]
    code: ClassVar[int]

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_mcp_error(self) -> McpError:
        """Convert to the protocol SDK's error type."""
        return McpError(ErrorData(code=self.code, message=self.message))


class InvalidRequestError(ToolError):
    """Bad input, policy violation, or not-found lookup."""

    kind = "InvalidRequest"
    code = INVALID_REQUEST


class MethodNotFoundError(ToolError):
    """Unknown tool or operation."""

    kind = "MethodNotFound"
    code = METHOD_NOT_FOUND


def from_validation_error(tool_name: str, exc: ValidationError) -> InvalidRequestError:
    """Summarize a pydantic validation failure as an InvalidRequest."""
    problems: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "arguments"
        message = str(error.get("msg", "invalid value"))
        # Custom validators raise ValueError; pydantic prefixes the message.
        message = message.removeprefix("Value error, ")
        problems.append(f"{location}: {message}")
    summary = "; ".join(problems) or "invalid arguments"
    return InvalidRequestError(f"Invalid arguments for {tool_name}: {summary}")
