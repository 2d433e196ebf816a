"""Pydantic models for the tool server.

This module defines the data structures shared across the server:
- Tool and resource descriptors advertised to clients
- Per-call log entries
- Request and response bodies for the JSON HTTP surface
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ToolDescriptor(BaseModel):
    """Capability-discovery entry for one tool.

    Attributes:
        name: Unique tool name within the registry.
        description: Human-readable description.
        input_schema: JSON schema of the tool's argument object.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Unique tool name")
    description: str = Field(..., description="What the tool does")
    input_schema: dict[str, Any] = Field(..., description="JSON schema for arguments")


class ResourceDescriptor(BaseModel):
    """Static read-only resource advertised to clients."""

    model_config = ConfigDict(frozen=True)

    uri: str
    name: str
    mime_type: str = "application/json"
    description: str


class CallLogEntry(BaseModel):
    """One line of the per-call log.

    Created once per dispatched call and appended to the configured sink.
    The system never reads entries back.

    Attributes:
        ts: ISO-8601 UTC timestamp of the call start.
        tool: Tool name as requested by the caller.
        status: ``ok`` or ``error``.
        duration_ms: Wall-clock duration in milliseconds.
        args: Snapshot of the argument object taken at call start.
        error: Failure message, present only when ``status`` is ``error``.
    """

    model_config = ConfigDict(frozen=True)

    ts: str
    tool: str
    status: Literal["ok", "error"]
    duration_ms: int = Field(..., ge=0)
    args: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None


class ToolCallRequest(BaseModel):
    """Tool call body for ``POST /tools/call``.

    Example:
        ```python
        request = ToolCallRequest(
            tool_name="calculate",
            arguments={"operation": "add", "a": 1, "b": 2},
        )
        ```
    """

    tool_name: str = Field(..., description="Tool name to invoke")
    arguments: dict[str, Any] = Field(
        default_factory=dict, description="Tool arguments"
    )

    @field_validator("tool_name")
    @classmethod
    def validate_tool_name(cls, value: str) -> str:
        """Ensure tool names are non-empty and bounded in length."""
        if not value or not value.strip():
            raise ValueError("tool_name must be non-empty")
        if len(value) > 128:
            raise ValueError("tool_name too long (max 128 characters)")
        return value


class ToolCallResponse(BaseModel):
    """Response body for ``POST /tools/call``.

    Attributes:
        success: Whether the tool call succeeded.
        result: Tool output if successful.
        error: Error message if the call failed.
        error_kind: ``InvalidRequest`` or ``MethodNotFound`` for tool errors.
    """

    success: bool = Field(..., description="Whether the call succeeded")
    result: Any = Field(default=None, description="Tool output if successful")
    error: str | None = Field(default=None, description="Error message if failed")
    error_kind: str | None = Field(default=None, description="Error kind if failed")
