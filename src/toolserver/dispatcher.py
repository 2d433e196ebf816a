"""Route tool calls to registered handlers.

The dispatcher is the single entry point for tool invocation:
1. Look up the tool by name (unknown names fail with MethodNotFound)
2. Validate the argument object against the tool's argument model
3. Run the handler
4. Render the result as pretty-printed JSON text

The whole sequence runs inside the call logger, so rejected calls are
logged with their error just like failed handlers.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from toolserver.calllog import CallLogger
from toolserver.errors import InvalidRequestError, MethodNotFoundError, from_validation_error
from toolserver.logging import get_logger
from toolserver.registry import ToolRegistry

logger = get_logger(__name__)


def render_result(result: Any) -> str:
    """Serialize a tool result as the text payload returned to callers."""
    return json.dumps(result, indent=2, default=str, ensure_ascii=False)


class ToolDispatcher:
    """Validate and execute tool calls against a registry."""

    def __init__(self, registry: ToolRegistry, call_logger: CallLogger | None = None) -> None:
        self.registry = registry
        self.call_logger = call_logger or CallLogger()

    async def dispatch(self, name: str, arguments: dict[str, Any] | None = None) -> str:
        """Execute a tool call and return its text payload."""
        result = await self.dispatch_structured(name, arguments)
        return render_result(result)

    async def dispatch_structured(
        self, name: str, arguments: dict[str, Any] | None = None
    ) -> Any:
        """Execute a tool call and return the raw result value."""
        return await self.call_logger.around(
            name, arguments, lambda: self._invoke(name, arguments)
        )

    async def _invoke(self, name: str, arguments: dict[str, Any] | None) -> Any:
        spec = self.registry.get(name)
        if spec is None:
            raise MethodNotFoundError(f"Unknown tool: {name}")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise InvalidRequestError(f"Arguments for {name} must be an object")
        try:
            parsed = spec.args_model.model_validate(arguments)
        except ValidationError as exc:
            raise from_validation_error(name, exc) from exc
        logger.debug("tool_call_validated", tool_name=name, toolset=spec.toolset)
        return await spec.handler(parsed)
