"""MCP protocol handlers over the tool registry and dispatcher."""

from __future__ import annotations

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from pydantic import AnyUrl

from toolserver import __version__
from toolserver.dispatcher import ToolDispatcher
from toolserver.errors import ToolError
from toolserver.logging import get_logger

logger = get_logger(__name__)

SERVER_NAME = "mcp-toolserver"


def build_mcp_server(dispatcher: ToolDispatcher) -> Server:
    """Create a low-level MCP server exposing the dispatcher's registry."""
    registry = dispatcher.registry
    server: Server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [
            types.Tool(
                name=descriptor.name,
                description=descriptor.description,
                inputSchema=descriptor.input_schema,
            )
            for descriptor in registry.list()
        ]

    async def call_tool(request: types.CallToolRequest) -> types.ServerResult:
        # Registered directly: ToolError must reach the session as a JSON-RPC
        # error, and the dispatcher is the only argument validator.
        name = request.params.name
        logger.info("tool_call_received", tool_name=name, transport="mcp")
        try:
            text = await dispatcher.dispatch(name, request.params.arguments)
        except ToolError as exc:
            raise exc.to_mcp_error() from exc
        except Exception as exc:
            logger.error("tool_call_failed", tool_name=name, error=str(exc), exc_info=True)
            return types.ServerResult(
                types.CallToolResult(
                    content=[
                        types.TextContent(type="text", text=f"Tool execution failed: {exc}")
                    ],
                    isError=True,
                )
            )
        return types.ServerResult(
            types.CallToolResult(content=[types.TextContent(type="text", text=text)])
        )

    server.request_handlers[types.CallToolRequest] = call_tool

    @server.list_resources()
    async def list_resources() -> list[types.Resource]:
        return [
            types.Resource(
                uri=AnyUrl(descriptor.uri),
                name=descriptor.name,
                mimeType=descriptor.mime_type,
                description=descriptor.description,
            )
            for descriptor in registry.list_resources()
        ]

    @server.read_resource()
    async def read_resource(uri: AnyUrl) -> list[ReadResourceContents]:
        try:
            text = registry.read_resource(str(uri))
        except ToolError as exc:
            raise exc.to_mcp_error() from exc
        return [ReadResourceContents(content=text, mime_type="application/json")]

    return server
