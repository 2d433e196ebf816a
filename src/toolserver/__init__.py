"""mcp-toolserver: a small MCP tool server.

The server exposes a fixed catalog of tools over the Model Context Protocol
(SSE transport) and a plain JSON HTTP surface.

Toolsets:
    - demo: users, server stats and a calculator
    - erp: read-only lookups over mock ERP records
    - db: an embedded single-file SQLite database with snapshot persistence
    - pyright: a wrapper around the pyright static-analysis CLI

Example:
    >>> from toolserver.client import ToolServerClient
    >>> async with ToolServerClient("http://localhost:8080") as client:
    ...     result = await client.call_tool(
    ...         "calculate",
    ...         {"operation": "divide", "a": 10, "b": 2},
    ...     )
"""

__all__ = ["__version__"]

__version__ = "1.0.0"
