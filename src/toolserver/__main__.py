"""Tool server CLI entrypoint.

Usage:
    python -m toolserver                     # Start the server
    python -m toolserver --list-tools        # Print the tool catalog
    python -m toolserver --call calculate --args '{"operation": "add", "a": 1, "b": 2}'
    python -m toolserver --self-check        # Probe a running server
    python -m toolserver --version           # Print version
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from rich.console import Console
from rich.table import Table

from toolserver.calllog import CallLogger
from toolserver.config import ServerSettings
from toolserver.dispatcher import ToolDispatcher
from toolserver.errors import ToolError
from toolserver.logging import configure_logging
from toolserver.store import SnapshotDatabase
from toolserver.tools import build_registry


def print_tool_catalog(settings: ServerSettings, console: Console | None = None) -> None:
    """Render the enabled tools as a table."""
    console = console or Console()
    registry = build_registry(settings, SnapshotDatabase(settings.db_path))
    table = Table(title="Tools")
    table.add_column("Name", style="bold")
    table.add_column("Description")
    table.add_column("Required")
    for descriptor in registry.list():
        required = descriptor.input_schema.get("required", [])
        table.add_row(descriptor.name, descriptor.description, ", ".join(required) or "-")
    console.print(table)


async def run_local_call(
    settings: ServerSettings, tool_name: str, arguments: dict[str, Any]
) -> int:
    """Dispatch one call in-process and print its text payload."""
    database = SnapshotDatabase(settings.db_path)
    dispatcher = ToolDispatcher(
        build_registry(settings, database), CallLogger(settings.log_file)
    )
    try:
        text = await dispatcher.dispatch(tool_name, arguments)
    except ToolError as exc:
        print(f"{exc.kind}: {exc.message}", file=sys.stderr)
        return 1
    finally:
        database.close()
    print(text)
    return 0


def run_self_check(base_url: str) -> int:
    """Probe a running server's health endpoint."""
    import httpx

    try:
        with httpx.Client(timeout=2.0) as client:
            response = client.get(f"{base_url.rstrip('/')}/health")
    except httpx.HTTPError as exc:
        print(json.dumps({"status": "fail", "detail": str(exc)}, indent=2))
        return 1
    ok = response.status_code == 200
    detail = response.json() if ok else f"HTTP {response.status_code}"
    print(json.dumps({"status": "pass" if ok else "fail", "detail": detail}, indent=2))
    return 0 if ok else 1


def _parse_arguments(raw: str, parser: argparse.ArgumentParser) -> dict[str, Any]:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        parser.error(f"--args must be valid JSON: {exc}")
    if not isinstance(parsed, dict):
        parser.error("--args must be a JSON object")
    return parsed


def main() -> None:
    """CLI entrypoint."""
    from toolserver import __version__

    settings = ServerSettings.from_env()
    configure_logging(settings.log_level)
    parser = argparse.ArgumentParser(
        prog="toolserver",
        description="MCP tool server with demo, ERP, database and pyright tools",
    )
    parser.add_argument(
        "--version", "-v", action="version", version=f"mcp-toolserver {__version__}"
    )
    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument(
        "--list-tools", action="store_true", help="Print the enabled tool catalog"
    )
    mode_group.add_argument("--call", metavar="TOOL", help="Run one tool call locally")
    mode_group.add_argument(
        "--self-check", action="store_true", help="Check a running server's health"
    )
    parser.add_argument(
        "--args",
        default="{}",
        help="JSON object of arguments for --call (default: {})",
    )
    parser.add_argument(
        "--base-url",
        default=f"http://localhost:{settings.port}",
        help="Server URL for --self-check",
    )
    parser.add_argument(
        "--host", default=settings.host, help=f"Host to bind to (default: {settings.host})"
    )
    parser.add_argument(
        "--port", type=int, default=settings.port, help=f"Port to bind to (default: {settings.port})"
    )

    args = parser.parse_args()

    if args.list_tools:
        print_tool_catalog(settings)
    elif args.call:
        arguments = _parse_arguments(args.args, parser)
        sys.exit(asyncio.run(run_local_call(settings, args.call, arguments)))
    elif args.self_check:
        sys.exit(run_self_check(args.base_url))
    else:
        import uvicorn

        uvicorn.run(
            "toolserver.main:app",
            host=args.host,
            port=args.port,
            reload=False,
        )


if __name__ == "__main__":
    main()
