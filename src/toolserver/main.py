"""FastAPI entrypoint for the tool server.

Key endpoints:
    - GET /sse: Open an MCP session over server-sent events
    - POST /message/?session_id=...: Relay client messages to that session
    - GET /tools/list: Tool catalog with input schemas
    - POST /tools/call: Execute a tool call over plain JSON
    - GET /health: Liveness check
    - GET /: Server identity and endpoint map

Each SSE connection gets its own session inside the transport, so a new
client never takes over the message stream of an existing one.
"""

from __future__ import annotations

import json
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from mcp.server.lowlevel import Server
from mcp.server.sse import SseServerTransport
from starlette.types import Receive, Scope, Send

from toolserver import __version__
from toolserver.calllog import CallLogger
from toolserver.config import ServerSettings
from toolserver.dispatcher import ToolDispatcher
from toolserver.errors import ToolError
from toolserver.logging import (
    bind_correlation_id,
    clear_logging_context,
    configure_logging,
    get_logger,
)
from toolserver.mcp_server import SERVER_NAME, build_mcp_server
from toolserver.models import ToolCallRequest, ToolCallResponse
from toolserver.store import SnapshotDatabase
from toolserver.tools import build_registry

logger = get_logger(__name__)

# Maximum request body size (1MB)
MAX_REQUEST_SIZE = 1 * 1024 * 1024

SSE_PATH = "/sse"
MESSAGE_PATH = "/message/"

_ERROR_STATUS = {"InvalidRequest": 400, "MethodNotFound": 404}


class SseEndpoint:
    """Raw ASGI endpoint that runs one MCP session per SSE connection."""

    def __init__(self, transport: SseServerTransport, server: Server) -> None:
        self.transport = transport
        self.server = server

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        client = scope.get("client")
        logger.info("sse_session_started", client=str(client) if client else None)
        async with self.transport.connect_sse(scope, receive, send) as (
            read_stream,
            write_stream,
        ):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )
        logger.info("sse_session_closed", client=str(client) if client else None)


def create_app(
    *,
    settings: ServerSettings | None = None,
    database: SnapshotDatabase | None = None,
    call_logger: CallLogger | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or ServerSettings.from_env()
    configure_logging(settings.log_level)

    database = database or SnapshotDatabase(settings.db_path)
    registry = build_registry(settings, database)
    dispatcher = ToolDispatcher(registry, call_logger or CallLogger(settings.log_file))
    mcp_server = build_mcp_server(dispatcher)
    sse_transport = SseServerTransport(MESSAGE_PATH)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "server_started",
            toolsets=list(settings.toolsets),
            tools=len(registry),
            db_path=str(settings.db_path),
            log_file=str(settings.log_file) if settings.log_file else None,
        )
        yield
        app.state.database.close()

    app = FastAPI(
        title=SERVER_NAME,
        version=__version__,
        description="MCP tool server with demo, ERP, database and pyright tools",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.registry = registry
    app.state.dispatcher = dispatcher
    app.state.mcp_server = mcp_server

    app.add_route(SSE_PATH, SseEndpoint(sse_transport, mcp_server), methods=["GET"])
    app.mount(MESSAGE_PATH.rstrip("/"), app=sse_transport.handle_post_message)

    @app.middleware("http")
    async def request_size_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Reject requests that exceed the maximum allowed size."""
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > MAX_REQUEST_SIZE:
            return JSONResponse(
                {"error": "Request body too large"},
                status_code=413,
            )
        return await call_next(request)

    @app.middleware("http")
    async def correlation_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Add correlation ID to requests for log correlation."""
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        bind_correlation_id(correlation_id)
        try:
            response = await call_next(request)
        finally:
            clear_logging_context()
        response.headers["X-Correlation-ID"] = correlation_id
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Return validation errors with actionable guidance."""
        hint = "Review request payload and required fields."
        example: dict[str, Any] | None = None
        if request.url.path == "/tools/call":
            hint = "Include tool_name and an arguments object."
            example = {
                "tool_name": "calculate",
                "arguments": {"operation": "add", "a": 1, "b": 2},
            }
        detail = json.loads(json.dumps(exc.errors(), default=str))
        payload: dict[str, Any] = {"error": "Invalid request", "hint": hint, "detail": detail}
        if example is not None:
            payload["example"] = example
        return JSONResponse(payload, status_code=422)

    @app.get("/health")
    async def health() -> JSONResponse:
        """Liveness check."""
        return JSONResponse(
            {"status": "ok", "timestamp": datetime.now(UTC).isoformat()}
        )

    @app.get("/")
    async def root() -> JSONResponse:
        """Server identity and endpoint map."""
        return JSONResponse(
            {
                "name": SERVER_NAME,
                "version": app.version,
                "endpoints": {
                    "sse": SSE_PATH,
                    "message": MESSAGE_PATH,
                    "health": "/health",
                    "tools": "/tools/list",
                },
                "toolsets": list(settings.toolsets),
            }
        )

    @app.get("/tools/list")
    async def list_tools() -> JSONResponse:
        """List the tool catalog with input schemas."""
        tools = [
            descriptor.model_dump(mode="json")
            for descriptor in app.state.registry.list()
        ]
        resources = [
            descriptor.model_dump(mode="json")
            for descriptor in app.state.registry.list_resources()
        ]
        return JSONResponse({"tools": tools, "resources": resources})

    @app.post("/tools/call", response_model=ToolCallResponse)
    async def tools_call(request: ToolCallRequest) -> JSONResponse:
        """Validate and execute a tool call."""
        logger.info("tool_call_received", tool_name=request.tool_name, transport="http")
        try:
            result = await app.state.dispatcher.dispatch_structured(
                request.tool_name, request.arguments
            )
        except ToolError as exc:
            response = ToolCallResponse(
                success=False, error=exc.message, error_kind=exc.kind
            )
            return JSONResponse(
                response.model_dump(mode="json"),
                status_code=_ERROR_STATUS[exc.kind],
            )
        except Exception as exc:
            logger.error(
                "tool_call_failed",
                tool_name=request.tool_name,
                error=str(exc),
                exc_info=True,
            )
            response = ToolCallResponse(success=False, error=f"Tool execution failed: {exc}")
            return JSONResponse(response.model_dump(mode="json"), status_code=500)
        response = ToolCallResponse(success=True, result=result)
        return JSONResponse(response.model_dump(mode="json"))

    return app


app = create_app()
