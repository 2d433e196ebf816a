"""HTTP client for the tool server's JSON surface."""

from __future__ import annotations

import os
from collections.abc import Mapping
from types import TracebackType
from typing import Any, cast

import httpx


class ToolServerAPIError(RuntimeError):
    """Structured API error raised for non-2xx responses."""

    def __init__(
        self,
        *,
        method: str,
        path: str,
        status_code: int,
        payload: dict[str, Any] | str | None,
    ) -> None:
        self.method = method
        self.path = path
        self.status_code = status_code
        self.payload = payload
        message = f"{method} {path} failed with status {status_code}"
        if isinstance(payload, dict) and isinstance(payload.get("error"), str):
            message = f"{message}: {payload['error']}"
        elif isinstance(payload, dict) and isinstance(payload.get("detail"), str):
            message = f"{message}: {payload['detail']}"
        elif isinstance(payload, str) and payload:
            message = f"{message}: {payload}"
        super().__init__(message)

    @property
    def error_kind(self) -> str | None:
        if isinstance(self.payload, dict):
            kind = self.payload.get("error_kind")
            return kind if isinstance(kind, str) else None
        return None


class ToolServerClient:
    """Async client for the tool server HTTP API."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._headers: dict[str, str] = dict(headers or {})
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    @classmethod
    def from_env(cls, *, base_url: str | None = None) -> ToolServerClient:
        """Create a client from TOOLSERVER_URL, defaulting to localhost."""
        resolved = (base_url or os.getenv("TOOLSERVER_URL") or "http://localhost:8080").strip()
        return cls(resolved)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        response = await self._client.request(
            method, path, json=json_body, headers=self._headers
        )
        if response.status_code >= 400:
            payload: dict[str, Any] | str | None
            try:
                parsed = response.json()
                payload = parsed if isinstance(parsed, dict) else str(parsed)
            except ValueError:
                payload = response.text or None
            raise ToolServerAPIError(
                method=method,
                path=path,
                status_code=response.status_code,
                payload=payload,
            )
        return cast(dict[str, Any], response.json())

    async def health(self) -> dict[str, Any]:
        return await self._request("GET", "/health")

    async def list_tools(self) -> list[dict[str, Any]]:
        payload = await self._request("GET", "/tools/list")
        return cast(list[dict[str, Any]], payload.get("tools", []))

    async def call_tool(
        self, tool_name: str, arguments: dict[str, Any] | None = None
    ) -> Any:
        """Call a tool and return its result; tool errors raise ToolServerAPIError."""
        payload = await self._request(
            "POST",
            "/tools/call",
            json_body={"tool_name": tool_name, "arguments": arguments or {}},
        )
        return payload.get("result")

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> ToolServerClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
