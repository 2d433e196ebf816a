"""Per-call timing and outcome logging.

Every dispatched call produces exactly one JSON line. When a log file is
configured the line is appended to it; when no file is configured, or the
append fails, the line goes to the process console through structlog.
"""

from __future__ import annotations

import asyncio
import json
import time
from collections.abc import Awaitable, Callable
from contextlib import suppress
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, TypeVar

from toolserver.logging import get_logger
from toolserver.models import CallLogEntry

logger = get_logger(__name__)

T = TypeVar("T")


def snapshot_arguments(arguments: dict[str, Any] | None) -> dict[str, Any]:
    """Return a JSON-safe deep copy of call arguments."""
    if not arguments:
        return {}
    try:
        copied = json.loads(json.dumps(arguments, default=str))
    except (TypeError, ValueError):
        return {"_unserializable": repr(arguments)}
    return copied if isinstance(copied, dict) else {"_value": copied}


class CallLogger:
    """Wrap tool calls with timing and structured outcome logging."""

    def __init__(self, log_file: Path | str | None = None) -> None:
        self.log_file = Path(log_file) if log_file else None
        self._file_lock = asyncio.Lock()

    async def around(
        self,
        name: str,
        arguments: dict[str, Any] | None,
        fn: Callable[[], Awaitable[T]],
    ) -> T:
        """Run ``fn`` and log its outcome; failures are re-raised unchanged."""
        ts = datetime.now(UTC).isoformat()
        args_snapshot = snapshot_arguments(arguments)
        start = time.perf_counter()
        try:
            result = await fn()
        except Exception as exc:
            await self.write(
                CallLogEntry(
                    ts=ts,
                    tool=name,
                    status="error",
                    duration_ms=_elapsed_ms(start),
                    args=args_snapshot,
                    error=str(exc) or exc.__class__.__name__,
                )
            )
            raise
        await self.write(
            CallLogEntry(
                ts=ts,
                tool=name,
                status="ok",
                duration_ms=_elapsed_ms(start),
                args=args_snapshot,
            )
        )
        return result

    async def write(self, entry: CallLogEntry) -> None:
        """Append an entry to the file sink, falling back to the console."""
        line = entry.model_dump_json(exclude_none=True)
        log_file = self.log_file
        if log_file is not None:
            try:
                async with self._file_lock:
                    await asyncio.to_thread(_append_line, log_file, line)
                return
            except Exception as exc:
                with suppress(Exception):
                    logger.warning(
                        "call_log_file_unavailable",
                        path=str(log_file),
                        error=str(exc),
                    )
        with suppress(Exception):
            logger.info("tool_call", **entry.model_dump(exclude_none=True))


def _append_line(path: Path, line: str) -> None:
    with path.open("a", encoding="utf-8") as handle:
        handle.write(line + "\n")


def _elapsed_ms(start: float) -> int:
    return max(0, int((time.perf_counter() - start) * 1000))
