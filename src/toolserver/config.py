"""Environment-driven server settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ALL_TOOLSETS: tuple[str, ...] = ("demo", "erp", "db", "pyright")

DEFAULT_PORT = 8080
DEFAULT_DB_PATH = "./data/erp.db"


def _get_port() -> int:
    raw = os.getenv("PORT", str(DEFAULT_PORT))
    try:
        return int(raw)
    except ValueError:
        return DEFAULT_PORT


def _get_host() -> str:
    return os.getenv("TOOLSERVER_HOST", "0.0.0.0")


def _get_log_level() -> str:
    return os.getenv("TOOLSERVER_LOG_LEVEL", "INFO")


def _get_log_file() -> Path | None:
    value = os.getenv("TOOLSERVER_LOG_FILE", "").strip()
    if not value:
        return None
    return Path(value)


def _get_db_path() -> Path:
    value = os.getenv("TOOLSERVER_DB_PATH", "").strip()
    return Path(value or DEFAULT_DB_PATH)


def _get_pyright_root() -> Path:
    value = os.getenv("PYRIGHT_ROOT", "").strip()
    return Path(value or os.getcwd()).resolve()


def _get_pyright_bin() -> str:
    return os.getenv("PYRIGHT_BIN", "").strip() or "pyright"


def _get_toolsets() -> tuple[str, ...]:
    raw = os.getenv("TOOLSERVER_TOOLSETS", "")
    return parse_toolsets(raw)


def parse_toolsets(raw: str) -> tuple[str, ...]:
    """Parse a comma-separated toolset list, keeping known names in order."""
    requested = [part.strip().lower() for part in raw.split(",") if part.strip()]
    seen: set[str] = set()
    ordered: list[str] = []
    for name in requested:
        if name not in ALL_TOOLSETS or name in seen:
            continue
        seen.add(name)
        ordered.append(name)
    if not ordered:
        return ALL_TOOLSETS
    return tuple(ordered)


@dataclass(frozen=True)
class ServerSettings:
    """Resolved process configuration.

    Attributes:
        host: Bind address for the HTTP server.
        port: Listen port.
        log_level: Log level name for structlog/stdlib logging.
        log_file: Optional JSONL destination for per-call log entries.
        db_path: Snapshot file backing the embedded database.
        pyright_root: Directory that pyright_check paths must stay under.
        pyright_bin: Executable used by pyright_check.
        toolsets: Enabled tool groups, in registration order.
    """

    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    log_level: str = "INFO"
    log_file: Path | None = None
    db_path: Path = Path(DEFAULT_DB_PATH)
    pyright_root: Path = Path(".").resolve()
    pyright_bin: str = "pyright"
    toolsets: tuple[str, ...] = ALL_TOOLSETS

    @classmethod
    def from_env(cls) -> ServerSettings:
        """Build settings from the current environment."""
        return cls(
            host=_get_host(),
            port=_get_port(),
            log_level=_get_log_level(),
            log_file=_get_log_file(),
            db_path=_get_db_path(),
            pyright_root=_get_pyright_root(),
            pyright_bin=_get_pyright_bin(),
            toolsets=_get_toolsets(),
        )
