"""Pyright toolset: run the type checker on paths under a fixed root."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import Field

from toolserver.errors import InvalidRequestError
from toolserver.logging import get_logger
from toolserver.registry import ToolArgs, ToolRegistry, ToolSpec

logger = get_logger(__name__)

TOOLSET = "pyright"


class PyrightCheckArgs(ToolArgs):
    target_path: str = Field(
        ...,
        alias="targetPath",
        min_length=1,
        description="Path to check, relative to PYRIGHT_ROOT. Example: '.' or 'src'.",
    )
    config_path: str | None = Field(
        default=None,
        alias="configPath",
        description="Optional path to pyrightconfig.json, relative to PYRIGHT_ROOT.",
    )
    python_version: str | None = Field(
        default=None,
        alias="pythonVersion",
        pattern=r"^\d+\.\d+$",
        description="Optional python version, e.g. '3.11'.",
    )


@dataclass(frozen=True)
class ProcessOutput:
    exit_code: int
    stdout: str
    stderr: str


def resolve_under_root(root: Path, relative: str, label: str = "targetPath") -> Path:
    """Resolve ``relative`` against ``root``; paths escaping the root are rejected."""
    resolved = (root / relative).resolve()
    if resolved != root and not resolved.is_relative_to(root):
        raise InvalidRequestError(f"{label} is outside PYRIGHT_ROOT")
    return resolved


def parse_pyright_output(stdout: str, stderr: str) -> Any:
    """Parse ``--outputjson`` output, keeping raw text when it is not JSON."""
    raw = stdout.strip()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return {"parseError": True, "stdout": stdout, "stderr": stderr}


class PyrightRunner:
    """Execute pyright as a subprocess constrained to ``root``."""

    def __init__(self, root: Path, binary: str = "pyright") -> None:
        self.root = root.resolve()
        self.binary = binary

    async def run(self, args: list[str], cwd: Path) -> ProcessOutput:
        try:
            process = await asyncio.create_subprocess_exec(
                self.binary,
                *args,
                cwd=str(cwd),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise InvalidRequestError(f"pyright executable not found: {self.binary}") from exc
        stdout, stderr = await process.communicate()
        return ProcessOutput(
            exit_code=process.returncode or 0,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )

    async def check(self, args: PyrightCheckArgs) -> dict[str, Any]:
        target = resolve_under_root(self.root, args.target_path)
        if not target.exists():
            raise InvalidRequestError(f"targetPath does not exist: {args.target_path}")

        pyright_args = ["--outputjson"]
        if args.config_path:
            config = resolve_under_root(self.root, args.config_path, label="configPath")
            pyright_args.extend(["--project", str(config)])
        if args.python_version:
            pyright_args.extend(["--pythonversion", args.python_version])

        if target.is_dir():
            cwd = target
        else:
            cwd = target.parent
            pyright_args.append(str(target))

        logger.info("pyright_started", checked_path=str(target), args=pyright_args)
        output = await self.run(pyright_args, cwd)
        logger.info("pyright_finished", checked_path=str(target), exit_code=output.exit_code)

        payload: dict[str, Any] = {
            "pyrightRoot": str(self.root),
            "checkedPath": str(target),
            "exitCode": output.exit_code,
        }
        if output.stderr:
            payload["stderr"] = output.stderr
        payload["result"] = parse_pyright_output(output.stdout, output.stderr)
        return payload


def register(registry: ToolRegistry, root: Path, binary: str = "pyright") -> None:
    """Register ``pyright_check`` constrained to ``root``."""
    runner = PyrightRunner(root, binary)
    registry.register(
        ToolSpec(
            name="pyright_check",
            description=(
                "Run Pyright type checking for a project/folder. "
                "Returns JSON diagnostics (read-only)."
            ),
            args_model=PyrightCheckArgs,
            handler=runner.check,
            toolset=TOOLSET,
        )
    )
