"""Tool groups and registry assembly."""

from __future__ import annotations

from toolserver.config import ServerSettings
from toolserver.registry import ToolRegistry
from toolserver.store import SnapshotDatabase
from toolserver.tools import database, demo, erp, pyright

__all__ = ["build_registry"]


def build_registry(settings: ServerSettings, db: SnapshotDatabase) -> ToolRegistry:
    """Register every enabled toolset, in the configured order."""
    registry = ToolRegistry()
    for toolset in settings.toolsets:
        if toolset == "demo":
            demo.register(registry)
        elif toolset == "erp":
            erp.register(registry)
        elif toolset == "db":
            database.register(registry, db)
        elif toolset == "pyright":
            pyright.register(registry, settings.pyright_root, settings.pyright_bin)
    return registry
