"""Tool and resource catalog.

Every tool declares a pydantic argument model. The advertised input schema is
generated from that model and the dispatcher validates calls against the same
model, so the declared schema is the contract that is actually enforced.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict

from toolserver.errors import InvalidRequestError
from toolserver.models import ResourceDescriptor, ToolDescriptor

ToolHandler = Callable[[Any], Awaitable[Any]]
ResourceReader = Callable[[], str]


class ToolArgs(BaseModel):
    """Base class for tool argument models."""

    model_config = ConfigDict(strict=True, populate_by_name=True)


class NoArgs(ToolArgs):
    """Argument model for tools that take no parameters."""


def input_schema_for(model: type[BaseModel]) -> dict[str, Any]:
    """Return the JSON schema advertised for an argument model."""
    schema = model.model_json_schema(by_alias=True)
    schema.pop("title", None)
    # Model docstrings are internal; the tool description is advertised separately.
    schema.pop("description", None)
    for prop in schema.get("properties", {}).values():
        prop.pop("title", None)
    schema["type"] = "object"
    schema.setdefault("properties", {})
    schema.setdefault("required", [])
    return schema


@dataclass(frozen=True)
class ToolSpec:
    """A registered tool: metadata, argument model and handler."""

    name: str
    description: str
    args_model: type[ToolArgs]
    handler: ToolHandler
    toolset: str = "default"

    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(
            name=self.name,
            description=self.description,
            input_schema=input_schema_for(self.args_model),
        )


@dataclass(frozen=True)
class ResourceSpec:
    descriptor: ResourceDescriptor
    reader: ResourceReader


class ToolRegistry:
    """Static catalog of tools and resources, fixed after startup."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolSpec] = {}
        self._resources: dict[str, ResourceSpec] = {}

    def register(self, spec: ToolSpec) -> None:
        """Add a tool. Names must be unique."""
        if spec.name in self._tools:
            raise ValueError(f"Tool already registered: {spec.name}")
        self._tools[spec.name] = spec

    def add_resource(self, descriptor: ResourceDescriptor, reader: ResourceReader) -> None:
        """Add a read-only resource. URIs must be unique."""
        if descriptor.uri in self._resources:
            raise ValueError(f"Resource already registered: {descriptor.uri}")
        self._resources[descriptor.uri] = ResourceSpec(descriptor=descriptor, reader=reader)

    def get(self, name: str) -> ToolSpec | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def list(self) -> list[ToolDescriptor]:
        """Return tool descriptors in registration order."""
        return [spec.descriptor() for spec in self._tools.values()]

    def list_resources(self) -> list[ResourceDescriptor]:
        return [spec.descriptor for spec in self._resources.values()]

    def read_resource(self, uri: str) -> str:
        """Return the JSON text of a resource or fail with InvalidRequest."""
        spec = self._resources.get(uri.rstrip("/"))
        if spec is None:
            raise InvalidRequestError(f"Unknown resource: {uri}")
        return spec.reader()

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)
