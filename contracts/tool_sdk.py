"""Tool SDK contracts.

Every MCPWebKit tool implements BaseTool.  The registry stores a frozen
ToolDefinition per tool name together with a factory that binds a fresh
tool instance to the server's execution context for each call.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

from pydantic import BaseModel, ConfigDict, model_validator

if TYPE_CHECKING:
    from mcpwebkit.context import ExecutionContext


# ── Input schema ─────────────────────────────────────────────────────


class PropertyKind(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


class PropertySchema(BaseModel):
    """A single named parameter of a tool's input."""

    model_config = ConfigDict(frozen=True)

    kind: PropertyKind
    description: str = ""

    @classmethod
    def string(cls, description: str = "") -> PropertySchema:
        return cls(kind=PropertyKind.STRING, description=description)

    @classmethod
    def integer(cls, description: str = "") -> PropertySchema:
        return cls(kind=PropertyKind.INTEGER, description=description)

    @classmethod
    def number(cls, description: str = "") -> PropertySchema:
        return cls(kind=PropertyKind.NUMBER, description=description)

    @classmethod
    def boolean(cls, description: str = "") -> PropertySchema:
        return cls(kind=PropertyKind.BOOLEAN, description=description)

    @classmethod
    def array(cls, description: str = "") -> PropertySchema:
        return cls(kind=PropertyKind.ARRAY, description=description)

    @classmethod
    def object(cls, description: str = "") -> PropertySchema:
        return cls(kind=PropertyKind.OBJECT, description=description)

    def to_json(self) -> dict[str, Any]:
        return {"type": self.kind.value, "description": self.description}


class InputSchema(BaseModel):
    """Ordered parameter mapping plus the names that must be supplied."""

    model_config = ConfigDict(frozen=True)

    properties: dict[str, PropertySchema] = {}
    required: list[str] = []

    @model_validator(mode="after")
    def _required_are_properties(self) -> InputSchema:
        unknown = [name for name in self.required if name not in self.properties]
        if unknown:
            raise ValueError(f"required names not in properties: {', '.join(unknown)}")
        return self

    @classmethod
    def empty(cls) -> InputSchema:
        return cls()

    def to_json(self) -> dict[str, Any]:
        """Render as a JSON-Schema object description."""
        return {
            "type": "object",
            "properties": {name: prop.to_json() for name, prop in self.properties.items()},
            "required": list(self.required),
        }


# ── Tool definition ──────────────────────────────────────────────────


class ToolDefinition(BaseModel):
    """Immutable descriptor a client sees in ``tools/list``."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    input_schema: InputSchema = InputSchema()

    def to_listing(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema.to_json(),
        }


# ── Abstract base class ─────────────────────────────────────────────


class BaseTool(ABC):
    """Abstract base class that every MCPWebKit tool must implement."""

    name: str = ""
    description: str = ""
    input_schema: InputSchema = InputSchema()

    def __init__(self, context: ExecutionContext) -> None:
        self.context = context

    @classmethod
    def definition(cls) -> ToolDefinition:
        """Return the tool's descriptor built from its class attributes."""
        return ToolDefinition(
            name=cls.name,
            description=cls.description,
            input_schema=cls.input_schema,
        )

    @abstractmethod
    async def execute(self, arguments: dict[str, Any]) -> Any:
        """Run the tool and return a JSON-compatible value.

        Raise ``contracts.errors.ToolError`` (or any exception) to report a
        tool-level failure to the caller.
        """
        ...


ToolFactory = Callable[["ExecutionContext"], BaseTool]
