"""Tool registry — register, look up and list MCPWebKit tools."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable

from contracts.tool_sdk import BaseTool, ToolDefinition, ToolFactory
from mcpwebkit.tools.base import check_definition

if TYPE_CHECKING:
    from mcpwebkit.context import ExecutionContext


class ToolRegistry:
    """Ordered, in-memory registry of tool factories.

    Listing order reflects first registration.  Registering an existing
    name swaps its definition and factory but keeps its position.
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[ToolDefinition, ToolFactory]] = {}
        self._order: list[str] = []

    def register(self, definition: ToolDefinition, factory: ToolFactory) -> None:
        check_definition(definition)
        if definition.name not in self._entries:
            self._order.append(definition.name)
        self._entries[definition.name] = (definition, factory)

    def register_tool(self, tool_cls: type[BaseTool]) -> None:
        """Register a ``BaseTool`` subclass, using the class as its factory."""
        self.register(tool_cls.definition(), tool_cls)

    def register_tools(self, tool_classes: Iterable[type[BaseTool]]) -> None:
        for tool_cls in tool_classes:
            self.register_tool(tool_cls)

    def lookup(self, name: str) -> ToolFactory | None:
        entry = self._entries.get(name)
        return entry[1] if entry else None

    def create(self, name: str, context: ExecutionContext) -> BaseTool | None:
        """Return a fresh tool instance bound to *context*, or ``None``."""
        factory = self.lookup(name)
        if factory is None:
            return None
        return factory(context)

    def names(self) -> list[str]:
        return list(self._order)

    def definitions(self) -> list[ToolDefinition]:
        return [self._entries[name][0] for name in self._order]

    def listings(self) -> list[dict[str, Any]]:
        """Descriptors in registration order, as sent by ``tools/list``."""
        return [definition.to_listing() for definition in self.definitions()]

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._order)


def create_default_registry() -> ToolRegistry:
    """Create a registry pre-loaded with all built-in tools."""
    from mcpwebkit.tools.page import ClickElementTool, GetPageInfoTool, QuerySelectorTool
    from mcpwebkit.tools.script import ExecuteJSTool
    from mcpwebkit.tools.system import ClearLogsTool, GetLogsTool, GetStatusTool

    registry = ToolRegistry()
    registry.register_tools([
        GetStatusTool,
        GetLogsTool,
        ClearLogsTool,
        ExecuteJSTool,
        QuerySelectorTool,
        ClickElementTool,
        GetPageInfoTool,
    ])
    return registry
