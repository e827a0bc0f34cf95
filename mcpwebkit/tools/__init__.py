"""Built-in tools and the tool registry."""

from mcpwebkit.tools.registry import ToolRegistry, create_default_registry

__all__ = ["ToolRegistry", "create_default_registry"]
