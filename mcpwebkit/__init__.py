"""MCPWebKit: an MCP control server for embedded web pages.

Exposes an embedded page's script surface to AI clients as MCP tools over
plain HTTP.
"""

from mcpwebkit.context import ExecutionContext
from mcpwebkit.server import MCPWebServer
from mcpwebkit.tools.registry import ToolRegistry, create_default_registry
from mcpwebkit.version import DESCRIPTION, __version__

__all__ = [
    "DESCRIPTION",
    "ExecutionContext",
    "MCPWebServer",
    "ToolRegistry",
    "__version__",
    "create_default_registry",
]
