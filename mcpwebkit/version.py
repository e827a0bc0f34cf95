"""Version and identity constants reported by the server."""

__version__ = "0.1.0"

SERVER_NAME = "mcpwebkit"
DISPLAY_NAME = "MCPWebKit"
DESCRIPTION = "MCP + WebView Development Platform"
PROTOCOL_VERSION = "2025-03-26"
