"""Built-in server tools — status and log management."""

from __future__ import annotations

from typing import Any

from contracts.tool_sdk import BaseTool, InputSchema
from mcpwebkit.logbuffer import utc_timestamp


class GetStatusTool(BaseTool):
    """Report that the server is up and which port it is bound to."""

    name = "get_status"
    description = "Get the MCP server status and port."
    input_schema = InputSchema.empty()

    async def execute(self, arguments: dict[str, Any]) -> Any:
        return {
            "status": "running",
            "port": self.context.server_port,
            "timestamp": utc_timestamp(),
        }


class GetLogsTool(BaseTool):
    name = "get_logs"
    description = "Get debug logs (up to 10,000 entries)."
    input_schema = InputSchema.empty()

    async def execute(self, arguments: dict[str, Any]) -> Any:
        logs = self.context.get_logs()
        return {"logs": logs, "count": len(logs)}


class ClearLogsTool(BaseTool):
    name = "clear_logs"
    description = "Clear all logs."
    input_schema = InputSchema.empty()

    async def execute(self, arguments: dict[str, Any]) -> Any:
        self.context.clear_logs()
        return {"success": True, "message": "Logs cleared"}
