"""MCPWebKit HTTP server: lets AI clients drive an embedded page over MCP.

Every connection is served on one asyncio event loop, which is the only
place the registry and the log buffer are touched.  Each connection runs
in its own task, so a tool call waiting on the host's script runner never
blocks new connections.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Iterable

from contracts.config import ServerConfig
from contracts.tool_sdk import BaseTool, ToolDefinition, ToolFactory
from mcpwebkit.bridge import ScriptRunner
from mcpwebkit.context import ExecutionContext
from mcpwebkit.handler import INTERNAL_ERROR_BODY, McpHandler
from mcpwebkit.http import HttpParseError, HttpRequest, build_response, expected_length, parse_request
from mcpwebkit.jsonutil import encode_json
from mcpwebkit.logging import get_logger
from mcpwebkit.tools.registry import create_default_registry
from mcpwebkit.version import DISPLAY_NAME, __version__

logger = get_logger(__name__)

_MAX_PORT = 65535

_ROOT_PAGE = """<!DOCTYPE html>
<html>
<head><title>MCPWebKit Server</title></head>
<body>
<h1>MCPWebKit MCP Server</h1>
<p>Port: {port}</p>
<p>Status: Running</p>
<h2>Endpoints:</h2>
<ul>
<li>POST /mcp - MCP JSON-RPC endpoint</li>
<li>GET /status - Server status</li>
<li>GET /health - Health check</li>
</ul>
</body>
</html>"""


class MCPWebServer:
    """Local HTTP MCP server with automatic port fallback."""

    def __init__(self, config: ServerConfig | None = None, *, port: int | None = None) -> None:
        self.config = config or ServerConfig()
        settings = self.config.server
        self.host = settings.host
        self.preferred_port = settings.port if port is None else port
        self.max_port_retries = settings.max_port_retries
        self.actual_port = self.preferred_port
        self.is_running = False
        self.start_error: OSError | None = None

        self.on_port_changed: Callable[[int], None] | None = None

        self.context = ExecutionContext(
            port=self.preferred_port,
            log_capacity=self.config.logging.buffer_capacity,
        )
        self.registry = create_default_registry()
        self.handler = McpHandler(self.context, self.registry)

        self._server: asyncio.AbstractServer | None = None
        self._connections: set[asyncio.Task[Any]] = set()
        self._stopped: asyncio.Event | None = None

    # ── Host hooks ──────────────────────────────────────────────────

    @property
    def execute_script(self) -> ScriptRunner | None:
        return self.context.script_runner

    @execute_script.setter
    def execute_script(self, runner: ScriptRunner | None) -> None:
        self.context.script_runner = runner

    @property
    def custom_status(self) -> Callable[[], dict[str, Any]] | None:
        return self.context.custom_status_provider

    @custom_status.setter
    def custom_status(self, provider: Callable[[], dict[str, Any]] | None) -> None:
        self.context.custom_status_provider = provider

    @property
    def on_log(self) -> Callable[[str], None] | None:
        return self.context.log_observer

    @on_log.setter
    def on_log(self, observer: Callable[[str], None] | None) -> None:
        self.context.log_observer = observer

    def log(self, message: str) -> None:
        self.context.log(message)

    def get_logs(self) -> list[str]:
        return self.context.get_logs()

    def clear_logs(self) -> None:
        self.context.clear_logs()

    # ── Tool registration ───────────────────────────────────────────

    def register_tool(self, tool: type[BaseTool] | ToolDefinition, factory: ToolFactory | None = None) -> None:
        """Register a custom tool class, or a definition plus its factory."""
        if isinstance(tool, ToolDefinition):
            if factory is None:
                raise ValueError(f"tool {tool.name!r} needs a factory")
            self.registry.register(tool, factory)
        else:
            self.registry.register_tool(tool)

    def register_tools(self, tool_classes: Iterable[type[BaseTool]]) -> None:
        self.registry.register_tools(tool_classes)

    # ── Lifecycle ───────────────────────────────────────────────────

    async def start(self) -> bool:
        """Bind the preferred port, falling back to the next ones.

        Tries ``preferred_port`` and then up to ``max_port_retries`` higher
        ports, one at a time, never past 65535.  Returns ``False`` and stays
        stopped when every attempt fails.
        """
        if self.is_running:
            self.log(f"Server already running on port {self.actual_port}")
            return True

        self.start_error = None
        port = self.preferred_port
        attempts = 0
        while True:
            attempts += 1
            try:
                self._server = await self._bind(port)
            except OSError as exc:
                self.start_error = exc
                self.log(f"Server failed on port {port}: {exc}")
                if attempts > self.max_port_retries or port >= _MAX_PORT:
                    break
                port += 1
                self.log(f"Retrying on port {port}...")
                continue

            self.actual_port = self._bound_port(port)
            self.context.server_port = self.actual_port
            self.is_running = True
            self._stopped = asyncio.Event()
            self.log(f"MCP Server started on port {self.actual_port}")
            if self.on_port_changed is not None:
                self.on_port_changed(self.actual_port)
            return True

        self.log(f"Could not bind any port after {attempts} attempts")
        return False

    async def stop(self) -> None:
        """Close the listener and cancel connections still in flight."""
        if self._server is None:
            return
        server, self._server = self._server, None
        server.close()

        pending = list(self._connections)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        await server.wait_closed()

        self.is_running = False
        self.log("MCP Server stopped")
        if self._stopped is not None:
            self._stopped.set()

    async def serve_forever(self) -> None:
        """Start and block until ``stop()`` is called."""
        if not await self.start():
            raise RuntimeError(f"{DISPLAY_NAME} could not bind a port") from self.start_error
        assert self._stopped is not None
        await self._stopped.wait()

    async def _bind(self, port: int) -> asyncio.AbstractServer:
        return await asyncio.start_server(self._on_connection, self.host, port)

    def _bound_port(self, requested: int) -> int:
        if self._server is not None and self._server.sockets:
            return self._server.sockets[0].getsockname()[1]
        return requested

    # ── Connection handling ─────────────────────────────────────────

    async def _on_connection(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        task = asyncio.current_task()
        if task is not None:
            self._connections.add(task)
        try:
            status, body, content_type = await self._serve(reader)
            writer.write(build_response(status, body, content_type))
            await writer.drain()
        except (ConnectionError, asyncio.IncompleteReadError) as exc:
            self._log_quietly(f"Connection error: {exc}")
        finally:
            if task is not None:
                self._connections.discard(task)
            writer.close()
            try:
                await writer.wait_closed()
            except ConnectionError:
                pass

    async def _serve(self, reader: asyncio.StreamReader) -> tuple[int, str, str]:
        try:
            data = await self._read_request(reader)
            request = parse_request(data)
        except HttpParseError as exc:
            self._log_quietly(f"HTTP {exc.status}: {exc.message}")
            return exc.status, exc.message, "text/plain"

        try:
            return await self._route(request)
        except Exception as exc:
            logger.exception("Unhandled error serving %s %s", request.method, request.path)
            self._log_quietly(f"Internal error serving {request.method} {request.path}: {exc}")
            return 500, INTERNAL_ERROR_BODY, "application/json"

    def _log_quietly(self, message: str) -> None:
        # Host log hooks can raise too.
        try:
            self.log(message)
        except Exception:
            logger.exception("Log hook failed while recording: %s", message)

    async def _read_request(self, reader: asyncio.StreamReader) -> bytes:
        settings = self.config.server
        data = b""
        while True:
            chunk = await reader.read(settings.read_chunk_size)
            if not chunk:
                return data
            data += chunk
            if len(data) > settings.max_request_bytes:
                raise HttpParseError(413, "Request too large")
            total = expected_length(data)
            if total is not None and len(data) >= total:
                return data

    async def _route(self, request: HttpRequest) -> tuple[int, str, str]:
        route = (request.method, request.route_path)
        if route == ("GET", "/"):
            return 200, _ROOT_PAGE.format(port=self.actual_port), "text/html"
        if route == ("GET", "/status"):
            return self._json(self._status())
        if route == ("GET", "/health"):
            return self._json({"status": "ok", "port": self.actual_port})
        if route == ("POST", "/mcp"):
            status, body = await self.handler.handle_request(request.body, request.headers)
            return status, body, "application/json"
        return 404, "Not Found", "text/plain"

    def _status(self) -> dict[str, Any]:
        status: dict[str, Any] = {
            "server": DISPLAY_NAME,
            "version": __version__,
            "port": self.actual_port,
            "isRunning": self.is_running,
            "toolsCount": len(self.registry),
        }
        custom = self.context.custom_status()
        if custom is not None:
            status["custom"] = custom
        return status

    def _json(self, payload: dict[str, Any]) -> tuple[int, str, str]:
        try:
            return 200, encode_json(payload), "application/json"
        except (TypeError, ValueError) as exc:
            self.log(f"JSON encoding failed: {exc}")
            return 500, '{"error": "JSON encoding failed"}', "application/json"
