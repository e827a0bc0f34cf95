"""MCP JSON-RPC handler: envelope parsing, method routing and tool calls."""

from __future__ import annotations

import json
from typing import Any, Awaitable, Callable

from pydantic import ValidationError

from contracts.errors import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    JsonRpcError,
)
from contracts.jsonrpc import JsonRpcRequest, JsonRpcResponse
from mcpwebkit.context import ExecutionContext
from mcpwebkit.jsonutil import encode_json, tool_result_text
from mcpwebkit.tools.registry import ToolRegistry
from mcpwebkit.version import PROTOCOL_VERSION, SERVER_NAME, __version__

INTERNAL_ERROR_BODY = (
    '{"jsonrpc":"2.0","error":{"code":%d,"message":"Internal error"}}' % INTERNAL_ERROR
)

MethodHandler = Callable[[JsonRpcRequest], Awaitable[dict[str, Any]]]


class McpHandler:
    """Handles the body of one ``POST /mcp`` request.

    ``handle_request`` always produces an HTTP status and a JSON body:
    protocol errors come back as JSON-RPC ``error`` envelopes with status
    200, tool failures as results with ``isError: true``.
    """

    def __init__(self, context: ExecutionContext, registry: ToolRegistry) -> None:
        self.context = context
        self.registry = registry
        self._methods: dict[str, MethodHandler] = {
            "initialize": self._handle_initialize,
            "initialized": self._handle_initialized,
            "tools/list": self._handle_tools_list,
            "tools/call": self._handle_tools_call,
        }

    async def handle_request(self, body: str, headers: list[str] | None = None) -> tuple[int, str]:
        self.context.log("MCP request received")

        try:
            request = self._parse(body)
        except JsonRpcError as exc:
            self.context.log(f"MCP parse error: {exc.message}")
            has_id, request_id = _recover_id(body)
            return self._encode(
                JsonRpcResponse.failure(
                    exc.code, exc.message, request_id=request_id, has_id=has_id
                )
            )

        self.context.log(f"MCP method: {request.method}")

        handler = self._methods.get(request.method)
        try:
            if handler is None:
                raise JsonRpcError(METHOD_NOT_FOUND, f"Method not found: {request.method}")
            result = await handler(request)
        except JsonRpcError as exc:
            self.context.log(f"MCP error {exc.code}: {exc.message}")
            return self._encode(
                JsonRpcResponse.failure(
                    exc.code, exc.message, request_id=request.id, has_id=request.has_id
                )
            )

        return self._encode(
            JsonRpcResponse.success(result, request_id=request.id, has_id=request.has_id)
        )

    # ── Parsing ─────────────────────────────────────────────────────

    @staticmethod
    def _parse(body: str) -> JsonRpcRequest:
        try:
            data = json.loads(body)
        except ValueError as exc:
            raise JsonRpcError(PARSE_ERROR, "Parse error") from exc
        if not isinstance(data, dict):
            raise JsonRpcError(PARSE_ERROR, "Parse error")
        try:
            return JsonRpcRequest.model_validate(data)
        except ValidationError as exc:
            raise JsonRpcError(PARSE_ERROR, "Parse error") from exc

    # ── Method handlers ─────────────────────────────────────────────

    async def _handle_initialize(self, request: JsonRpcRequest) -> dict[str, Any]:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "serverInfo": {"name": SERVER_NAME, "version": __version__},
            "capabilities": {"tools": {}},
        }

    async def _handle_initialized(self, request: JsonRpcRequest) -> dict[str, Any]:
        return {}

    async def _handle_tools_list(self, request: JsonRpcRequest) -> dict[str, Any]:
        return {"tools": self.registry.listings()}

    async def _handle_tools_call(self, request: JsonRpcRequest) -> dict[str, Any]:
        params = request.param_map
        tool_name = params.get("name")
        if not isinstance(tool_name, str):
            raise JsonRpcError(INVALID_PARAMS, "Missing tool name")

        arguments = params.get("arguments")
        if not isinstance(arguments, dict):
            arguments = {}

        self.context.log(f"MCP tools/call: {tool_name}")
        return await self.call_tool(tool_name, arguments)

    async def call_tool(self, tool_name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        """Run a tool and wrap its outcome as an MCP tool result."""
        factory = self.registry.lookup(tool_name)
        if factory is None:
            self.context.log(f"Unknown tool: {tool_name}")
            return _tool_error(f"Unknown tool: {tool_name}")

        try:
            value = await factory(self.context).execute(arguments)
        except Exception as exc:
            self.context.log(f"Tool {tool_name} failed: {exc}")
            return _tool_error(str(exc))

        try:
            text = tool_result_text(value)
        except (TypeError, ValueError) as exc:
            self.context.log(f"Tool {tool_name} returned an unencodable value: {exc}")
            text = "[]" if isinstance(value, (list, tuple)) else "{}"

        return {"content": [{"type": "text", "text": text}], "isError": False}

    # ── Encoding ────────────────────────────────────────────────────

    def _encode(self, response: JsonRpcResponse) -> tuple[int, str]:
        try:
            return 200, encode_json(response.to_payload())
        except (TypeError, ValueError) as exc:
            self.context.log(f"MCP response encoding failed: {exc}")
            return 500, INTERNAL_ERROR_BODY


def _tool_error(message: str) -> dict[str, Any]:
    return {"content": [{"type": "text", "text": message}], "isError": True}


def _recover_id(body: str) -> tuple[bool, Any]:
    """Best-effort id from a body that failed to parse as a request."""
    try:
        data = json.loads(body)
    except ValueError:
        return False, None
    if isinstance(data, dict) and "id" in data:
        return True, data["id"]
    return False, None
