"""Unit tests for the MCP JSON-RPC handler."""

from __future__ import annotations

import json
from typing import Any

import pytest

from contracts.errors import ToolError
from contracts.tool_sdk import BaseTool, InputSchema, ToolDefinition
from mcpwebkit.context import ExecutionContext
from mcpwebkit.handler import INTERNAL_ERROR_BODY, McpHandler
from mcpwebkit.tools.registry import create_default_registry


# ── helpers ────────────────────────────────────────────────────────────


class NanTool(BaseTool):
    name = "nan_tool"
    description = "Returns non-finite numbers."
    input_schema = InputSchema.empty()

    async def execute(self, arguments: dict[str, Any]) -> Any:
        return {"ok": 1, "bad": [float("nan"), float("-inf")]}


class ExplodingTool(BaseTool):
    name = "explode"
    description = "Always fails."
    input_schema = InputSchema.empty()

    async def execute(self, arguments: dict[str, Any]) -> Any:
        raise RuntimeError("kaboom")


class ArgsTool(BaseTool):
    name = "args"
    description = "Returns its arguments."
    input_schema = InputSchema.empty()

    async def execute(self, arguments: dict[str, Any]) -> Any:
        return arguments


class ObjectTool(BaseTool):
    name = "object_tool"
    description = "Returns something JSON cannot encode."
    input_schema = InputSchema.empty()

    async def execute(self, arguments: dict[str, Any]) -> Any:
        return {"value": object()}


def _make_handler() -> McpHandler:
    ctx = ExecutionContext(port=9123)
    registry = create_default_registry()
    registry.register_tools([NanTool, ExplodingTool, ArgsTool, ObjectTool])
    return McpHandler(ctx, registry)


async def _call(handler: McpHandler, payload: Any) -> tuple[int, dict[str, Any]]:
    body = payload if isinstance(payload, str) else json.dumps(payload)
    status, text = await handler.handle_request(body, [])
    return status, json.loads(text)


def _tool_call(name: Any, arguments: Any = None, request_id: Any = 1) -> dict[str, Any]:
    params: dict[str, Any] = {"name": name}
    if arguments is not None:
        params["arguments"] = arguments
    return {"jsonrpc": "2.0", "id": request_id, "method": "tools/call", "params": params}


# ── Handshake ──────────────────────────────────────────────────────────


class TestHandshake:
    @pytest.mark.asyncio
    async def test_initialize_exact_body(self) -> None:
        handler = _make_handler()
        status, text = await handler.handle_request(
            '{"jsonrpc":"2.0","id":1,"method":"initialize","params":{}}', []
        )
        assert status == 200
        assert text == (
            '{"jsonrpc":"2.0","id":1,"result":{"protocolVersion":"2025-03-26",'
            '"serverInfo":{"name":"mcpwebkit","version":"0.1.0"},'
            '"capabilities":{"tools":{}}}}'
        )

    @pytest.mark.asyncio
    async def test_initialized_notification(self) -> None:
        status, data = await _call(_make_handler(), {"jsonrpc": "2.0", "method": "initialized"})
        assert status == 200
        assert data == {"jsonrpc": "2.0", "result": {}}
        assert "id" not in data

    @pytest.mark.asyncio
    async def test_string_id_echoed(self) -> None:
        _, data = await _call(_make_handler(), {"jsonrpc": "2.0", "id": "abc", "method": "initialize"})
        assert data["id"] == "abc"

    @pytest.mark.asyncio
    async def test_null_id_echoed(self) -> None:
        _, data = await _call(_make_handler(), {"jsonrpc": "2.0", "id": None, "method": "initialized"})
        assert "id" in data
        assert data["id"] is None


# ── Protocol errors ────────────────────────────────────────────────────


class TestProtocolErrors:
    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        status, data = await _call(_make_handler(), "{not json")
        assert status == 200
        assert data == {"jsonrpc": "2.0", "error": {"code": -32700, "message": "Parse error"}}

    @pytest.mark.asyncio
    async def test_missing_method_echoes_recoverable_id(self) -> None:
        _, data = await _call(_make_handler(), {"jsonrpc": "2.0", "id": 7})
        assert data["error"]["code"] == -32700
        assert data["id"] == 7

    @pytest.mark.asyncio
    async def test_non_string_method(self) -> None:
        _, data = await _call(_make_handler(), {"jsonrpc": "2.0", "id": 3, "method": 12})
        assert data["error"]["code"] == -32700

    @pytest.mark.asyncio
    async def test_non_object_body(self) -> None:
        _, data = await _call(_make_handler(), "[1, 2]")
        assert data["error"]["code"] == -32700
        assert "id" not in data

    @pytest.mark.asyncio
    async def test_unknown_method(self) -> None:
        _, data = await _call(_make_handler(), {"jsonrpc": "2.0", "id": 4, "method": "resources/list"})
        assert data == {
            "jsonrpc": "2.0",
            "id": 4,
            "error": {"code": -32601, "message": "Method not found: resources/list"},
        }

    @pytest.mark.asyncio
    async def test_missing_tool_name(self) -> None:
        _, data = await _call(
            _make_handler(), {"jsonrpc": "2.0", "id": 5, "method": "tools/call", "params": {}}
        )
        assert data["error"] == {"code": -32602, "message": "Missing tool name"}
        assert "result" not in data

    @pytest.mark.asyncio
    async def test_non_string_tool_name(self) -> None:
        _, data = await _call(_make_handler(), _tool_call(123))
        assert data["error"]["code"] == -32602


# ── tools/list ─────────────────────────────────────────────────────────


class TestToolsList:
    @pytest.mark.asyncio
    async def test_order_and_shape(self) -> None:
        _, data = await _call(_make_handler(), {"jsonrpc": "2.0", "id": 1, "method": "tools/list"})
        tools = data["result"]["tools"]
        assert [t["name"] for t in tools] == [
            "get_status",
            "get_logs",
            "clear_logs",
            "execute_js",
            "query_selector",
            "click_element",
            "get_page_info",
            "nan_tool",
            "explode",
            "args",
            "object_tool",
        ]
        assert tools[0]["inputSchema"] == {"type": "object", "properties": {}, "required": []}
        assert tools[3]["inputSchema"]["required"] == ["code"]
        assert all(t["description"] for t in tools)


# ── tools/call ─────────────────────────────────────────────────────────


class TestToolsCall:
    @pytest.mark.asyncio
    async def test_get_status(self) -> None:
        _, data = await _call(_make_handler(), _tool_call("get_status", {}, request_id=2))
        assert data["id"] == 2
        result = data["result"]
        assert result["isError"] is False
        assert result["content"][0]["type"] == "text"
        status = json.loads(result["content"][0]["text"])
        assert status["status"] == "running"
        assert status["port"] == 9123

    @pytest.mark.asyncio
    async def test_unknown_tool_is_tool_error(self) -> None:
        _, data = await _call(_make_handler(), _tool_call("nope"))
        assert "error" not in data
        assert data["result"] == {
            "content": [{"type": "text", "text": "Unknown tool: nope"}],
            "isError": True,
        }

    @pytest.mark.asyncio
    async def test_failing_factory_is_tool_error(self) -> None:
        handler = _make_handler()

        def broken_factory(context: ExecutionContext) -> BaseTool:
            raise RuntimeError("factory boom")

        handler.registry.register(ToolDefinition(name="boom", description="Cannot be built."), broken_factory)
        status, data = await _call(handler, _tool_call("boom"))
        assert status == 200
        assert data["result"] == {
            "content": [{"type": "text", "text": "factory boom"}],
            "isError": True,
        }
        assert "Tool boom failed: factory boom" in handler.context.get_logs()[-1]

    @pytest.mark.asyncio
    async def test_execute_js_missing_code(self) -> None:
        _, data = await _call(_make_handler(), _tool_call("execute_js", {}))
        assert data["result"]["isError"] is True
        assert data["result"]["content"][0]["text"] == "Missing parameter: code"

    @pytest.mark.asyncio
    async def test_execute_js_without_runner(self) -> None:
        _, data = await _call(_make_handler(), _tool_call("execute_js", {"code": "return 1"}))
        assert data["result"]["isError"] is True
        assert "Capability not available" in data["result"]["content"][0]["text"]

    @pytest.mark.asyncio
    async def test_execute_js_with_runner(self) -> None:
        handler = _make_handler()
        handler.context.script_runner = lambda script, done: done(2, None)
        _, data = await _call(handler, _tool_call("execute_js", {"code": "return 1+1"}))
        assert data["result"]["isError"] is False
        assert json.loads(data["result"]["content"][0]["text"]) == {"result": 2}

    @pytest.mark.asyncio
    async def test_arbitrary_exception_message(self) -> None:
        _, data = await _call(_make_handler(), _tool_call("explode"))
        assert data["result"]["isError"] is True
        assert data["result"]["content"][0]["text"] == "kaboom"

    @pytest.mark.asyncio
    async def test_arguments_default_to_empty(self) -> None:
        _, data = await _call(_make_handler(), _tool_call("args"))
        assert data["result"]["content"][0]["text"] == "{}"

    @pytest.mark.asyncio
    async def test_non_object_arguments_become_empty(self) -> None:
        _, data = await _call(_make_handler(), _tool_call("args", [1, 2]))
        assert data["result"]["content"][0]["text"] == "{}"

    @pytest.mark.asyncio
    async def test_non_finite_numbers_become_null(self) -> None:
        _, data = await _call(_make_handler(), _tool_call("nan_tool"))
        assert json.loads(data["result"]["content"][0]["text"]) == {"ok": 1, "bad": [None, None]}

    @pytest.mark.asyncio
    async def test_unencodable_result_falls_back(self) -> None:
        _, data = await _call(_make_handler(), _tool_call("object_tool"))
        assert data["result"]["isError"] is False
        assert data["result"]["content"][0]["text"] == "{}"


# ── Logging and encoding ───────────────────────────────────────────────


class TestHandlerLogging:
    @pytest.mark.asyncio
    async def test_requests_and_errors_are_logged(self) -> None:
        handler = _make_handler()
        await _call(handler, _tool_call("explode"))
        await _call(handler, "garbage")
        logs = "\n".join(handler.context.get_logs())
        assert "MCP request received" in logs
        assert "MCP tools/call: explode" in logs
        assert "Tool explode failed: kaboom" in logs
        assert "MCP parse error" in logs

    @pytest.mark.asyncio
    async def test_unencodable_response_is_internal_error(self) -> None:
        handler = _make_handler()
        status, text = await handler.handle_request(
            json.dumps({"jsonrpc": "2.0", "id": 1, "method": "initialize"}), []
        )
        assert status == 200

        # An id that cannot be encoded forces the internal-error fallback.
        class Weird:
            pass

        from contracts.jsonrpc import JsonRpcResponse

        status, text = handler._encode(JsonRpcResponse.success({}, request_id=Weird(), has_id=True))
        assert status == 500
        assert text == INTERNAL_ERROR_BODY
        assert json.loads(text)["error"]["code"] == -32603


class TestToolErrorIsNotProtocolError:
    def test_tool_error_message(self) -> None:
        assert str(ToolError.missing_parameter("code")) == "Missing parameter: code"
        assert str(ToolError.not_available("X")) == "Capability not available: X"
