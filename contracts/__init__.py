"""Shared contracts — source of truth for all MCPWebKit interfaces."""

from contracts.config import LoggingSettings, LogLevel, ServerConfig, ServerSettings
from contracts.errors import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    JsonRpcError,
    ScriptExecutionError,
    ToolError,
)
from contracts.jsonrpc import JsonRpcRequest, JsonRpcResponse
from contracts.tool_sdk import (
    BaseTool,
    InputSchema,
    PropertyKind,
    PropertySchema,
    ToolDefinition,
    ToolFactory,
)

__all__ = [
    # config
    "LoggingSettings",
    "LogLevel",
    "ServerConfig",
    "ServerSettings",
    # errors
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "METHOD_NOT_FOUND",
    "PARSE_ERROR",
    "JsonRpcError",
    "ScriptExecutionError",
    "ToolError",
    # jsonrpc
    "JsonRpcRequest",
    "JsonRpcResponse",
    # tool sdk
    "BaseTool",
    "InputSchema",
    "PropertyKind",
    "PropertySchema",
    "ToolDefinition",
    "ToolFactory",
]
