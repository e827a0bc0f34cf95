"""Error taxonomy shared by the dispatcher and the tools.

Protocol errors and tool errors are deliberately separate types:
``JsonRpcError`` only ever becomes a JSON-RPC ``error`` object, while
``ToolError`` only ever becomes a tool result with ``isError: true``.
"""

from __future__ import annotations

__all__ = [
    "PARSE_ERROR",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "JsonRpcError",
    "ToolError",
    "ScriptExecutionError",
]

PARSE_ERROR = -32700
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class JsonRpcError(Exception):
    """A protocol-level failure carrying a JSON-RPC error code."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class ToolError(Exception):
    """A tool-level failure reported back to the client as ``isError``."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message

    @classmethod
    def missing_parameter(cls, name: str) -> ToolError:
        return cls(f"Missing parameter: {name}")

    @classmethod
    def not_available(cls, capability: str) -> ToolError:
        return cls(f"Capability not available: {capability}")


class ScriptExecutionError(ToolError):
    """The host's script primitive reported a failure."""
