"""JSON-RPC 2.0 envelope contracts used on ``POST /mcp``."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

JSONRPC_VERSION = "2.0"


class JsonRpcRequest(BaseModel):
    """An incoming request or notification.

    ``id`` is kept exactly as received; whether it was present at all is
    tracked separately so an explicit ``null`` can still be echoed.
    """

    model_config = ConfigDict(extra="ignore")

    jsonrpc: Any = None
    id: Any = None
    method: str
    params: Any = None

    @property
    def has_id(self) -> bool:
        return "id" in self.model_fields_set

    @property
    def param_map(self) -> dict[str, Any]:
        return self.params if isinstance(self.params, dict) else {}


class JsonRpcResponse(BaseModel):
    """An outgoing response; exactly one of ``result`` / ``error`` is set."""

    jsonrpc: str = JSONRPC_VERSION
    id: Any = None
    result: Any = None
    error: dict[str, Any] | None = None

    @classmethod
    def success(cls, result: Any, *, request_id: Any = None, has_id: bool = False) -> JsonRpcResponse:
        fields: dict[str, Any] = {"result": result}
        if has_id:
            fields["id"] = request_id
        return cls(**fields)

    @classmethod
    def failure(
        cls, code: int, message: str, *, request_id: Any = None, has_id: bool = False
    ) -> JsonRpcResponse:
        fields: dict[str, Any] = {"error": {"code": code, "message": message}}
        if has_id:
            fields["id"] = request_id
        return cls(**fields)

    def to_payload(self) -> dict[str, Any]:
        """Plain dict ready for encoding; ``id`` omitted when never set."""
        payload: dict[str, Any] = {"jsonrpc": self.jsonrpc}
        if "id" in self.model_fields_set:
            payload["id"] = self.id
        if self.error is not None:
            payload["error"] = self.error
        else:
            payload["result"] = self.result
        return payload
