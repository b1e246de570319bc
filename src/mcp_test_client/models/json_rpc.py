# mcp_test_client/models/json_rpc.py
"""JSON-RPC 2.0 envelopes exchanged with MCP servers."""
from __future__ import annotations

from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

RequestId = Union[int, str]

METHOD_NOT_FOUND = -32601


class JSONRPCRequest(BaseModel):
    jsonrpc: Literal["2.0"] = "2.0"
    id: RequestId
    method: str
    params: Optional[Dict[str, Any]] = None


class JSONRPCNotification(BaseModel):
    jsonrpc: Literal["2.0"] = "2.0"
    method: str
    params: Optional[Dict[str, Any]] = None


class JSONRPCErrorObject(BaseModel):
    model_config = ConfigDict(extra="allow")

    code: int = -32000
    message: str = "Unknown error"
    data: Any = None


class JSONRPCResponse(BaseModel):
    """A reply to one request; exactly one of ``result`` / ``error`` is meaningful."""

    model_config = ConfigDict(extra="ignore")

    jsonrpc: str = "2.0"
    id: Optional[RequestId] = None
    result: Any = None
    error: Optional[JSONRPCErrorObject] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None


def is_response(message: Dict[str, Any]) -> bool:
    return "id" in message and "method" not in message and ("result" in message or "error" in message)


def is_request(message: Dict[str, Any]) -> bool:
    return "method" in message and "id" in message
