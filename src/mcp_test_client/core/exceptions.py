# mcp_test_client/core/exceptions.py
"""
Exception hierarchy for the MCP test client.

Every error carries a machine-readable :class:`ErrorCode` and a ``details``
dict so front ends can render failures without parsing messages.
"""
from __future__ import annotations

from enum import StrEnum
from typing import Any, Dict, Optional


class ErrorCode(StrEnum):
    """Stable identifiers for every failure the client can report."""

    SERVER_NOT_FOUND = "SERVER_NOT_FOUND"
    TOOL_CALL_FAILED = "TOOL_CALL_FAILED"
    MCP_CONNECTION_FAILED = "MCP_CONNECTION_FAILED"
    MCP_TIMEOUT = "MCP_TIMEOUT"
    MCP_PROTOCOL_ERROR = "MCP_PROTOCOL_ERROR"
    SUITE_NOT_FOUND = "SUITE_NOT_FOUND"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


class MCPTestError(Exception):
    """Base class for all errors raised by the client."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.TOOL_CALL_FAILED,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": type(self).__name__,
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


# --------------------------------------------------------------------------- #
# Transport / protocol errors
# --------------------------------------------------------------------------- #
class MCPError(MCPTestError):
    """Failures below the tool layer (transport, framing)."""


class MCPConnectionError(MCPError):
    """The endpoint is unreachable, refused the connection, or dropped it."""

    def __init__(self, message: str, server_name: str | None = None) -> None:
        details = {"server_name": server_name} if server_name else {}
        super().__init__(message, ErrorCode.MCP_CONNECTION_FAILED, details)
        self.server_name = server_name


class MCPTimeoutError(MCPConnectionError):
    """A network operation did not finish within its bound."""

    def __init__(
        self,
        message: str,
        server_name: str | None = None,
        timeout: float | None = None,
    ) -> None:
        super().__init__(message, server_name)
        self.code = ErrorCode.MCP_TIMEOUT
        self.timeout = timeout
        if timeout is not None:
            self.details["timeout"] = timeout


class ProtocolError(MCPError):
    """An inbound frame could not be understood. The stream keeps going."""

    def __init__(self, message: str, server_name: str | None = None, raw: str | None = None) -> None:
        details: Dict[str, Any] = {}
        if server_name:
            details["server_name"] = server_name
        if raw is not None:
            details["raw"] = raw[:200]
        super().__init__(message, ErrorCode.MCP_PROTOCOL_ERROR, details)
        self.server_name = server_name


# --------------------------------------------------------------------------- #
# Caller-facing errors
# --------------------------------------------------------------------------- #
class ServerNotFoundError(MCPTestError):
    """An operation referenced a server name nobody registered."""

    def __init__(self, server_name: str) -> None:
        super().__init__(
            f"Server '{server_name}' not found",
            ErrorCode.SERVER_NOT_FOUND,
            {"server_name": server_name},
        )
        self.server_name = server_name


class ToolCallError(MCPTestError):
    """The remote server failed a handshake or a call."""

    def __init__(
        self,
        server_name: str,
        operation: str,
        message: str,
        rpc_code: int | None = None,
    ) -> None:
        details: Dict[str, Any] = {"server_name": server_name, "operation": operation}
        if rpc_code is not None:
            details["rpc_code"] = rpc_code
        super().__init__(
            f"Error calling '{operation}' on server '{server_name}': {message}",
            ErrorCode.TOOL_CALL_FAILED,
            details,
        )
        self.server_name = server_name
        self.operation = operation
        self.rpc_code = rpc_code


class SuiteNotFoundError(MCPTestError):
    def __init__(self, suite_name: str, search_path: str) -> None:
        super().__init__(
            f"Test suite '{suite_name}' not found in {search_path}",
            ErrorCode.SUITE_NOT_FOUND,
            {"suite_name": suite_name, "search_path": search_path},
        )
        self.suite_name = suite_name
