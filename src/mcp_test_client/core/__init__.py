# mcp_test_client/core/__init__.py
from .exceptions import (
    ErrorCode,
    MCPConnectionError,
    MCPError,
    MCPTestError,
    MCPTimeoutError,
    ProtocolError,
    ServerNotFoundError,
    SuiteNotFoundError,
    ToolCallError,
)

__all__ = [
    "ErrorCode",
    "MCPConnectionError",
    "MCPError",
    "MCPTestError",
    "MCPTimeoutError",
    "ProtocolError",
    "ServerNotFoundError",
    "SuiteNotFoundError",
    "ToolCallError",
]
