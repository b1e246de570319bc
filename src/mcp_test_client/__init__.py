# mcp_test_client/__init__.py
"""
mcp_test_client – register MCP servers reachable over SSE, call their tools
and run conformance test suites against them.
"""
from mcp_test_client.client import MCPTestClient
from mcp_test_client.config import ClientConfig, TransportConfig
from mcp_test_client.core.exceptions import (
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
from mcp_test_client.lifecycle import ProcessLifecycle, RegistryLifecycle
from mcp_test_client.models import CallResult, TestCase, TestResult, TestRunReport, TestSuite, ToolInfo

__version__ = "0.3.0"

__all__ = [
    "CallResult",
    "ClientConfig",
    "ErrorCode",
    "MCPConnectionError",
    "MCPError",
    "MCPTestClient",
    "MCPTestError",
    "MCPTimeoutError",
    "ProcessLifecycle",
    "ProtocolError",
    "RegistryLifecycle",
    "ServerNotFoundError",
    "SuiteNotFoundError",
    "TestCase",
    "TestResult",
    "TestRunReport",
    "TestSuite",
    "ToolCallError",
    "ToolInfo",
    "TransportConfig",
    "__version__",
]
