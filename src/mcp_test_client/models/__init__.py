# mcp_test_client/models/__init__.py
from .call_result import CallResult
from .json_rpc import JSONRPCErrorObject, JSONRPCNotification, JSONRPCRequest, JSONRPCResponse
from .normalized_result import NormalizedResult, ParsedJson, RawValue, TextContent, normalize_result
from .server import ServerRegistration, ToolInfo
from .test_case import (
    Expectation,
    ExpectationKind,
    RunSummary,
    TestCase,
    TestResult,
    TestRunReport,
    TestSuite,
)

__all__ = [
    "CallResult",
    "Expectation",
    "ExpectationKind",
    "JSONRPCErrorObject",
    "JSONRPCNotification",
    "JSONRPCRequest",
    "JSONRPCResponse",
    "NormalizedResult",
    "ParsedJson",
    "RawValue",
    "RunSummary",
    "ServerRegistration",
    "TestCase",
    "TestResult",
    "TestRunReport",
    "TestSuite",
    "TextContent",
    "ToolInfo",
    "normalize_result",
]
