# mcp_test_client/testing/__init__.py
"""Conformance testing against registered MCP servers."""
from .comparison import COMPARATORS, canonical_json, evaluate
from .runner import TestRunner, smoke_tests
from .suites import SuiteLoader

__all__ = ["COMPARATORS", "SuiteLoader", "TestRunner", "canonical_json", "evaluate", "smoke_tests"]
