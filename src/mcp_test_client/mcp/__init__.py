# mcp_test_client/mcp/__init__.py
"""Connections to MCP servers: registry, session cache and invoker."""
from .client_cache import ClientCache, is_unreachable_error
from .invoker import Invoker
from .registry import ConnectionRegistry
from .session import Session, SessionState

__all__ = [
    "ClientCache",
    "ConnectionRegistry",
    "Invoker",
    "Session",
    "SessionState",
    "is_unreachable_error",
]
