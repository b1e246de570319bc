# mcp_test_client/mcp/transport/__init__.py
"""Transports that carry JSON-RPC traffic to MCP servers."""
from .base_transport import MCPBaseTransport, TransportObserver, backoff_delay
from .models import TransportMetrics, TransportState
from .sse_parser import SSEEvent, SSEParser, iter_sse_events
from .sse_transport import SSETransport

__all__ = [
    "MCPBaseTransport",
    "SSEEvent",
    "SSEParser",
    "SSETransport",
    "TransportMetrics",
    "TransportObserver",
    "TransportState",
    "backoff_delay",
    "iter_sse_events",
]
