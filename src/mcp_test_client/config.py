# mcp_test_client/config.py
"""
Environment-driven configuration.

Every setting has a sane default; ``from_env()`` overlays ``MCP_TEST_*``
variables.  Values that fail to parse fall back to the default rather than
aborting start-up.

Environment variables
---------------------
MCP_TEST_CONNECT_TIMEOUT          seconds to wait for the stream to open (5.0)
MCP_TEST_SEND_TIMEOUT             seconds per outbound POST (10.0)
MCP_TEST_PROBE_TIMEOUT            seconds per liveness probe (1.0)
MCP_TEST_MAX_RECONNECT_ATTEMPTS   reconnect attempts before giving up (3)
MCP_TEST_RECONNECT_BASE_DELAY     first backoff delay in seconds (1.0)
MCP_TEST_REQUEST_TIMEOUT          seconds to wait for a JSON-RPC response (60.0)
MCP_TEST_SUITE_DIR                directory holding ``<suite>.json`` files
MCP_TEST_LOG_LEVEL                logging level name (INFO)
MCP_TEST_STRUCTURED_LOGS          emit JSON log lines (false)
"""
from __future__ import annotations

import os

from pydantic import BaseModel, Field

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


# ------------------------------------------------------------------ #
# env helpers
# ------------------------------------------------------------------ #
def _get_bool(key: str, default: bool = False) -> bool:
    raw = os.environ.get(key, "").strip().lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    return default


def _get_int(key: str, default: int | None = None) -> int | None:
    raw = os.environ.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_float(key: str, default: float | None = None) -> float | None:
    raw = os.environ.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# ------------------------------------------------------------------ #
# models
# ------------------------------------------------------------------ #
class TransportConfig(BaseModel):
    """Timeouts and reconnection policy for one SSE transport."""

    connect_timeout: float = Field(default=5.0, gt=0)
    send_timeout: float = Field(default=10.0, gt=0)
    probe_timeout: float = Field(default=1.0, gt=0)
    max_reconnect_attempts: int = Field(default=3, ge=0)
    reconnect_base_delay: float = Field(default=1.0, ge=0)

    @classmethod
    def from_env(cls) -> TransportConfig:
        return cls(
            connect_timeout=_get_float("MCP_TEST_CONNECT_TIMEOUT", 5.0),
            send_timeout=_get_float("MCP_TEST_SEND_TIMEOUT", 10.0),
            probe_timeout=_get_float("MCP_TEST_PROBE_TIMEOUT", 1.0),
            max_reconnect_attempts=_get_int("MCP_TEST_MAX_RECONNECT_ATTEMPTS", 3),
            reconnect_base_delay=_get_float("MCP_TEST_RECONNECT_BASE_DELAY", 1.0),
        )


class ClientConfig(BaseModel):
    """Top-level settings for :class:`~mcp_test_client.client.MCPTestClient`."""

    transport: TransportConfig = Field(default_factory=TransportConfig)
    request_timeout: float = Field(default=60.0, gt=0)
    suite_dir: str = "./test-suites"
    log_level: str = "INFO"
    structured_logs: bool = False

    @classmethod
    def from_env(cls) -> ClientConfig:
        return cls(
            transport=TransportConfig.from_env(),
            request_timeout=_get_float("MCP_TEST_REQUEST_TIMEOUT", 60.0),
            suite_dir=os.environ.get("MCP_TEST_SUITE_DIR", "./test-suites"),
            log_level=os.environ.get("MCP_TEST_LOG_LEVEL", "INFO").upper(),
            structured_logs=_get_bool("MCP_TEST_STRUCTURED_LOGS"),
        )
