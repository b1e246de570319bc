# mcp_test_client/mcp/session.py
"""
MCP client session on top of a transport.

The session is the transport's observer: it correlates JSON-RPC responses
with the futures of in-flight requests, answers server pings, and fails every
pending request as soon as the transport closes or gives up, so a caller
never waits on a connection that is gone.
"""
from __future__ import annotations

import asyncio
import itertools
from enum import StrEnum
from typing import Any, Dict, List, Optional, Set

from pydantic import ValidationError

from mcp_test_client.core.exceptions import (
    MCPConnectionError,
    MCPTimeoutError,
    ProtocolError,
    ToolCallError,
)
from mcp_test_client.logging import get_logger
from mcp_test_client.models.json_rpc import (
    METHOD_NOT_FOUND,
    JSONRPCNotification,
    JSONRPCRequest,
    JSONRPCResponse,
    RequestId,
    is_request,
    is_response,
)
from mcp_test_client.models.server import ToolInfo

from .transport import MCPBaseTransport, TransportState

logger = get_logger("mcp_test_client.mcp.session")

PROTOCOL_VERSION = "2024-11-05"
CLIENT_VERSION = "0.3.0"


class SessionState(StrEnum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


_STATE_MAP = {
    TransportState.CONNECTING: SessionState.CONNECTING,
    TransportState.RECONNECTING: SessionState.CONNECTING,
    TransportState.OPEN: SessionState.OPEN,
    TransportState.CLOSED: SessionState.CLOSED,
    TransportState.FAILED: SessionState.CLOSED,
}


class Session:
    """A handshaken MCP connection to one named server."""

    def __init__(
        self,
        name: str,
        transport: MCPBaseTransport,
        *,
        request_timeout: float = 60.0,
    ) -> None:
        self.name = name
        self.transport = transport
        self.request_timeout = request_timeout
        transport.observer = self

        self.server_info: Dict[str, Any] = {}
        self.capabilities: Dict[str, Any] = {}
        self.protocol_version: Optional[str] = None
        self.last_error: Optional[Exception] = None

        self._ids = itertools.count(1)
        self._pending: Dict[RequestId, asyncio.Future] = {}
        self._background: Set[asyncio.Task] = set()
        self._closed = False
        self._failed = False
        self._handshaken = False

    # ------------------------------------------------------------------ #
    # state
    # ------------------------------------------------------------------ #
    @property
    def connection_state(self) -> SessionState:
        if self._closed:
            return SessionState.CLOSED
        return _STATE_MAP[self.transport.state]

    @property
    def reconnect_attempts(self) -> int:
        return getattr(self.transport, "reconnect_attempts", 0)

    @property
    def is_alive(self) -> bool:
        return not (self._closed or self._failed)

    # ------------------------------------------------------------------ #
    # protocol
    # ------------------------------------------------------------------ #
    async def initialize(self) -> None:
        """Open the transport and run the ``initialize`` handshake."""
        await self.transport.open()
        result = await self.request(
            "initialize",
            {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {},
                "clientInfo": {"name": f"test-client-{self.name}", "version": CLIENT_VERSION},
            },
            operation="initialize",
        ) or {}
        self.protocol_version = result.get("protocolVersion")
        self.server_info = result.get("serverInfo", {})
        self.capabilities = result.get("capabilities", {})
        await self.notify("notifications/initialized")
        self._handshaken = True
        logger.debug(
            "Session '%s' initialized (server=%s, protocol=%s)",
            self.name,
            self.server_info.get("name"),
            self.protocol_version,
        )

    async def request(
        self,
        method: str,
        params: Optional[Dict[str, Any]] = None,
        *,
        timeout: float | None = None,
        operation: str | None = None,
    ) -> Any:
        """Send one request and wait for its response's ``result``."""
        if self._closed:
            raise MCPConnectionError(f"Session for '{self.name}' is closed", self.name)
        if self._failed:
            raise MCPConnectionError(f"Session for '{self.name}' is no longer usable", self.name)

        request_id = next(self._ids)
        future = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        message = JSONRPCRequest(id=request_id, method=method, params=params).model_dump(exclude_none=True)
        effective = timeout or self.request_timeout
        try:
            await self.transport.send(message)
            response: JSONRPCResponse = await asyncio.wait_for(future, effective)
        except asyncio.TimeoutError as exc:
            raise MCPTimeoutError(
                f"Request '{method}' to '{self.name}' timed out after {effective}s",
                self.name,
                effective,
            ) from exc
        finally:
            self._pending.pop(request_id, None)

        if response.error is not None:
            raise ToolCallError(
                self.name, operation or method, response.error.message, response.error.code
            )
        return response.result

    async def notify(self, method: str, params: Optional[Dict[str, Any]] = None) -> None:
        message = JSONRPCNotification(method=method, params=params).model_dump(exclude_none=True)
        await self.transport.send(message)

    async def list_tools(self) -> List[ToolInfo]:
        tools: List[ToolInfo] = []
        cursor: Optional[str] = None
        while True:
            params = {"cursor": cursor} if cursor else None
            result = await self.request("tools/list", params, operation="listTools") or {}
            tools.extend(ToolInfo.model_validate(t) for t in result.get("tools", []))
            cursor = result.get("nextCursor")
            if not cursor:
                return tools

    async def call_tool(
        self,
        tool_name: str,
        arguments: Dict[str, Any],
        *,
        timeout: float | None = None,
    ) -> Any:
        return await self.request(
            "tools/call",
            {"name": tool_name, "arguments": arguments},
            timeout=timeout,
            operation=tool_name,
        )

    async def close(self) -> None:
        await self.transport.close()
        # transports that never report closure still leave no waiter behind
        self.on_close()

    # ------------------------------------------------------------------ #
    # TransportObserver
    # ------------------------------------------------------------------ #
    def on_open(self) -> None:
        if not self._handshaken:
            logger.debug("Transport for '%s' is open", self.name)
            return
        # a reconnect lands on a new server-side session that never saw initialize
        logger.warning("Transport for '%s' reconnected; session must be rebuilt", self.name)
        self._failed = True
        self._fail_pending(MCPConnectionError(f"Connection to '{self.name}' was reset", self.name))

    def on_message(self, message: Dict[str, Any]) -> None:
        if is_response(message):
            try:
                response = JSONRPCResponse.model_validate(message)
            except ValidationError as exc:
                self.on_error(ProtocolError(f"Malformed response from '{self.name}': {exc}", self.name))
                return
            future = self._pending.get(response.id)  # type: ignore[arg-type]
            if future is None:
                logger.debug("Dropping response for unknown request id %r from %s", response.id, self.name)
            elif not future.done():
                future.set_result(response)
            return

        if is_request(message):
            task = asyncio.get_running_loop().create_task(self._answer_server_request(message))
            self._background.add(task)
            task.add_done_callback(self._background.discard)
            return

        logger.debug("Notification from %s: %s", self.name, message.get("method"))

    def on_error(self, error: Exception) -> None:
        self.last_error = error
        if isinstance(error, ProtocolError):
            logger.warning("Protocol error on session '%s': %s", self.name, error)
            return
        logger.error("Session '%s' lost its transport: %s", self.name, error)
        self._failed = True
        self._fail_pending(error)

    def on_close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._fail_pending(MCPConnectionError(f"Connection to '{self.name}' closed", self.name))

    # ------------------------------------------------------------------ #
    def _fail_pending(self, error: Exception) -> None:
        for future in list(self._pending.values()):
            if not future.done():
                future.set_exception(error)

    async def _answer_server_request(self, message: Dict[str, Any]) -> None:
        method = message.get("method")
        if method == "ping":
            reply: Dict[str, Any] = {"jsonrpc": "2.0", "id": message["id"], "result": {}}
        else:
            reply = {
                "jsonrpc": "2.0",
                "id": message["id"],
                "error": {"code": METHOD_NOT_FOUND, "message": f"Method not found: {method}"},
            }
        try:
            await self.transport.send(reply)
        except MCPConnectionError as exc:
            logger.debug("Could not answer %s request from %s: %s", method, self.name, exc)

    def __repr__(self) -> str:
        return f"Session(name={self.name}, state={self.connection_state.value})"
