# mcp_test_client/mcp/transport/sse_transport.py
"""
SSE transport for MCP servers.

Inbound traffic arrives on a long-lived ``GET`` event stream; outbound
JSON-RPC messages are ``POST``-ed to the URL announced by the server's
``endpoint`` event.

One *supervisor* task per transport owns the stream.  It opens it, waits for
the first sign of life, hands control back to :meth:`SSETransport.open`
through a future, and on a stream failure runs the bounded exponential
backoff loop itself, so reconnect attempts on one instance can never overlap.
"""
from __future__ import annotations

import asyncio
import contextlib
import json
import time
from typing import Any, Dict, Optional, Tuple
from urllib.parse import parse_qs, urljoin, urlparse

import httpx

from mcp_test_client.config import TransportConfig
from mcp_test_client.core.exceptions import MCPConnectionError, MCPTimeoutError, ProtocolError
from mcp_test_client.logging import get_logger

from .base_transport import MCPBaseTransport, TransportObserver, backoff_delay
from .models import TransportMetrics, TransportState
from .sse_parser import SSEEvent, iter_sse_events

logger = get_logger("mcp_test_client.mcp.transport.sse_transport")

# Non-JSON frames containing this are connection acknowledgements, not errors.
_HANDSHAKE_MARKER = "connected"


def _consume_exception(fut: asyncio.Future) -> None:
    if not fut.cancelled():
        fut.exception()


class SSETransport(MCPBaseTransport):
    """One reconnecting SSE connection to one named server."""

    def __init__(
        self,
        server_name: str,
        url: str,
        *,
        config: TransportConfig | None = None,
        client: httpx.AsyncClient | None = None,
        headers: Dict[str, str] | None = None,
        observer: TransportObserver | None = None,
    ) -> None:
        self.server_name = server_name
        self.url = url
        self.config = config or TransportConfig()
        self.headers = dict(headers or {})
        self.observer = observer

        self.message_url: Optional[str] = None
        self.session_id: Optional[str] = None
        self.reconnect_attempts = 0
        self.metrics = TransportMetrics()

        self._client = client
        self._owns_client = client is None
        self._state = TransportState.CLOSED
        self._shutdown = False
        self._supervisor: Optional[asyncio.Task] = None
        self._reader: Optional[asyncio.Task] = None
        self._ready: Optional[asyncio.Future] = None

        logger.debug("Creating SSE transport for server '%s' at %s", server_name, url)

    # ------------------------------------------------------------------ #
    # public API
    # ------------------------------------------------------------------ #
    @property
    def state(self) -> TransportState:
        return self._state

    async def open(self) -> None:
        if self._shutdown:
            raise MCPConnectionError(f"Transport for '{self.server_name}' is closed", self.server_name)
        if self._state is TransportState.OPEN:
            return
        if self._supervisor is None or self._supervisor.done():
            self._state = TransportState.CONNECTING
            self._ready = self._new_ready()
            self._supervisor = asyncio.create_task(
                self._supervise(), name=f"sse-transport-{self.server_name}"
            )
        # joins a reconnect that is already running instead of starting another
        await asyncio.shield(self._ready)

    async def send(self, message: Dict[str, Any]) -> None:
        if self._shutdown:
            raise MCPConnectionError(f"Transport for '{self.server_name}' is closed", self.server_name)
        if not self.is_connected():
            logger.debug("SSE transport not connected for %s, attempting to reconnect", self.server_name)
            await self.open()

        target = self.message_url or self.url
        timeout = self.config.send_timeout
        self.metrics.total_calls += 1
        started = time.perf_counter()
        try:
            response = await self._ensure_client().post(
                target,
                json=message,
                headers={**self.headers, "Content-Type": "application/json", "Accept": "application/json"},
                timeout=timeout,
            )
        except httpx.TimeoutException as exc:
            self._record_send(started, success=False)
            raise MCPTimeoutError(
                f"Timeout sending to '{self.server_name}' after {timeout}s", self.server_name, timeout
            ) from exc
        except httpx.HTTPError as exc:
            self._record_send(started, success=False)
            raise MCPConnectionError(
                f"Error sending to '{self.server_name}': {exc}", self.server_name
            ) from exc

        if not response.is_success:
            self._record_send(started, success=False)
            raise MCPConnectionError(
                f"HTTP error when sending to '{self.server_name}': "
                f"{response.status_code} {response.reason_phrase}",
                self.server_name,
            )
        self._record_send(started, success=True)
        self._deliver_inline(response)

    async def probe(self, timeout: float | None = None) -> bool:
        if self._shutdown or self._state is TransportState.FAILED:
            return False
        started = time.perf_counter()
        try:
            await self._ensure_client().head(
                self.url, headers=self.headers, timeout=timeout or self.config.probe_timeout
            )
        except httpx.HTTPError as exc:
            logger.debug("Liveness probe for '%s' failed: %s", self.server_name, exc)
            return False
        self.metrics.last_probe_time = time.perf_counter() - started
        return True

    async def close(self) -> None:
        if self._shutdown:
            return
        self._shutdown = True
        self._state = TransportState.CLOSED

        supervisor, self._supervisor = self._supervisor, None
        if supervisor is not None and supervisor is not asyncio.current_task():
            supervisor.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await supervisor
        await self._cancel_reader()

        if self._ready is not None and not self._ready.done():
            self._ready.set_exception(
                MCPConnectionError(f"Transport for '{self.server_name}' closed", self.server_name)
            )
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

        self.message_url = None
        self.session_id = None
        logger.debug(
            "Closed SSE transport for %s (calls=%d, failed=%d)",
            self.server_name,
            self.metrics.total_calls,
            self.metrics.failed_calls,
        )
        self._notify_close()

    def get_metrics(self) -> Dict[str, Any]:
        return self.metrics.to_dict()

    def reset_metrics(self) -> None:
        self.metrics = TransportMetrics()

    # ------------------------------------------------------------------ #
    # supervisor
    # ------------------------------------------------------------------ #
    async def _supervise(self) -> None:
        started = time.perf_counter()
        try:
            while not self._shutdown:
                error = await self._connect_once()
                if error is not None:
                    if self._state is TransportState.CONNECTING:
                        # initial open: report to the caller, never retried here
                        self._state = TransportState.CLOSED
                        self._resolve_ready(error)
                        return
                    logger.warning("Failed to reconnect to %s: %s", self.server_name, error)
                    if not await self._backoff():
                        self._fail(error)
                        return
                    continue

                if self._state is TransportState.RECONNECTING:
                    self.metrics.connection_resets += 1
                    logger.info("Successfully reconnected to %s", self.server_name)
                if self.metrics.initialization_time is None:
                    self.metrics.initialization_time = time.perf_counter() - started
                self._state = TransportState.OPEN
                self.reconnect_attempts = 0
                self._resolve_ready(None)
                self._notify_open()

                assert self._reader is not None
                error = await self._reader
                if self._shutdown:
                    return
                self.metrics.stream_errors += 1
                logger.error("SSE connection error with %s: %s", self.server_name, error)
                self._state = TransportState.RECONNECTING
                self._ready = self._new_ready()
                if not await self._backoff():
                    self._fail(error)
                    return
        finally:
            await self._cancel_reader()

    async def _connect_once(self) -> Optional[MCPConnectionError]:
        await self._cancel_reader()
        opened = asyncio.get_running_loop().create_future()
        opened.add_done_callback(_consume_exception)
        self._reader = asyncio.create_task(
            self._read_stream(opened), name=f"sse-reader-{self.server_name}"
        )
        timeout = self.config.connect_timeout
        try:
            await asyncio.wait_for(asyncio.shield(opened), timeout)
        except asyncio.TimeoutError:
            await self._cancel_reader()
            self.metrics.connection_errors += 1
            return MCPTimeoutError(
                f"Timeout connecting to SSE server {self.server_name}", self.server_name, timeout
            )
        except MCPConnectionError as exc:
            await self._cancel_reader()
            return exc
        return None

    async def _backoff(self) -> bool:
        """Sleep before the next attempt; False once every allowed attempt is used."""
        limit = self.config.max_reconnect_attempts
        if self.reconnect_attempts >= limit:
            return False
        self.reconnect_attempts += 1
        self.metrics.recovery_attempts += 1
        delay = backoff_delay(self.reconnect_attempts, self.config.reconnect_base_delay)
        logger.info(
            "Attempting to reconnect to %s in %.1fs (attempt %d/%d)",
            self.server_name,
            delay,
            self.reconnect_attempts,
            limit,
        )
        await asyncio.sleep(delay)
        return not self._shutdown

    def _fail(self, error: MCPConnectionError) -> None:
        self._state = TransportState.FAILED
        fatal = MCPConnectionError(
            f"SSE connection to '{self.server_name}' failed after "
            f"{self.config.max_reconnect_attempts} attempts: {error.message}",
            self.server_name,
        )
        logger.error("%s", fatal.message)
        self._resolve_ready(fatal)
        self._notify_error(fatal)

    # ------------------------------------------------------------------ #
    # inbound stream
    # ------------------------------------------------------------------ #
    async def _read_stream(self, opened: asyncio.Future) -> MCPConnectionError:
        """Consume the stream until it ends; return the error that ended it."""
        try:
            async with self._ensure_client().stream(
                "GET",
                self.url,
                headers={**self.headers, "Accept": "text/event-stream", "Cache-Control": "no-cache"},
                timeout=httpx.Timeout(self.config.connect_timeout, read=None),
            ) as response:
                if response.status_code != 200:
                    raise MCPConnectionError(
                        f"SSE connection to '{self.server_name}' failed: HTTP {response.status_code}",
                        self.server_name,
                    )
                logger.debug("Established SSE connection to %s", self.url)
                async for event in iter_sse_events(response.aiter_lines()):
                    self._handle_event(event, opened)
            error = MCPConnectionError(
                f"SSE stream from '{self.server_name}' closed by server", self.server_name
            )
        except MCPConnectionError as exc:
            error = exc
        except (httpx.HTTPError, httpx.StreamError) as exc:
            self.metrics.connection_errors += 1
            error = MCPConnectionError(
                f"SSE connection error with '{self.server_name}': {exc}", self.server_name
            )
        if not opened.done():
            opened.set_exception(error)
        return error

    def _handle_event(self, event: SSEEvent, opened: asyncio.Future) -> None:
        if event.event == "endpoint":
            self._set_endpoint(event.data)
            self._mark_open(opened)
            return
        if not event.data.strip():
            return

        logger.debug("Received raw SSE message from %s: %s", self.server_name, event.data)
        try:
            message = json.loads(event.data)
        except json.JSONDecodeError:
            if _HANDSHAKE_MARKER in event.data.lower():
                logger.debug("Received connection confirmation from %s", self.server_name)
                self._mark_open(opened)
                return
            self._report_protocol_error("Unparseable SSE frame", event.data)
            return

        if not isinstance(message, dict):
            self._report_protocol_error("SSE frame is not a JSON-RPC object", event.data)
            return
        self._mark_open(opened)
        self._notify_message(message)

    def _set_endpoint(self, data: str) -> None:
        self.message_url = urljoin(self.url, data.strip())
        query = parse_qs(urlparse(self.message_url).query)
        ids = query.get("session_id") or query.get("sessionId")
        self.session_id = ids[0] if ids else None
        self.metrics.session_discoveries += 1
        logger.debug("Server '%s' announced endpoint %s", self.server_name, self.message_url)

    def _report_protocol_error(self, reason: str, raw: str) -> None:
        self.metrics.stream_errors += 1
        error = ProtocolError(f"{reason} from '{self.server_name}'", self.server_name, raw)
        logger.warning("%s", error.message)
        self._notify_error(error)

    def _deliver_inline(self, response: httpx.Response) -> None:
        """Some servers answer a POST directly instead of over the stream."""
        if response.status_code != 200:
            return
        if "application/json" not in response.headers.get("content-type", ""):
            return
        try:
            body = response.json()
        except ValueError:
            return
        if isinstance(body, dict) and "id" in body and ("result" in body or "error" in body):
            self._notify_message(body)

    # ------------------------------------------------------------------ #
    # helpers
    # ------------------------------------------------------------------ #
    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(follow_redirects=True)
        return self._client

    def _new_ready(self) -> asyncio.Future:
        fut = asyncio.get_running_loop().create_future()
        fut.add_done_callback(_consume_exception)
        return fut

    def _resolve_ready(self, error: Optional[Exception]) -> None:
        if self._ready is None or self._ready.done():
            return
        if error is None:
            self._ready.set_result(None)
        else:
            self._ready.set_exception(error)

    @staticmethod
    def _mark_open(opened: asyncio.Future) -> None:
        if not opened.done():
            opened.set_result(None)

    async def _cancel_reader(self) -> None:
        reader, self._reader = self._reader, None
        if reader is None or reader is asyncio.current_task():
            return
        if not reader.done():
            reader.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await reader

    def _record_send(self, started: float, success: bool) -> None:
        self.metrics.update_call_metrics(time.perf_counter() - started, success)

    def __repr__(self) -> str:
        total = self.metrics.total_calls
        rate = (self.metrics.successful_calls / total * 100) if total else 0.0
        return (
            f"SSETransport(server={self.server_name}, status={self._state.value}, "
            f"url={self.url}, calls: {total}, success: {rate:.1f}%)"
        )
