"""Shared fixtures: an in-memory MCP server and a scriptable transport."""

import asyncio
import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from mcp_test_client.config import TransportConfig
from mcp_test_client.core.exceptions import MCPConnectionError
from mcp_test_client.logging import log_context
from mcp_test_client.mcp.transport import MCPBaseTransport, TransportState

Handler = Callable[[Dict[str, Any]], Optional[Dict[str, Any]]]

CALC_TOOLS = [
    {
        "name": "add",
        "description": "Add two numbers",
        "inputSchema": {
            "type": "object",
            "properties": {"a": {"type": "number"}, "b": {"type": "number"}},
        },
    },
    {"name": "echo", "description": "Echo the arguments back", "inputSchema": {"type": "object"}},
    {"name": "boom", "description": "Always reports a failure", "inputSchema": {"type": "object"}},
]


def text_result(text: str) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": text}]}


def calc_server(message: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Answer one JSON-RPC message the way a small calculator server would."""
    if "id" not in message or "method" not in message:
        return None
    method = message["method"]
    params = message.get("params") or {}

    if method == "initialize":
        result: Any = {
            "protocolVersion": "2024-11-05",
            "serverInfo": {"name": "calc", "version": "1.0.0"},
            "capabilities": {"tools": {}},
        }
    elif method == "tools/list":
        result = {"tools": CALC_TOOLS}
    elif method == "tools/call":
        name = params.get("name")
        args = params.get("arguments") or {}
        if name == "add":
            result = text_result(str(args.get("a", 0) + args.get("b", 0)))
        elif name == "echo":
            result = text_result(json.dumps(args))
        elif name == "boom":
            result = {"content": [{"type": "text", "text": "boom"}], "isError": True}
        elif name == "reject":
            result = {"content": [{"type": "text", "text": '{"reason": "bad input"}'}], "isError": True}
        elif name == "slow":
            return None
        else:
            return {
                "jsonrpc": "2.0",
                "id": message["id"],
                "error": {"code": -32602, "message": f"Unknown tool: {name}"},
            }
    else:
        return {
            "jsonrpc": "2.0",
            "id": message["id"],
            "error": {"code": -32601, "message": f"Method not found: {method}"},
        }
    return {"jsonrpc": "2.0", "id": message["id"], "result": result}


class FakeTransport(MCPBaseTransport):
    """Delivers the handler's replies back through the observer on the next loop tick."""

    def __init__(self, name: str, endpoint: str, handler: Handler = calc_server) -> None:
        self.name = name
        self.endpoint = endpoint
        self.handler = handler
        self.sent: List[Dict[str, Any]] = []
        self.open_calls = 0
        self.open_error: Optional[Exception] = None
        self.send_error: Optional[Exception] = None
        self.alive = True
        self.closed = False
        self._state = TransportState.CLOSED

    @property
    def state(self) -> TransportState:
        return self._state

    async def open(self) -> None:
        self.open_calls += 1
        if self.open_error is not None:
            raise self.open_error
        self._state = TransportState.OPEN
        self._notify_open()

    async def send(self, message: Dict[str, Any]) -> None:
        if self.closed:
            raise MCPConnectionError(f"Transport for '{self.name}' is closed", self.name)
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(message)
        reply = self.handler(message)
        if reply is not None:
            asyncio.get_running_loop().call_soon(self._notify_message, reply)

    async def probe(self, timeout: float | None = None) -> bool:
        return self.alive and not self.closed

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._state = TransportState.CLOSED
        self._notify_close()

    def drop(self, error: Exception) -> None:
        """Simulate the transport giving up on the server."""
        self._state = TransportState.FAILED
        self.alive = False
        self._notify_error(error)

    def methods(self) -> List[str]:
        return [m.get("method", "<response>") for m in self.sent]


class FakeTransportFactory:
    """Transport factory that remembers every transport it built."""

    def __init__(self, handler: Handler = calc_server) -> None:
        self.handler = handler
        self.created: List[FakeTransport] = []
        self.open_error: Optional[Exception] = None

    def __call__(self, name: str, endpoint: str, config: TransportConfig) -> FakeTransport:
        transport = FakeTransport(name, endpoint, self.handler)
        transport.open_error = self.open_error
        self.created.append(transport)
        return transport

    @property
    def last(self) -> FakeTransport:
        return self.created[-1]


@pytest.fixture
def transport_factory():
    return FakeTransportFactory()


@pytest.fixture
def fake_transport():
    return FakeTransport("calc", "http://calc.test/sse")


@pytest.fixture(autouse=True)
def reset_log_context():
    """Keep the logging context from leaking between tests."""
    log_context.clear()
    yield
    log_context.clear()


# --------------------------------------------------------------------------- #
# In-process SSE server for httpx.MockTransport
# --------------------------------------------------------------------------- #
class EventStream(httpx.AsyncByteStream):
    """An event-stream body the test can keep writing to."""

    def __init__(self) -> None:
        self.queue: asyncio.Queue = asyncio.Queue()

    def push(self, text: str) -> None:
        self.queue.put_nowait(text.encode())

    def end(self) -> None:
        self.queue.put_nowait(None)

    async def __aiter__(self):
        while True:
            chunk = await self.queue.get()
            if chunk is None:
                return
            yield chunk

    async def aclose(self) -> None:
        pass


def announce_endpoint(stream: EventStream) -> None:
    stream.push("event: endpoint\ndata: /messages?session_id=abc123\n\n")


class MockSSEServer:
    """
    Minimal MCP-over-SSE server.

    ``GET`` opens an event stream and calls ``on_connect(stream, n)`` with the
    1-based connection number; ``POST`` bodies go through ``handler`` and the
    reply is written to the latest stream (or returned inline).
    """

    def __init__(self, handler: Handler = calc_server) -> None:
        self.handler = handler
        self.streams: List[EventStream] = []
        self.posts: List[tuple] = []
        self.gets = 0
        self.on_connect: Callable[[EventStream, int], None] = lambda stream, n: announce_endpoint(stream)
        self.get_error: Optional[str] = None
        self.get_status = 200
        self.post_status = 202
        self.post_exception: Optional[type] = None
        self.head_error: Optional[str] = None
        self.inline = False

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            self.gets += 1
            if self.get_error is not None:
                raise httpx.ConnectError(self.get_error, request=request)
            if self.get_status != 200:
                return httpx.Response(self.get_status)
            stream = EventStream()
            self.streams.append(stream)
            self.on_connect(stream, self.gets)
            return httpx.Response(200, headers={"content-type": "text/event-stream"}, stream=stream)

        if request.method == "HEAD":
            if self.head_error is not None:
                raise httpx.ConnectError(self.head_error, request=request)
            return httpx.Response(200)

        message = json.loads(request.content)
        self.posts.append((str(request.url), message))
        if self.post_exception is not None:
            raise self.post_exception("post failed", request=request)
        if self.post_status >= 400:
            return httpx.Response(self.post_status)
        reply = self.handler(message)
        if reply is not None:
            if self.inline:
                return httpx.Response(200, json=reply)
            self.streams[-1].push(f"data: {json.dumps(reply)}\n\n")
        return httpx.Response(self.post_status)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


async def eventually(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll *predicate* until it holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


@pytest.fixture
def sse_server():
    return MockSSEServer()
