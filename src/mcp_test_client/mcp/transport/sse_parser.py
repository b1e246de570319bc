# mcp_test_client/mcp/transport/sse_parser.py
"""Line-oriented Server-Sent Events parser."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import AsyncIterable, AsyncIterator, List, Optional

from mcp_test_client.logging import get_logger

logger = get_logger("mcp_test_client.mcp.transport.sse_parser")


@dataclass
class SSEEvent:
    event: str = "message"
    data: str = ""
    id: Optional[str] = None
    retry: Optional[int] = None


@dataclass
class SSEParser:
    """
    Feed decoded lines, get complete events back.

    A blank line dispatches the event being assembled; ``:`` lines are
    comments.  Multiple ``data`` lines are joined with ``\\n``.
    """

    _event: SSEEvent = field(default_factory=SSEEvent)
    _data: List[str] = field(default_factory=list)
    _dirty: bool = False

    def feed_line(self, line: str) -> SSEEvent | None:
        line = line.rstrip("\r\n")
        if not line:
            return self._dispatch()

        if line.startswith(":"):
            return None

        name, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]

        if name == "event":
            self._event.event = value or "message"
        elif name == "data":
            self._data.append(value)
        elif name == "id":
            self._event.id = value
        elif name == "retry":
            try:
                self._event.retry = int(value)
            except ValueError:
                logger.debug("Ignoring invalid SSE retry value %r", value)
                return None
        else:
            return None
        self._dirty = True
        return None

    def _dispatch(self) -> SSEEvent | None:
        if not self._dirty:
            return None
        event = self._event
        event.data = "\n".join(self._data)
        self._event, self._data, self._dirty = SSEEvent(), [], False
        return event


async def iter_sse_events(lines: AsyncIterable[str]) -> AsyncIterator[SSEEvent]:
    """Turn an async iterator of text lines into SSE events."""
    parser = SSEParser()
    async for line in lines:
        event = parser.feed_line(line)
        if event is not None:
            yield event
