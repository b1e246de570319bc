# mcp_test_client/mcp/invoker.py
"""
Tool invocation through cached sessions.

:meth:`Invoker.call` never raises for call-level failures: it returns a
:class:`~mcp_test_client.models.call_result.CallResult` carrying the error
and the elapsed time, so batch callers can keep going.  An unknown server is
a setup error and still raises :class:`ServerNotFoundError`.
"""
from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

from mcp_test_client.core.exceptions import ServerNotFoundError, ToolCallError
from mcp_test_client.logging import get_logger
from mcp_test_client.models.call_result import CallResult
from mcp_test_client.models.normalized_result import is_error_result, normalize_result
from mcp_test_client.models.server import ToolInfo

from .client_cache import ClientCache
from .session import Session

logger = get_logger("mcp_test_client.mcp.invoker")


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000.0


class Invoker:
    def __init__(self, cache: ClientCache) -> None:
        self.cache = cache

    async def call(
        self,
        server_name: str,
        tool_name: str,
        arguments: Optional[Dict[str, Any]] = None,
        *,
        timeout: float | None = None,
    ) -> CallResult:
        arguments = arguments or {}
        start = time.perf_counter()
        session: Optional[Session] = None
        try:
            session = await self.cache.acquire(server_name)
            logger.debug("Calling tool '%s' on server '%s' with %s", tool_name, server_name, arguments)
            raw = await session.call_tool(tool_name, arguments, timeout=timeout)
        except ServerNotFoundError:
            raise
        except Exception as exc:
            duration = _elapsed_ms(start)
            message = getattr(exc, "message", None) or str(exc) or type(exc).__name__
            logger.error("Error calling tool '%s' on server '%s': %s", tool_name, server_name, message)
            if session is not None and await self.cache.discard(server_name, session, exc):
                logger.debug(
                    "Removed cached connection to server '%s' due to connectivity error", server_name
                )
            reachable = isinstance(exc, ToolCallError) and exc.rpc_code is not None
            return CallResult(result=None, error=message, duration_ms=duration, reachable=reachable)

        duration = _elapsed_ms(start)
        normalized = normalize_result(raw)
        logger.debug("Tool call completed in %.1fms (%s)", duration, normalized.kind)

        if is_error_result(raw):
            # report the text verbatim, even when it parsed as JSON
            error = getattr(normalized, "text", None)
            return CallResult(
                result=None,
                error=error or f"Tool '{tool_name}' reported an error",
                duration_ms=duration,
            )
        return CallResult(result=normalized.value, duration_ms=duration)

    async def list_tools(self, server_name: str) -> List[ToolInfo]:
        """Every tool the server exposes; raises ToolCallError on failure."""
        session: Optional[Session] = None
        try:
            session = await self.cache.acquire(server_name)
            logger.debug("Listing tools for server '%s'", server_name)
            tools = await session.list_tools()
        except (ServerNotFoundError, ToolCallError):
            raise
        except Exception as exc:
            logger.error("Error listing tools for server '%s': %s", server_name, exc)
            if session is not None:
                await self.cache.discard(server_name, session, exc)
            raise ToolCallError(
                server_name, "listTools", getattr(exc, "message", None) or str(exc)
            ) from exc
        logger.debug("Extracted %d tools from response", len(tools))
        return tools
