# mcp_test_client/mcp/client_cache.py
"""
Cache of live sessions keyed by server name.

* Sessions are created lazily and handshaken before they are cached.
* A cached session is probed before reuse; a dead one is replaced
  transparently, so callers only ever see extra latency.
* A per-name ``asyncio.Lock`` keeps at most one session per name even when
  several coroutines ask at once.
"""
from __future__ import annotations

import asyncio
from typing import Callable, Dict, List, Optional

from mcp_test_client.config import TransportConfig
from mcp_test_client.core.exceptions import MCPConnectionError, ServerNotFoundError, ToolCallError
from mcp_test_client.logging import get_logger

from .registry import ConnectionRegistry
from .session import Session
from .transport import MCPBaseTransport, SSETransport

logger = get_logger("mcp_test_client.mcp.client_cache")

TransportFactory = Callable[[str, str, TransportConfig], MCPBaseTransport]

_UNREACHABLE_MARKERS = (
    "econnrefused",
    "refused",
    "unreachable",
    "timeout",
    "timed out",
    "not connected",
    "closed",
)


def _default_transport_factory(name: str, endpoint: str, config: TransportConfig) -> MCPBaseTransport:
    return SSETransport(name, endpoint, config=config)


def is_unreachable_error(error: BaseException) -> bool:
    """True when *error* says the endpoint is down rather than the call being bad."""
    if isinstance(error, MCPConnectionError):
        return True
    message = str(error).lower()
    return any(marker in message for marker in _UNREACHABLE_MARKERS)


class ClientCache:
    def __init__(
        self,
        registry: ConnectionRegistry,
        *,
        transport_config: TransportConfig | None = None,
        transport_factory: TransportFactory | None = None,
        request_timeout: float = 60.0,
    ) -> None:
        self.registry = registry
        self.transport_config = transport_config or TransportConfig()
        self.request_timeout = request_timeout
        self._transport_factory = transport_factory or _default_transport_factory
        self._sessions: Dict[str, Session] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        registry.add_eviction_hook(self.evict)

    # ------------------------------------------------------------------ #
    # lookup
    # ------------------------------------------------------------------ #
    async def get_session(self, name: str) -> Session:
        """Return the cached session for *name*, creating it if needed."""
        session = self._sessions.get(name)
        if session is not None:
            return session
        async with self._lock_for(name):
            session = self._sessions.get(name)
            if session is None:
                session = await self._create(name)
            return session

    async def acquire(self, name: str) -> Session:
        """Like :meth:`get_session`, but verify a cached session first."""
        session = self._sessions.get(name)
        if session is None:
            return await self.get_session(name)

        logger.debug("Verifying cached connection to server '%s'", name)
        alive = session.is_alive and await session.transport.probe(self.transport_config.probe_timeout)
        if not alive:
            logger.debug("Cached connection to server '%s' is broken, will reconnect", name)
            await self.discard(name, session)
        return await self.get_session(name)

    def get_cached(self, name: str) -> Optional[Session]:
        return self._sessions.get(name)

    # ------------------------------------------------------------------ #
    # eviction
    # ------------------------------------------------------------------ #
    async def evict(self, name: str) -> None:
        """Drop and close the session for *name*; closing errors are only logged."""
        lock = self._locks.get(name)
        if lock is not None and not lock.locked():
            del self._locks[name]
        session = self._sessions.pop(name, None)
        if session is None:
            return
        try:
            await session.close()
        except Exception as exc:  # noqa: BLE001 - cleanup is best-effort
            logger.debug("Error while closing session for '%s': %s", name, exc)

    async def discard(self, name: str, session: Session, error: BaseException | None = None) -> bool:
        """
        Evict *session* if it is still the cached one for *name*.

        With *error* given, only evict when the error looks like connectivity
        loss.  A newer session created by a forced re-registration is never
        touched.
        """
        if self._sessions.get(name) is not session:
            return False
        if error is not None and not is_unreachable_error(error):
            return False
        logger.debug("Removing cached connection to server '%s'", name)
        await self.evict(name)
        return True

    async def close_all(self) -> None:
        for name in list(self._sessions):
            await self.evict(name)

    def names(self) -> List[str]:
        return sorted(self._sessions)

    def __contains__(self, name: object) -> bool:
        return name in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    # ------------------------------------------------------------------ #
    # creation
    # ------------------------------------------------------------------ #
    def _lock_for(self, name: str) -> asyncio.Lock:
        return self._locks.setdefault(name, asyncio.Lock())

    async def _create(self, name: str) -> Session:
        registration = self.registry.lookup(name)
        transport = self._transport_factory(name, registration.endpoint, self.transport_config)
        session = Session(name, transport, request_timeout=self.request_timeout)

        logger.debug("Connecting to SSE server '%s' at %s...", name, registration.endpoint)
        try:
            await session.initialize()
        except Exception as exc:
            logger.error("Error creating client for server '%s': %s", name, exc)
            await self._close_quietly(session)
            raise ToolCallError(name, "connect", getattr(exc, "message", None) or str(exc)) from exc

        current = self.registry.lookup(name) if name in self.registry else None
        if current is not registration:
            # re-registered or unregistered while the handshake was running
            await self._close_quietly(session)
            if current is None:
                raise ServerNotFoundError(name)
            raise MCPConnectionError(f"Registration for '{name}' changed while connecting", name)

        self._sessions[name] = session
        logger.debug("Connected to SSE server '%s'", name)
        return session

    @staticmethod
    async def _close_quietly(session: Session) -> None:
        try:
            await session.close()
        except Exception as exc:  # noqa: BLE001
            logger.debug("Error while closing session for '%s': %s", session.name, exc)
