# mcp_test_client/mcp/registry.py
"""
Name → endpoint registry for SSE servers.

Registrations are stable by default: registering a known name again is a
no-op unless ``force=True``.  Replacing or removing a registration runs the
eviction hooks (the client cache subscribes one) so no session keeps talking
to an endpoint the name no longer points at.
"""
from __future__ import annotations

from typing import Awaitable, Callable, Dict, Iterator, List

from mcp_test_client.core.exceptions import ServerNotFoundError
from mcp_test_client.logging import get_logger
from mcp_test_client.models.server import ServerRegistration

logger = get_logger("mcp_test_client.mcp.registry")

EvictionHook = Callable[[str], Awaitable[None]]


class ConnectionRegistry:
    def __init__(self) -> None:
        self._servers: Dict[str, ServerRegistration] = {}
        self._hooks: List[EvictionHook] = []

    def add_eviction_hook(self, hook: EvictionHook) -> None:
        self._hooks.append(hook)

    # ------------------------------------------------------------------ #
    async def register(self, name: str, endpoint: str, force: bool = False) -> ServerRegistration:
        """Bind *name* to *endpoint*; returns the registration now in effect."""
        existing = self._servers.get(name)
        if existing is not None and not force:
            logger.info("Server '%s' already registered. Use force=True to re-register.", name)
            return existing

        registration = ServerRegistration(name=name, endpoint=endpoint)

        if existing is not None:
            logger.debug("Server '%s' was previously registered, cleaning up...", name)
            del self._servers[name]
            await self._evict(name)

        self._servers[name] = registration
        logger.info("Registered SSE server '%s' at %s", name, endpoint)
        return registration

    async def unregister(self, name: str) -> None:
        if name not in self._servers:
            logger.warning("No SSE server registered with name '%s'", name)
            return
        del self._servers[name]
        await self._evict(name)
        logger.info("Unregistered SSE server '%s'", name)

    def lookup(self, name: str) -> ServerRegistration:
        try:
            return self._servers[name]
        except KeyError:
            raise ServerNotFoundError(name) from None

    def names(self) -> List[str]:
        return sorted(self._servers)

    # ------------------------------------------------------------------ #
    async def _evict(self, name: str) -> None:
        for hook in self._hooks:
            try:
                await hook(name)
            except Exception as exc:  # noqa: BLE001 - cleanup is best-effort
                logger.debug("Error while cleaning up client for '%s': %s", name, exc)

    def __contains__(self, name: object) -> bool:
        return name in self._servers

    def __len__(self) -> int:
        return len(self._servers)

    def __iter__(self) -> Iterator[ServerRegistration]:
        return iter(list(self._servers.values()))
