# mcp_test_client/mcp/transport/base_transport.py
"""
Abstract transport contract.

A transport owns one duplex connection to one server: inbound messages and
lifecycle events are pushed to a :class:`TransportObserver`, outbound
messages go through :meth:`MCPBaseTransport.send`.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Protocol

from mcp_test_client.logging import get_logger

from .models import TransportState

logger = get_logger("mcp_test_client.mcp.transport.base_transport")


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Delay before reconnect *attempt* (1-based): ``base × 2^(attempt-1)``."""
    if attempt < 1:
        raise ValueError("attempt must be >= 1")
    return base_delay * (2 ** (attempt - 1))


class TransportObserver(Protocol):
    def on_open(self) -> None: ...

    def on_message(self, message: Dict[str, Any]) -> None: ...

    def on_error(self, error: Exception) -> None: ...

    def on_close(self) -> None: ...


class MCPBaseTransport(ABC):
    """Base class every transport implementation derives from."""

    observer: Optional[TransportObserver] = None

    # ------------------------------------------------------------------ #
    # contract
    # ------------------------------------------------------------------ #
    @property
    @abstractmethod
    def state(self) -> TransportState: ...

    @abstractmethod
    async def open(self) -> None:
        """Establish the inbound stream; raise MCPConnectionError on failure."""

    @abstractmethod
    async def send(self, message: Dict[str, Any]) -> None:
        """Deliver one outbound JSON-RPC message."""

    @abstractmethod
    async def close(self) -> None:
        """Release everything; idempotent."""

    @abstractmethod
    async def probe(self, timeout: float | None = None) -> bool:
        """Cheap liveness check against the endpoint."""

    def is_connected(self) -> bool:
        return self.state is TransportState.OPEN

    # ------------------------------------------------------------------ #
    # observer dispatch
    # ------------------------------------------------------------------ #
    def _notify(self, hook: str, *args: Any) -> None:
        if self.observer is None:
            return
        try:
            getattr(self.observer, hook)(*args)
        except Exception:
            logger.exception("Transport observer failed in %s", hook)

    def _notify_open(self) -> None:
        self._notify("on_open")

    def _notify_message(self, message: Dict[str, Any]) -> None:
        self._notify("on_message", message)

    def _notify_error(self, error: Exception) -> None:
        self._notify("on_error", error)

    def _notify_close(self) -> None:
        self._notify("on_close")

    # ------------------------------------------------------------------ #
    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
