# mcp_test_client/lifecycle.py
"""
Server lifecycle collaborator.

The test runner only needs to know whether a server exists before it starts
a run.  Deploying and stopping servers belongs to whatever manages their
processes; plug such a manager in by implementing :class:`ProcessLifecycle`.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from mcp_test_client.mcp.registry import ConnectionRegistry


@runtime_checkable
class ProcessLifecycle(Protocol):
    def exists(self, name: str) -> bool: ...


class RegistryLifecycle:
    """A server exists exactly when it is registered."""

    def __init__(self, registry: ConnectionRegistry) -> None:
        self.registry = registry

    def exists(self, name: str) -> bool:
        return name in self.registry
