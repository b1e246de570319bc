# mcp_test_client/client.py
"""
High-level entry point.

:class:`MCPTestClient` wires the registry, session cache, invoker and test
runner together and exposes the operations a front end binds to::

    async with MCPTestClient() as client:
        await client.register_server("calc", "http://localhost:8000/sse")
        result = await client.call_tool("calc", "add", {"a": 2, "b": 3})
        report = await client.run_tests("calc")
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from mcp_test_client.config import ClientConfig
from mcp_test_client.lifecycle import ProcessLifecycle, RegistryLifecycle
from mcp_test_client.logging import get_logger, setup_logging
from mcp_test_client.mcp.client_cache import ClientCache, TransportFactory
from mcp_test_client.mcp.invoker import Invoker
from mcp_test_client.mcp.registry import ConnectionRegistry
from mcp_test_client.models.call_result import CallResult
from mcp_test_client.models.server import ServerRegistration, ToolInfo
from mcp_test_client.models.test_case import TestRunReport
from mcp_test_client.testing.runner import TestRunner
from mcp_test_client.testing.suites import SuiteLoader

logger = get_logger("mcp_test_client.client")


class MCPTestClient:
    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        transport_factory: Optional[TransportFactory] = None,
        lifecycle: Optional[ProcessLifecycle] = None,
    ) -> None:
        self.config = config or ClientConfig()
        self.registry = ConnectionRegistry()
        self.cache = ClientCache(
            self.registry,
            transport_config=self.config.transport,
            transport_factory=transport_factory,
            request_timeout=self.config.request_timeout,
        )
        self.invoker = Invoker(self.cache)
        self.lifecycle: ProcessLifecycle = lifecycle or RegistryLifecycle(self.registry)
        self.runner = TestRunner(self.invoker, self.lifecycle, SuiteLoader(self.config.suite_dir))

    @classmethod
    async def from_env(cls, **kwargs: Any) -> MCPTestClient:
        """Build a client from ``MCP_TEST_*`` variables and set up logging."""
        config = ClientConfig.from_env()
        await setup_logging(level=config.log_level, structured=config.structured_logs)
        return cls(config, **kwargs)

    # ------------------------------------------------------------------ #
    # servers
    # ------------------------------------------------------------------ #
    async def register_server(self, name: str, endpoint: str, force: bool = False) -> ServerRegistration:
        return await self.registry.register(name, endpoint, force=force)

    async def unregister_server(self, name: str) -> None:
        await self.registry.unregister(name)

    def list_servers(self) -> List[str]:
        return self.registry.names()

    # ------------------------------------------------------------------ #
    # tools and tests
    # ------------------------------------------------------------------ #
    async def call_tool(
        self,
        server_name: str,
        tool_name: str,
        arguments: Optional[Dict[str, Any]] = None,
        *,
        timeout: float | None = None,
    ) -> CallResult:
        return await self.invoker.call(server_name, tool_name, arguments, timeout=timeout)

    async def list_tools(self, server_name: str) -> List[ToolInfo]:
        return await self.invoker.list_tools(server_name)

    async def run_tests(self, server_name: str, suite_name: Optional[str] = None) -> TestRunReport:
        return await self.runner.run_tests(server_name, suite_name)

    # ------------------------------------------------------------------ #
    async def close(self) -> None:
        logger.debug("Closing %d cached session(s)", len(self.cache))
        await self.cache.close_all()

    async def __aenter__(self) -> MCPTestClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"MCPTestClient(servers={self.registry.names()}, sessions={len(self.cache)})"
