# mcp_test_client/testing/runner.py
"""
Test runner.

Cases run strictly one after another through the :class:`Invoker`; a failing
call becomes a failing :class:`TestResult` and the run continues.  Only an
unknown server aborts the run.  Any other setup problem (tool listing, suite
loading) is reported as a single failing ``Test suite setup`` result.
"""
from __future__ import annotations

import time
from typing import List, Optional

from mcp_test_client.core.exceptions import ServerNotFoundError
from mcp_test_client.lifecycle import ProcessLifecycle
from mcp_test_client.logging import get_logger, log_context_span
from mcp_test_client.mcp.invoker import Invoker
from mcp_test_client.models.server import ToolInfo
from mcp_test_client.models.test_case import RunSummary, TestCase, TestResult, TestRunReport

from .comparison import evaluate
from .suites import SuiteLoader

logger = get_logger("mcp_test_client.testing.runner")

SETUP_TEST_NAME = "Test suite setup"


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000.0


def smoke_tests(tools: List[ToolInfo]) -> List[TestCase]:
    """One reachability test per tool: empty input, no expectation."""
    return [
        TestCase(
            name=f"List {tool.name} schema",
            description=f"Check that {tool.name} is available and has a valid schema",
            tool_name=tool.name,
            input={},
        )
        for tool in tools
    ]


class TestRunner:
    __test__ = False

    def __init__(
        self,
        invoker: Invoker,
        lifecycle: ProcessLifecycle,
        suite_loader: Optional[SuiteLoader] = None,
    ) -> None:
        self.invoker = invoker
        self.lifecycle = lifecycle
        self.suite_loader = suite_loader

    async def run_tests(self, server_name: str, suite_name: Optional[str] = None) -> TestRunReport:
        start = time.perf_counter()
        try:
            if not self.lifecycle.exists(server_name):
                raise ServerNotFoundError(server_name)
            cases = await self._load_cases(server_name, suite_name)
            results = [await self.run_case(server_name, case) for case in cases]
        except ServerNotFoundError:
            raise
        except Exception as exc:
            logger.error("Error running tests for server '%s': %s", server_name, exc)
            message = getattr(exc, "message", None) or str(exc)
            duration = _elapsed_ms(start)
            setup = TestResult(
                name=SETUP_TEST_NAME,
                passed=False,
                message=f"Failed to setup test suite: {message}",
                duration_ms=duration,
                error=message,
            )
            return TestRunReport(summary=RunSummary.from_results([setup], duration), results=[setup])

        summary = RunSummary.from_results(results, _elapsed_ms(start))
        logger.info(
            "Ran %d tests against '%s': %d passed, %d failed",
            summary.total,
            server_name,
            summary.passed,
            summary.failed,
        )
        return TestRunReport(summary=summary, results=results)

    async def run_case(self, server_name: str, case: TestCase) -> TestResult:
        start = time.perf_counter()
        async with log_context_span("test_case", {"server": server_name, "test": case.name}):
            call = await self.invoker.call(server_name, case.tool_name, case.input)
        duration = _elapsed_ms(start)

        if call.error is not None:
            return TestResult(
                name=case.name,
                passed=False,
                message=f"Tool call failed: {call.error}",
                duration_ms=duration,
                error=call.error,
                reachable=call.reachable,
            )

        if case.expectation is None:
            passed, message = True, "Test passed"
        else:
            passed, message = evaluate(case.expectation, call.result)
        return TestResult(
            name=case.name,
            passed=passed,
            message=message,
            duration_ms=duration,
            reachable=True,
        )

    async def _load_cases(self, server_name: str, suite_name: Optional[str]) -> List[TestCase]:
        if suite_name is None:
            tools = await self.invoker.list_tools(server_name)
            return smoke_tests(tools)
        if self.suite_loader is None:
            raise ValueError(f"No suite directory configured to load '{suite_name}'")
        return self.suite_loader.load(suite_name).tests
