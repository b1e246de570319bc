# mcp_test_client/logging/__init__.py
"""
Logging for the MCP test client.

* :func:`get_logger` – namespaced stdlib loggers.
* :func:`setup_logging` – console (and optional file) handlers on the
  package root logger, plain or JSON-lines output.
* :data:`log_context` / :func:`log_context_span` – per-task context that is
  attached to every record.
"""
from __future__ import annotations

import logging
import sys

from .context import ContextFilter, LogContext, get_logger, log_context
from .formatter import StructuredFormatter
from .helpers import log_context_span

__all__ = [
    "ContextFilter",
    "LogContext",
    "StructuredFormatter",
    "get_logger",
    "log_context",
    "log_context_span",
    "setup_logging",
]

_PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


async def setup_logging(
    level: int | str = logging.INFO,
    structured: bool = False,
    log_file: str | None = None,
) -> None:
    """Replace the package root logger's handlers."""
    root = logging.getLogger("mcp_test_client")
    for handler in list(root.handlers):
        root.removeHandler(handler)

    root.setLevel(level)
    formatter: logging.Formatter = (
        StructuredFormatter() if structured else logging.Formatter(_PLAIN_FORMAT)
    )

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    console.addFilter(ContextFilter())
    root.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(ContextFilter())
        root.addHandler(file_handler)

    logging.getLogger("mcp_test_client.logging").info(
        "Logging initialized (level=%s, structured=%s)",
        logging.getLevelName(root.level),
        structured,
    )
