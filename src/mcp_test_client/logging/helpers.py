# mcp_test_client/logging/helpers.py
"""Async logging helpers."""
from __future__ import annotations

import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from .context import get_logger, log_context

__all__ = ["log_context_span"]


@asynccontextmanager
async def log_context_span(
    operation: str,
    extra: Optional[Dict[str, Any]] = None,
    *,
    log_duration: bool = True,
) -> AsyncIterator[Dict[str, Any]]:
    """
    Tag every record inside the block with a span id and *operation*.

    The previous context is restored on exit, so spans nest.
    """
    logger = get_logger("mcp_test_client.span")
    previous = log_context.get_copy()
    span = {
        "span_id": str(uuid.uuid4()),
        "operation": operation,
        "start_time": time.time(),
        **(extra or {}),
    }
    log_context.update(span)
    logger.debug("Starting %s", operation)
    started = time.perf_counter()
    try:
        yield log_context.get_copy()
    except Exception:
        logger.exception("Error in %s", operation)
        raise
    finally:
        if log_duration:
            duration = time.perf_counter() - started
            logger.debug(
                "Completed %s",
                operation,
                extra={"context": {**log_context.get_copy(), "duration": duration}},
            )
        else:
            logger.debug("Completed %s", operation)
        log_context.replace(previous)
