# mcp_test_client/logging/context.py
"""
Async-safe logging context.

The context lives in a :class:`contextvars.ContextVar`, so every asyncio task
sees its own copy and concurrent test runs never bleed into each other.
"""
from __future__ import annotations

import contextvars
import logging
import uuid
from typing import Any, Dict, Optional

__all__ = ["LogContext", "log_context", "ContextFilter", "get_logger"]

_CONTEXT: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar(
    "mcp_test_client_log_context", default={}
)


class LogContext:
    """Key/value pairs attached to every record emitted in the current task."""

    @property
    def context(self) -> Dict[str, Any]:
        return _CONTEXT.get()

    @property
    def request_id(self) -> Optional[str]:
        return self.context.get("request_id")

    def update(self, values: Dict[str, Any]) -> None:
        _CONTEXT.set({**self.context, **values})

    def replace(self, values: Dict[str, Any]) -> None:
        _CONTEXT.set(dict(values))

    def clear(self) -> None:
        _CONTEXT.set({})

    def get_copy(self) -> Dict[str, Any]:
        return dict(self.context)

    def start_request(self, request_id: str | None = None) -> str:
        rid = request_id or str(uuid.uuid4())
        self.update({"request_id": rid})
        return rid


log_context = LogContext()


class ContextFilter(logging.Filter):
    """Copy the active context onto each record as ``record.context``."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = log_context.get_copy()
        extra = getattr(record, "context", None)
        if isinstance(extra, dict):
            ctx.update(extra)
        record.context = ctx
        return True


def get_logger(name: str) -> logging.Logger:
    """Return a stdlib logger; names outside the package are namespaced under it."""
    if not name.startswith("mcp_test_client"):
        name = f"mcp_test_client.{name}"
    return logging.getLogger(name)
