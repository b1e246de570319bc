# mcp_test_client/models/call_result.py
"""Outcome of a single tool invocation."""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class CallResult(BaseModel):
    """
    Either a normalized ``result`` or an ``error`` message, plus timing.

    ``reachable`` tells whether the server produced any answer at all, even a
    tool-level failure.
    """

    result: Any = None
    error: Optional[str] = None
    duration_ms: float = Field(default=0.0, ge=0)
    reachable: bool = True

    @property
    def is_success(self) -> bool:
        return self.error is None
