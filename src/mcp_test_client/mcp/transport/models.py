# mcp_test_client/mcp/transport/models.py
"""Transport state machine and metrics."""
from __future__ import annotations

from enum import StrEnum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class TransportState(StrEnum):
    """
    Lifecycle of one transport.

    CLOSED → CONNECTING → OPEN → RECONNECTING → OPEN | FAILED, and any state
    → CLOSED on ``close()``.  FAILED is terminal until someone calls
    ``open()`` again.
    """

    CONNECTING = "connecting"
    OPEN = "open"
    RECONNECTING = "reconnecting"
    CLOSED = "closed"
    FAILED = "failed"


class TransportMetrics(BaseModel):
    """Counters a transport keeps about itself."""

    model_config = ConfigDict(validate_assignment=True)

    total_calls: int = 0
    successful_calls: int = 0
    failed_calls: int = 0
    total_time: float = 0.0
    avg_response_time: float = 0.0
    last_probe_time: Optional[float] = None
    initialization_time: Optional[float] = None
    connection_resets: int = 0
    stream_errors: int = 0
    connection_errors: int = 0
    recovery_attempts: int = 0
    session_discoveries: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()

    def update_call_metrics(self, response_time: float, success: bool) -> None:
        if success:
            self.successful_calls += 1
        else:
            self.failed_calls += 1
        self.total_time += response_time
        if self.total_calls > 0:
            self.avg_response_time = self.total_time / self.total_calls
