# mcp_test_client/logging/formatter.py
"""JSON-lines formatter used when structured logging is enabled."""
from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from typing import Any

from pydantic import BaseModel

__all__ = ["StructuredFormatter"]


class StructuredFormatter(logging.Formatter):
    """Render every record as one JSON object per line."""

    @staticmethod
    def _json_default(obj: Any) -> Any:
        if isinstance(obj, BaseModel):
            return obj.model_dump()
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, (set, frozenset)):
            return list(obj)
        return str(obj)

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = getattr(record, "context", None)
        if context:
            payload["context"] = context
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=self._json_default)
