# mcp_test_client/models/server.py
"""Server registrations and tool descriptors."""
from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ServerRegistration(BaseModel):
    """A logical server name bound to the URL of its SSE endpoint."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    endpoint: str

    @field_validator("endpoint")
    @classmethod
    def _check_endpoint(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"endpoint must be an http(s) URL, got {value!r}")
        return value


class ToolInfo(BaseModel):
    """One entry of a ``tools/list`` response."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    description: Optional[str] = None
    input_schema: Optional[Dict[str, Any]] = Field(default=None, alias="inputSchema")
