# mcp_test_client/models/normalized_result.py
"""
Canonical form of a ``tools/call`` result.

MCP servers answer with a ``content`` list of typed items, but plenty of
servers (and tests) hand back plain structured values.  Everything is mapped
onto one of three tagged shapes:

* :class:`TextContent` – the first ``text`` item, not valid JSON.
* :class:`ParsedJson` – the first ``text`` item, decoded as JSON.
* :class:`RawValue` – anything else, passed through untouched.
"""
from __future__ import annotations

import json
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field


class RawValue(BaseModel):
    kind: Literal["raw"] = "raw"
    raw: Any = None

    @property
    def value(self) -> Any:
        return self.raw


class TextContent(BaseModel):
    kind: Literal["text"] = "text"
    text: str

    @property
    def value(self) -> Any:
        return self.text


class ParsedJson(BaseModel):
    kind: Literal["json"] = "json"
    text: str
    data: Any = None

    @property
    def value(self) -> Any:
        return self.data


NormalizedResult = Annotated[Union[RawValue, TextContent, ParsedJson], Field(discriminator="kind")]


def _first_text(content: list[Any]) -> str | None:
    for item in content:
        if isinstance(item, dict) and item.get("type") == "text":
            text = item.get("text")
            return text if isinstance(text, str) and text else None
    return None


def normalize_result(raw: Any) -> RawValue | TextContent | ParsedJson:
    """Map a raw ``tools/call`` result onto its canonical shape."""
    if isinstance(raw, dict) and isinstance(raw.get("content"), list):
        text = _first_text(raw["content"])
        if text is not None:
            try:
                return ParsedJson(text=text, data=json.loads(text))
            except json.JSONDecodeError:
                return TextContent(text=text)
    return RawValue(raw=raw)


def is_error_result(raw: Any) -> bool:
    """True when the server flagged the call itself as failed (``isError``)."""
    return isinstance(raw, dict) and raw.get("isError") is True
