"""
Tool-call shapes, complete and partial.

A streamed tool call arrives as a run of `ToolCallDelta` fragments whose
`function.arguments` pieces must be concatenated; `ToolCall` is the
assembled form found on a final message.
"""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

__all__ = ["ToolCallFunction", "ToolCall", "FunctionDelta", "ToolCallDelta"]


class ToolCallFunction(BaseModel):
    """Function name plus its JSON-encoded arguments (kept opaque)."""

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str
    arguments: str = ""


class ToolCall(BaseModel):
    """A complete tool call requested by the model."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id: str
    type: Literal["function"] = "function"
    function: ToolCallFunction


class FunctionDelta(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    arguments: Optional[str] = None


class ToolCallDelta(BaseModel):
    """One streamed fragment of a tool call. Every field may be missing."""

    model_config = ConfigDict(extra="allow")

    index: Optional[int] = None
    id: Optional[str] = None
    type: Optional[str] = None
    function: Optional[FunctionDelta] = None
