"""Chat request, response and stream-chunk models."""

from __future__ import annotations

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from zaguan.types.tool import ToolCall, ToolCallDelta

__all__ = [
    "Role",
    "ContentPart",
    "ChatMessage",
    "Delta",
    "ChunkChoice",
    "ChatChunk",
    "TokenDetails",
    "Usage",
    "Choice",
    "ChatResponse",
    "ChatRequest",
]

Role = Literal["system", "user", "assistant", "tool", "function"]


class ContentPart(BaseModel):
    """One part of a multimodal message (text, image or audio)."""

    model_config = ConfigDict(frozen=True, extra="allow")

    type: Literal["text", "image_url", "input_audio"]
    text: Optional[str] = None
    image_url: Optional[dict[str, Any]] = None
    input_audio: Optional[dict[str, Any]] = None


class ChatMessage(BaseModel):
    """A complete chat message. Immutable once constructed."""

    model_config = ConfigDict(frozen=True, extra="allow")

    # roles the gateway adds later still decode
    role: Union[Role, str]
    content: Union[str, tuple[ContentPart, ...], None] = None
    tool_calls: Optional[tuple[ToolCall, ...]] = None
    tool_call_id: Optional[str] = None
    name: Optional[str] = None


class Delta(BaseModel):
    """
    The partial message carried by a stream chunk.

    Any subset of the fields may be present; a missing field means
    "no change" for that field.
    """

    model_config = ConfigDict(extra="allow")

    role: Optional[str] = None
    content: Optional[str] = None
    tool_calls: Optional[list[ToolCallDelta]] = None


class ChunkChoice(BaseModel):
    model_config = ConfigDict(extra="allow")

    index: int = 0
    delta: Delta = Field(default_factory=Delta)
    finish_reason: Optional[str] = None


class TokenDetails(BaseModel):
    model_config = ConfigDict(extra="allow")

    reasoning_tokens: Optional[int] = None
    cached_tokens: Optional[int] = None
    audio_tokens: Optional[int] = None
    accepted_prediction_tokens: Optional[int] = None
    rejected_prediction_tokens: Optional[int] = None


class Usage(BaseModel):
    model_config = ConfigDict(extra="allow")

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    prompt_tokens_details: Optional[TokenDetails] = None
    completion_tokens_details: Optional[TokenDetails] = None


class ChatChunk(BaseModel):
    """One event of a streamed chat completion."""

    model_config = ConfigDict(extra="allow")

    id: str
    object: str = "chat.completion.chunk"
    created: int = 0
    model: str
    choices: list[ChunkChoice] = Field(default_factory=list)
    usage: Optional[Usage] = None
    system_fingerprint: Optional[str] = None


class Choice(BaseModel):
    model_config = ConfigDict(extra="allow")

    index: int = 0
    message: ChatMessage
    finish_reason: Optional[str] = None


class ChatResponse(BaseModel):
    """
    A complete chat completion, either returned directly by the gateway or
    reconstructed from a stream of `ChatChunk` events.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    object: str = "chat.completion"
    created: int = 0
    model: str
    choices: list[Choice] = Field(default_factory=list)
    usage: Optional[Usage] = None
    system_fingerprint: Optional[str] = None

    @property
    def message(self) -> Optional[ChatMessage]:
        """Message of the first choice, if any."""
        return self.choices[0].message if self.choices else None

    @property
    def content(self) -> Optional[str]:
        """Text content of the first choice; multimodal parts are joined."""
        message = self.message
        if message is None or message.content is None:
            return None
        if isinstance(message.content, str):
            return message.content
        return "".join(part.text or "" for part in message.content)

    @property
    def finish_reason(self) -> Optional[str]:
        return self.choices[0].finish_reason if self.choices else None


class ChatRequest(BaseModel):
    """
    Chat completion request.

    Provider-specific options not modelled here may be passed as extra
    keyword arguments; they are forwarded to the gateway unchanged.
    """

    model_config = ConfigDict(extra="allow")

    model: str
    messages: list[Union[ChatMessage, dict[str, Any]]]
    stream: Optional[bool] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    top_p: Optional[float] = None
    stop: Optional[Union[str, list[str]]] = None
    tools: Optional[list[dict[str, Any]]] = None
    tool_choice: Optional[Union[str, dict[str, Any]]] = None
    response_format: Optional[dict[str, Any]] = None
    reasoning_effort: Optional[str] = None
    thinking: Optional[bool] = None
    provider_specific_params: Optional[dict[str, Any]] = None
    metadata: Optional[dict[str, Any]] = None
