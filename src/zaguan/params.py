"""
Request validation for zaguan.

Contract
- A request is a `ChatRequest` or a plain dict with at least:
    model: non-empty str
    messages: non-empty list of dicts or `ChatMessage`
- Every other key is forwarded to the gateway unchanged.
- Keys under `extra` are lifted to the top level; explicit top-level keys
  win over them.

`validate_chat_request` never raises. It returns a `RequestValidation`
that either holds the JSON-ready payload or the reason it was rejected;
the client turns a rejection into `ValidationError` at its public
boundary, before any network call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from zaguan.types import ChatMessage, ChatRequest

__all__ = ["RequestValidation", "validate_chat_request"]


@dataclass(frozen=True, slots=True)
class RequestValidation:
    payload: Optional[dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, payload: dict[str, Any]) -> "RequestValidation":
        return cls(payload=payload)

    @classmethod
    def failure(cls, error: str) -> "RequestValidation":
        return cls(error=error)


def _message_dict(message: Any) -> Optional[dict[str, Any]]:
    if isinstance(message, ChatMessage):
        return message.model_dump(mode="json", exclude_none=True)
    if isinstance(message, Mapping):
        return dict(message)
    return None


def validate_chat_request(
    request: Union[ChatRequest, Mapping[str, Any]],
    *,
    stream: Optional[bool] = None,
) -> RequestValidation:
    """
    Check the request shape and build the payload sent on the wire.

    Args:
        request: The caller's request.
        stream: When given, forces the payload's ``stream`` flag.

    Example
    -------
    >>> validate_chat_request({"model": "", "messages": []}).error
    'model is required and must be a non-empty string'
    """
    if isinstance(request, ChatRequest):
        data = request.model_dump(mode="json", exclude_none=True)
    elif isinstance(request, Mapping):
        data = dict(request)
    else:
        return RequestValidation.failure(
            f"request must be a ChatRequest or a dict, got {type(request).__name__}"
        )

    model = data.get("model")
    if not isinstance(model, str) or not model.strip():
        return RequestValidation.failure("model is required and must be a non-empty string")

    messages = data.get("messages")
    if not isinstance(messages, (list, tuple)) or not messages:
        return RequestValidation.failure("messages is required and must be a non-empty list")

    wire_messages: list[dict[str, Any]] = []
    for i, message in enumerate(messages):
        converted = _message_dict(message)
        if converted is None:
            return RequestValidation.failure(
                f"messages[{i}] must be a dict or ChatMessage, got {type(message).__name__}"
            )
        wire_messages.append(converted)
    data["messages"] = wire_messages

    extra = data.pop("extra", None) or {}
    if not isinstance(extra, Mapping):
        return RequestValidation.failure("extra must be a dict")
    for key, value in extra.items():
        data.setdefault(key, value)

    if stream is not None:
        data["stream"] = stream
    return RequestValidation.success(data)
