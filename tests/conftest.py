"""Shared fixtures: canned stream chunks and a client wired to a mock transport."""

import json
from typing import Any, Callable, Optional

import httpx
import pytest

from zaguan import ZaguanClient

BASE_URL = "https://api.zaguan.example.com"


def make_chunk(
    content: Optional[str] = None,
    *,
    role: Optional[str] = None,
    finish_reason: Optional[str] = None,
    index: int = 0,
    tool_calls: Optional[list[dict[str, Any]]] = None,
    chunk_id: str = "chatcmpl-123",
    model: str = "openai/gpt-4o-mini",
    **top_level: Any,
) -> dict[str, Any]:
    delta: dict[str, Any] = {}
    if role is not None:
        delta["role"] = role
    if content is not None:
        delta["content"] = content
    if tool_calls is not None:
        delta["tool_calls"] = tool_calls
    return {
        "id": chunk_id,
        "object": "chat.completion.chunk",
        "created": 1234567890,
        "model": model,
        "choices": [{"index": index, "delta": delta, "finish_reason": finish_reason}],
        **top_level,
    }


def sse_body(*chunks: dict[str, Any], done: bool = True) -> bytes:
    lines = [f"data: {json.dumps(c, ensure_ascii=False)}\n\n" for c in chunks]
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode("utf-8")


@pytest.fixture
def make_client() -> Callable[..., ZaguanClient]:
    """Build a client whose HTTP traffic is answered by *handler*."""

    def factory(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> ZaguanClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return ZaguanClient(BASE_URL, "test-key", http_client=http_client, **kwargs)

    return factory
