"""
Zaguán SDK - async client for the Zaguán multi-provider chat gateway.
"""

import logging

from .client import RequestOptions, ZaguanClient
from .errors import (
    APIError,
    BandAccessDeniedError,
    EmptyStreamError,
    InsufficientCreditsError,
    RateLimitError,
    StreamDecodeError,
    ValidationError,
    ZaguanError,
    classify_error,
)
from .params import RequestValidation, validate_chat_request
from .reconstruct import MessageAccumulator, reconstruct_message, reconstruct_stream
from .streaming import ChunkStream, StreamState
from .thinking import ThinkingExtraction, extract_thinking, has_reasoning_tokens
from .types import (
    ChatChunk,
    ChatMessage,
    ChatRequest,
    ChatResponse,
    ToolCall,
    Usage,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "ZaguanClient",
    "RequestOptions",
    "ZaguanError",
    "ValidationError",
    "EmptyStreamError",
    "StreamDecodeError",
    "APIError",
    "RateLimitError",
    "InsufficientCreditsError",
    "BandAccessDeniedError",
    "classify_error",
    "RequestValidation",
    "validate_chat_request",
    "MessageAccumulator",
    "reconstruct_message",
    "reconstruct_stream",
    "ChunkStream",
    "StreamState",
    "ThinkingExtraction",
    "extract_thinking",
    "has_reasoning_tokens",
    "ChatChunk",
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "ToolCall",
    "Usage",
]
