"""
Decoder for the gateway's line-delimited event stream.

Each event line has the form ``data: <json chunk>``; the stream ends with
the literal line ``data: [DONE]``. `ChunkStream` turns the raw transport
body into a lazy, forward-only sequence of `ChatChunk` values.
"""
from __future__ import annotations

import codecs
import logging
from collections import deque
from enum import Enum
from typing import AsyncIterable, Awaitable, Callable, Final, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from zaguan.errors import StreamDecodeError
from zaguan.types import ChatChunk

__all__ = ["ChunkStream", "StreamState", "DONE_SENTINEL"]

DONE_SENTINEL: Final = "[DONE]"
_DATA_PREFIX: Final = "data:"

_logger = logging.getLogger(__name__)


class StreamState(str, Enum):
    STREAMING = "streaming"
    DONE = "done"
    FAILED = "failed"


def _event_payload(line: str) -> Optional[str]:
    """Return the payload of a ``data:`` line, or None for lines to skip."""
    line = line.strip()
    if not line.startswith(_DATA_PREFIX):
        # blank keep-alives, ":" comments and other SSE fields
        return None
    payload = line[len(_DATA_PREFIX):].strip()
    return payload or None


class ChunkStream:
    """
    Cursor over a streamed chat completion.

    Consumed either with ``async for`` or by awaiting `next()`, which
    returns the next chunk, returns None once the stream has ended, or
    raises. The first failure (a malformed payload or any exception from
    the underlying transport) moves the stream to `StreamState.FAILED`
    and is re-raised to the caller; it is never swallowed. Advancing a
    failed stream again raises `StreamDecodeError` chained to that first
    failure, so a failed stream never reads as a clean end.

    Args:
        source: Async iterable of raw body pieces (bytes or str).
        request_id: Correlation id attached to decode errors.
        on_close: Coroutine function called exactly once when the stream
            reaches a terminal state or is closed early.
        logger: Optional logger; defaults to this module's logger.
    """

    def __init__(
        self,
        source: AsyncIterable[Union[bytes, str]],
        *,
        request_id: Optional[str] = None,
        on_close: Optional[Callable[[], Awaitable[None]]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._source = source.__aiter__()
        self._decoder = codecs.getincrementaldecoder("utf-8")()
        self._buffer = ""
        self._lines: deque[str] = deque()
        self._eof = False
        self._on_close = on_close
        self._closed = False
        self._failure: Optional[BaseException] = None
        self.request_id = request_id
        self.logger = logger or _logger
        self.state = StreamState.STREAMING

    def __aiter__(self) -> "ChunkStream":
        return self

    async def __anext__(self) -> ChatChunk:
        chunk = await self.next()
        if chunk is None:
            raise StopAsyncIteration
        return chunk

    async def next(self) -> Optional[ChatChunk]:
        if self.state is StreamState.FAILED:
            raise StreamDecodeError(
                "Stream already failed", payload="", request_id=self.request_id
            ) from self._failure
        if self.state is not StreamState.STREAMING:
            return None
        try:
            while True:
                line = await self._next_line()
                if line is None:
                    await self._finish(StreamState.DONE)
                    return None
                payload = _event_payload(line)
                if payload is None:
                    continue
                if payload == DONE_SENTINEL:
                    await self._finish(StreamState.DONE)
                    return None
                return self._decode(payload)
        except BaseException as exc:
            # transport errors and cancellation end the stream too
            self._failure = exc
            await self._finish(StreamState.FAILED)
            raise

    async def aclose(self) -> None:
        """Stop consuming the stream and release the transport."""
        if self.state is StreamState.STREAMING:
            self.state = StreamState.DONE
        await self._release()

    async def __aenter__(self) -> "ChunkStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # --- internals ---------------------------------------------------------
    async def _next_line(self) -> Optional[str]:
        while not self._lines:
            if self._eof:
                return None
            try:
                piece = await self._source.__anext__()
            except StopAsyncIteration:
                self._eof = True
                tail = self._buffer + self._text(b"", final=True)
                self._buffer = ""
                if tail:
                    self._lines.append(tail)
                continue
            if isinstance(piece, bytes):
                piece = self._text(piece)
            lines = (self._buffer + piece).split("\n")
            self._buffer = lines.pop()
            self._lines.extend(lines)
        return self._lines.popleft()

    def _text(self, raw: bytes, final: bool = False) -> str:
        try:
            return self._decoder.decode(raw, final=final)
        except UnicodeDecodeError as exc:
            raise StreamDecodeError(
                f"Stream body is not valid UTF-8: {exc.reason}",
                payload=repr(raw),
                request_id=self.request_id,
            ) from exc

    def _decode(self, payload: str) -> ChatChunk:
        try:
            return ChatChunk.model_validate_json(payload)
        except PydanticValidationError as exc:
            self.logger.warning(
                "Malformed payload in chat stream",
                extra={"request_id": self.request_id, "payload": payload[:200]},
            )
            raise StreamDecodeError(
                f"Malformed chunk payload in stream: {payload[:80]!r}",
                payload=payload,
                request_id=self.request_id,
            ) from exc

    async def _finish(self, state: StreamState) -> None:
        self.state = state
        await self._release()

    async def _release(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._on_close is not None:
            await self._on_close()
