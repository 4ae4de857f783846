"""Fold streamed chunks back into one complete chat response."""
from __future__ import annotations

from typing import Any, AsyncIterable, Iterable, Mapping, Optional, Union

from zaguan.errors import EmptyStreamError
from zaguan.types import (
    ChatChunk,
    ChatMessage,
    ChatResponse,
    Choice,
    ChunkChoice,
    ToolCall,
    ToolCallDelta,
    ToolCallFunction,
    Usage,
)

__all__ = ["MessageAccumulator", "reconstruct_message", "reconstruct_stream"]

_DEFAULT_ROLE = "assistant"


class _ChoiceAccumulator:
    """Running state for one `choices[].index`."""

    __slots__ = ("index", "role", "content", "finish_reason", "tool_calls", "_by_id", "_by_index")

    def __init__(self, index: int) -> None:
        self.index = index
        self.role: Optional[str] = None
        self.content: Optional[str] = None
        self.finish_reason: Optional[str] = None
        self.tool_calls: list[dict[str, str]] = []
        self._by_id: dict[str, int] = {}
        self._by_index: dict[int, int] = {}

    def add(self, choice: ChunkChoice) -> None:
        delta = choice.delta
        if self.role is None and delta.role:
            self.role = delta.role
        if delta.content is not None:
            self.content = (self.content or "") + delta.content
        for fragment in delta.tool_calls or ():
            self._add_tool_call(fragment)
        if choice.finish_reason:
            self.finish_reason = choice.finish_reason

    def _slot_for(self, fragment: ToolCallDelta) -> int:
        if fragment.id and fragment.id in self._by_id:
            return self._by_id[fragment.id]
        if fragment.index is not None and fragment.index in self._by_index:
            slot = self._by_index[fragment.index]
            # same position, unless it introduces a different id
            if not fragment.id or not self.tool_calls[slot]["id"]:
                return slot
        elif fragment.index is None and not fragment.id and self.tool_calls:
            # positionless continuation of the latest call
            return len(self.tool_calls) - 1

        self.tool_calls.append({"id": "", "name": "", "arguments": ""})
        slot = len(self.tool_calls) - 1
        if fragment.index is not None:
            self._by_index[fragment.index] = slot
        return slot

    def _add_tool_call(self, fragment: ToolCallDelta) -> None:
        slot = self._slot_for(fragment)
        entry = self.tool_calls[slot]
        if fragment.id and not entry["id"]:
            entry["id"] = fragment.id
            self._by_id[fragment.id] = slot
        if fragment.function is not None:
            if fragment.function.name and not entry["name"]:
                entry["name"] = fragment.function.name
            if fragment.function.arguments:
                entry["arguments"] += fragment.function.arguments

    def build(self) -> Choice:
        tool_calls = tuple(
            ToolCall(
                id=tc["id"],
                function=ToolCallFunction(name=tc["name"], arguments=tc["arguments"]),
            )
            for tc in self.tool_calls
        )
        message = ChatMessage(
            role=self.role or _DEFAULT_ROLE,
            content=self.content,
            tool_calls=tool_calls or None,
        )
        return Choice(index=self.index, message=message, finish_reason=self.finish_reason)


class MessageAccumulator:
    """
    Incremental fold of `ChatChunk` values into a `ChatResponse`.

    Feeding the same chunks one at a time with `add` or all at once through
    `reconstruct_message` gives the same result.

    - ``id``, ``object``, ``created`` and ``model`` come from the first
      chunk and are never overwritten.
    - Each choice index has its own accumulator: content is concatenated,
      the first role wins, tool-call argument fragments are joined, and a
      finish reason once seen is never cleared.
    - The last ``usage`` seen and the first ``system_fingerprint`` are kept.
    """

    def __init__(self) -> None:
        self._first: Optional[ChatChunk] = None
        self._choices: dict[int, _ChoiceAccumulator] = {}
        self._usage: Optional[Usage] = None
        self._system_fingerprint: Optional[str] = None
        self.chunk_count = 0

    def add(self, chunk: Union[ChatChunk, Mapping[str, Any]]) -> None:
        if not isinstance(chunk, ChatChunk):
            chunk = ChatChunk.model_validate(chunk)
        if self._first is None:
            self._first = chunk
        self.chunk_count += 1

        if self._system_fingerprint is None and chunk.system_fingerprint:
            self._system_fingerprint = chunk.system_fingerprint
        if chunk.usage is not None:
            self._usage = chunk.usage

        for choice in chunk.choices:
            acc = self._choices.get(choice.index)
            if acc is None:
                acc = self._choices[choice.index] = _ChoiceAccumulator(choice.index)
            acc.add(choice)

    def result(self) -> ChatResponse:
        if self._first is None:
            raise EmptyStreamError()
        first = self._first
        return ChatResponse(
            id=first.id,
            object=first.object,
            created=first.created,
            model=first.model,
            choices=[self._choices[i].build() for i in sorted(self._choices)],
            usage=self._usage,
            system_fingerprint=self._system_fingerprint,
        )


def reconstruct_message(
    chunks: Iterable[Union[ChatChunk, Mapping[str, Any]]],
) -> ChatResponse:
    """
    Rebuild a complete response from an already collected chunk sequence.

    Raises:
        EmptyStreamError: if *chunks* is empty.
    """
    acc = MessageAccumulator()
    for chunk in chunks:
        acc.add(chunk)
    return acc.result()


async def reconstruct_stream(chunks: AsyncIterable[ChatChunk]) -> ChatResponse:
    """
    Consume a live chunk stream and rebuild the complete response.

    Any error raised by the stream propagates; partial state is dropped.
    """
    acc = MessageAccumulator()
    async for chunk in chunks:
        acc.add(chunk)
    return acc.result()
