"""
Helpers for reasoning output.

Some providers (Perplexity, DeepSeek, Qwen) inline their reasoning in the
answer text between ``<think>`` and ``</think>``; `extract_thinking`
separates it from the visible answer.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final, Mapping, Optional, Union

from zaguan.types import Usage

__all__ = ["ThinkingExtraction", "extract_thinking", "has_reasoning_tokens"]

OPEN_TAG: Final = "<think>"
CLOSE_TAG: Final = "</think>"
SEGMENT_SEPARATOR: Final = "\n\n"


@dataclass(frozen=True, slots=True)
class ThinkingExtraction:
    thinking: Optional[str]
    response: str


def extract_thinking(text: str) -> ThinkingExtraction:
    """
    Split *text* into reasoning and visible answer.

    Tag pairs are matched left to right without overlap. Their contents are
    joined with a blank line to form ``thinking``; everything outside the
    pairs, concatenated in order, forms ``response``. An opening tag with no
    closing tag after it is left in ``response`` as literal text, along with
    the rest of the string.

    Example
    -------
    >>> extract_thinking("<think>hmm</think>42")
    ThinkingExtraction(thinking='hmm', response='42')
    """
    segments: list[str] = []
    outside: list[str] = []
    pos = 0
    while True:
        start = text.find(OPEN_TAG, pos)
        if start == -1:
            break
        end = text.find(CLOSE_TAG, start + len(OPEN_TAG))
        if end == -1:
            break  # unterminated
        outside.append(text[pos:start])
        segments.append(text[start + len(OPEN_TAG):end])
        pos = end + len(CLOSE_TAG)

    if not segments:
        return ThinkingExtraction(thinking=None, response=text)
    outside.append(text[pos:])
    return ThinkingExtraction(
        thinking=SEGMENT_SEPARATOR.join(segments),
        response="".join(outside),
    )


def has_reasoning_tokens(usage: Union[Usage, Mapping[str, Any], None]) -> bool:
    """True when the usage reports a positive ``reasoning_tokens`` count."""
    if usage is None:
        return False
    if isinstance(usage, Usage):
        details = usage.completion_tokens_details
        count = details.reasoning_tokens if details is not None else None
    else:
        details = usage.get("completion_tokens_details") or {}
        count = details.get("reasoning_tokens")
    return isinstance(count, int) and not isinstance(count, bool) and count > 0
