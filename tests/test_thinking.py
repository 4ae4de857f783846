"""Tests for reasoning extraction helpers."""

import pytest

from zaguan import ZaguanClient, extract_thinking, has_reasoning_tokens
from zaguan.types import Usage


class TestExtractThinking:
    """Test splitting of inline reasoning from the answer."""

    def test_single_block(self):
        result = extract_thinking("<think>Let me work this out</think>The answer is 42")

        assert result.thinking == "Let me work this out"
        assert result.response == "The answer is 42"

    def test_analysis_block(self):
        text = "<think>Let me analyze...</think>Based on my analysis, the answer is 42."

        result = extract_thinking(text)

        assert result.thinking == "Let me analyze..."
        assert result.response == "Based on my analysis, the answer is 42."

    def test_multiple_blocks_joined(self):
        text = "<think>First thought</think>Some text<think>Second thought</think>Final answer"

        result = extract_thinking(text)

        assert result.thinking == "First thought\n\nSecond thought"
        assert result.response == "Some textFinal answer"

    def test_no_tags(self):
        result = extract_thinking("Just an answer")

        assert result.thinking is None
        assert result.response == "Just an answer"

    def test_empty_text(self):
        result = extract_thinking("")

        assert result.thinking is None
        assert result.response == ""

    def test_text_before_first_block_is_kept(self):
        result = extract_thinking("Intro <think>hmm</think> outro")

        assert result.thinking == "hmm"
        assert result.response == "Intro  outro"

    def test_empty_block(self):
        result = extract_thinking("<think></think>answer")

        assert result.thinking == ""
        assert result.response == "answer"

    def test_multiline_block(self):
        result = extract_thinking("<think>line 1\nline 2</think>done")

        assert result.thinking == "line 1\nline 2"

    def test_unterminated_tag_stays_literal(self):
        """Test that an unclosed tag is kept in the response."""
        result = extract_thinking("Answer <think>never closed")

        assert result.thinking is None
        assert result.response == "Answer <think>never closed"

    def test_unterminated_tag_after_complete_block(self):
        result = extract_thinking("<think>a</think>mid<think>tail")

        assert result.thinking == "a"
        assert result.response == "mid<think>tail"

    def test_stray_close_tag_is_literal(self):
        result = extract_thinking("oops</think> answer")

        assert result.thinking is None
        assert result.response == "oops</think> answer"

    def test_available_on_client_class(self):
        assert ZaguanClient.extract_thinking("<think>x</think>y").response == "y"


class TestHasReasoningTokens:
    """Test detection of reasoning-token usage."""

    @pytest.mark.parametrize(
        "usage, expected",
        [
            ({"completion_tokens_details": {"reasoning_tokens": 100}}, True),
            ({"completion_tokens_details": {"reasoning_tokens": 0}}, False),
            ({"completion_tokens_details": {}}, False),
            ({"prompt_tokens": 10}, False),
            ({"completion_tokens_details": None}, False),
            (None, False),
        ],
    )
    def test_mapping_usage(self, usage, expected):
        assert has_reasoning_tokens(usage) is expected

    def test_model_usage(self):
        usage = Usage.model_validate(
            {"total_tokens": 5, "completion_tokens_details": {"reasoning_tokens": 3}}
        )

        assert has_reasoning_tokens(usage) is True
        assert has_reasoning_tokens(Usage()) is False
