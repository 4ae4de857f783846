"""Tests for the streamed-event decoder."""

import asyncio
import json

import httpx
import pytest

from zaguan.errors import StreamDecodeError
from zaguan.reconstruct import reconstruct_stream
from zaguan.streaming import ChunkStream, StreamState

from conftest import make_chunk, sse_body


async def _pieces(*pieces):
    for piece in pieces:
        yield piece


async def _collect(stream):
    return [chunk async for chunk in stream]


class TestDecoding:
    """Test event framing and chunk decoding."""

    @pytest.mark.asyncio
    async def test_yields_chunks_until_sentinel(self):
        body = sse_body(make_chunk("Hello", role="assistant"), make_chunk(" world"))

        stream = ChunkStream(_pieces(body))
        chunks = await _collect(stream)

        assert [c.choices[0].delta.content for c in chunks] == ["Hello", " world"]
        assert chunks[0].choices[0].delta.role == "assistant"
        assert stream.state is StreamState.DONE

    @pytest.mark.asyncio
    async def test_unlisted_role_decodes(self):
        stream = ChunkStream(_pieces(sse_body(make_chunk("x", role="developer"))))

        chunks = await _collect(stream)

        assert chunks[0].choices[0].delta.role == "developer"
        assert stream.state is StreamState.DONE

    @pytest.mark.asyncio
    async def test_nothing_after_sentinel_is_read(self):
        body = sse_body(make_chunk("a")) + b"data: {not json at all}\n\n"

        stream = ChunkStream(_pieces(body))

        assert len(await _collect(stream)) == 1
        assert stream.state is StreamState.DONE

    @pytest.mark.asyncio
    async def test_skips_blank_comment_and_other_lines(self):
        payload = json.dumps(make_chunk("x"))
        body = f": keep-alive\n\nevent: message\nid: 7\ndata: {payload}\n\ndata: [DONE]\n"

        chunks = await _collect(ChunkStream(_pieces(body)))

        assert len(chunks) == 1
        assert chunks[0].choices[0].delta.content == "x"

    @pytest.mark.asyncio
    async def test_empty_data_line_is_skipped(self):
        payload = json.dumps(make_chunk("x"))
        body = f"data:\n\ndata: {payload}\n\ndata: [DONE]\n\n"

        assert len(await _collect(ChunkStream(_pieces(body)))) == 1

    @pytest.mark.asyncio
    async def test_events_split_across_pieces(self):
        body = sse_body(make_chunk("one"), make_chunk("two"))
        pieces = [body[i : i + 7] for i in range(0, len(body), 7)]

        chunks = await _collect(ChunkStream(_pieces(*pieces)))

        assert [c.choices[0].delta.content for c in chunks] == ["one", "two"]

    @pytest.mark.asyncio
    async def test_multibyte_character_split_between_pieces(self):
        """Test decoding of a UTF-8 sequence split across reads."""
        body = sse_body(make_chunk("héllo ✓"))
        cut = body.index("✓".encode()) + 1

        chunks = await _collect(ChunkStream(_pieces(body[:cut], body[cut:])))

        assert chunks[0].choices[0].delta.content == "héllo ✓"

    @pytest.mark.asyncio
    async def test_crlf_line_endings(self):
        body = sse_body(make_chunk("crlf")).replace(b"\n", b"\r\n")

        chunks = await _collect(ChunkStream(_pieces(body)))

        assert chunks[0].choices[0].delta.content == "crlf"

    @pytest.mark.asyncio
    async def test_end_of_body_without_sentinel_ends_cleanly(self):
        """Test that a body ending without [DONE] is not a failure."""
        body = sse_body(make_chunk("a"), done=False)

        stream = ChunkStream(_pieces(body))
        chunks = await _collect(stream)

        assert len(chunks) == 1
        assert stream.state is StreamState.DONE

    @pytest.mark.asyncio
    async def test_last_line_without_newline_is_decoded(self):
        body = f"data: {json.dumps(make_chunk('tail'))}"

        chunks = await _collect(ChunkStream(_pieces(body)))

        assert chunks[0].choices[0].delta.content == "tail"

    @pytest.mark.asyncio
    async def test_next_returns_none_once_finished(self):
        stream = ChunkStream(_pieces(sse_body(make_chunk("a"))))

        assert (await stream.next()) is not None
        assert (await stream.next()) is None
        assert (await stream.next()) is None


class TestFailures:
    """Test that decode and transport failures end the stream."""

    @pytest.mark.asyncio
    async def test_malformed_payload_fails_stream(self):
        body = sse_body(make_chunk("ok")).replace(b"data: [DONE]", b"data: {broken")

        stream = ChunkStream(_pieces(body), request_id="rid-1")
        assert (await stream.next()) is not None

        with pytest.raises(StreamDecodeError) as excinfo:
            await stream.next()

        assert excinfo.value.payload == "{broken"
        assert excinfo.value.request_id == "rid-1"
        assert stream.state is StreamState.FAILED

    @pytest.mark.asyncio
    async def test_failed_stream_keeps_failing(self):
        """Test that advancing a failed stream raises instead of ending cleanly."""
        stream = ChunkStream(_pieces(b"data: {broken\n\n"), request_id="rid-2")
        with pytest.raises(StreamDecodeError) as first:
            await stream.next()

        with pytest.raises(StreamDecodeError, match="already failed") as again:
            await stream.next()
        assert again.value.__cause__ is first.value
        assert again.value.request_id == "rid-2"

        with pytest.raises(StreamDecodeError):
            [chunk async for chunk in stream]

    @pytest.mark.asyncio
    async def test_payload_missing_required_fields_is_malformed(self):
        body = b'data: {"choices": []}\n\n'

        stream = ChunkStream(_pieces(body))

        with pytest.raises(StreamDecodeError):
            await stream.next()
        assert stream.state is StreamState.FAILED

    @pytest.mark.asyncio
    async def test_invalid_utf8_is_a_decode_error(self):
        """Test that bytes that are not UTF-8 fail the stream as a decode error."""
        body = b'data: {"id": "x", "model": "m", "choices": [{"delta": {"content": "\xff"}}]}\n\n'

        stream = ChunkStream(_pieces(body), request_id="rid-3")
        with pytest.raises(StreamDecodeError) as excinfo:
            await stream.next()

        assert isinstance(excinfo.value.__cause__, UnicodeDecodeError)
        assert "\\xff" in excinfo.value.payload
        assert excinfo.value.request_id == "rid-3"
        assert stream.state is StreamState.FAILED

    @pytest.mark.asyncio
    async def test_truncated_character_at_end_of_body(self):
        body = sse_body(make_chunk("ok"), done=False) + "✓".encode()[:2]

        stream = ChunkStream(_pieces(body))
        assert (await stream.next()) is not None

        with pytest.raises(StreamDecodeError, match="not valid UTF-8"):
            await stream.next()
        assert stream.state is StreamState.FAILED

    @pytest.mark.asyncio
    async def test_transport_error_propagates_unchanged(self):
        """Test that transport errors are re-raised as they are."""
        async def broken():
            yield sse_body(make_chunk("partial"), done=False)
            raise httpx.ReadError("connection reset")

        stream = ChunkStream(broken())
        assert (await stream.next()) is not None

        with pytest.raises(httpx.ReadError):
            await stream.next()
        assert stream.state is StreamState.FAILED


class TestCancellation:
    """Test a transport cancelled in the middle of a stream."""

    @staticmethod
    async def _cancelled_midway():
        yield sse_body(make_chunk("Hel", role="assistant"), done=False)
        raise asyncio.CancelledError()

    @pytest.mark.asyncio
    async def test_cancellation_fails_stream_and_releases_once(self):
        calls = []

        async def on_close():
            calls.append(True)

        stream = ChunkStream(self._cancelled_midway(), on_close=on_close)
        assert (await stream.next()) is not None

        with pytest.raises(asyncio.CancelledError):
            await stream.next()

        assert stream.state is StreamState.FAILED
        await stream.aclose()
        assert calls == [True]

    @pytest.mark.asyncio
    async def test_reconstruction_drops_partial_state(self):
        """Test that a cancelled stream yields no partial response."""
        stream = ChunkStream(self._cancelled_midway())

        with pytest.raises(asyncio.CancelledError):
            await reconstruct_stream(stream)
        assert stream.state is StreamState.FAILED


class TestRelease:
    """Test release of the underlying transport."""

    @pytest.mark.asyncio
    async def test_on_close_called_once_at_end(self):
        calls = []

        async def on_close():
            calls.append(True)

        stream = ChunkStream(_pieces(sse_body(make_chunk("a"))), on_close=on_close)
        await _collect(stream)
        await stream.aclose()

        assert calls == [True]

    @pytest.mark.asyncio
    async def test_on_close_called_on_failure(self):
        calls = []

        async def on_close():
            calls.append(True)

        stream = ChunkStream(_pieces(b"data: nope\n\n"), on_close=on_close)
        with pytest.raises(StreamDecodeError):
            await stream.next()

        assert calls == [True]

    @pytest.mark.asyncio
    async def test_early_close_stops_stream(self):
        calls = []

        async def on_close():
            calls.append(True)

        body = sse_body(make_chunk("a"), make_chunk("b"))
        async with ChunkStream(_pieces(body), on_close=on_close) as stream:
            first = await stream.next()

        assert first.choices[0].delta.content == "a"
        assert stream.state is StreamState.DONE
        assert (await stream.next()) is None
        assert calls == [True]
