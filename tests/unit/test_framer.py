"""
Unit tests for MessageFramer.
"""

import pytest

from httpframer.core.buffer import ByteBuffer
from httpframer.http.errors import IncompleteMessageError, InvalidMessageError
from httpframer.http.framer import (
    Complete,
    Incomplete,
    Invalid,
    MessageFramer,
    parse_request,
)


def feed(framer, buffer, *chunks):
    """Append chunks one at a time, calling try_parse after each."""
    results = []
    for chunk in chunks:
        buffer.append(chunk)
        results.append(framer.try_parse(buffer))
    return results


class TestCompleteRequests:
    """Well-formed requests delivered in one piece."""

    def test_get_request(self, sample_get_request):
        buffer = ByteBuffer(sample_get_request)
        result = MessageFramer().try_parse(buffer)

        assert isinstance(result, Complete)
        msg = result.message
        assert msg.method == "GET"
        assert msg.target == "/index.html"
        assert msg.version == "HTTP/1.1"
        assert msg.headers == {"host": "example.com"}
        assert msg.body == b""
        assert len(buffer) == 0

    def test_post_with_body(self, sample_post_request):
        buffer = ByteBuffer(sample_post_request)
        result = MessageFramer().try_parse(buffer)

        assert isinstance(result, Complete)
        assert result.message.body == b"name=alice&role=operator"
        assert result.message.content_length == 24
        assert result.message.get_header("Content-Type") == "application/x-www-form-urlencoded"

    def test_bytes_after_body_stay_buffered(self, sample_post_request):
        buffer = ByteBuffer(sample_post_request + b"GET /next HTTP/1.1\r\n")
        result = MessageFramer().try_parse(buffer)

        assert isinstance(result, Complete)
        assert result.message.body == b"name=alice&role=operator"
        assert buffer.view() == b"GET /next HTTP/1.1\r\n"

    def test_bytes_after_headers_without_length_stay_buffered(self):
        buffer = ByteBuffer(b"GET / HTTP/1.1\r\n\r\nleftover")
        result = MessageFramer().try_parse(buffer)

        assert isinstance(result, Complete)
        assert result.message.body == b""
        assert buffer.view() == b"leftover"

    def test_no_headers(self):
        result = MessageFramer().try_parse(ByteBuffer(b"GET / HTTP/1.0\r\n\r\n"))

        assert isinstance(result, Complete)
        assert result.message.headers == {}

    def test_target_is_opaque(self):
        result = MessageFramer().try_parse(
            ByteBuffer(b"GET /a%20b?x=1&y=%2F HTTP/1.1\r\n\r\n")
        )
        assert result.message.target == "/a%20b?x=1&y=%2F"

    def test_body_may_contain_separator(self):
        body = b"a\r\n\r\nb"
        raw = b"PUT /x HTTP/1.1\r\nContent-Length: 6\r\n\r\n" + body
        result = MessageFramer().try_parse(ByteBuffer(raw))

        assert result.message.body == body


class TestIncomplete:
    """Not enough bytes yet."""

    def test_empty_buffer(self):
        assert isinstance(MessageFramer().try_parse(ByteBuffer()), Incomplete)

    def test_missing_separator(self):
        buffer = ByteBuffer(b"GET / HTTP/1.1\r\nHost: example.com\r\n")
        result = MessageFramer().try_parse(buffer)

        assert isinstance(result, Incomplete)
        assert buffer.view() == b"GET / HTTP/1.1\r\nHost: example.com\r\n"

    def test_garbage_without_separator_is_incomplete(self):
        """Malformed lines cannot be judged until the header block ends."""
        buffer = ByteBuffer(b"this is not http")
        assert isinstance(MessageFramer().try_parse(buffer), Incomplete)

    def test_repeated_calls_are_idempotent(self):
        buffer = ByteBuffer(b"GET / HTTP/1.1\r\nHost: exa")
        framer = MessageFramer()

        for _ in range(3):
            assert isinstance(framer.try_parse(buffer), Incomplete)
            assert buffer.view() == b"GET / HTTP/1.1\r\nHost: exa"

    def test_short_body(self):
        buffer = ByteBuffer(b"POST / HTTP/1.1\r\nContent-Length: 10\r\n\r\n12345")
        framer = MessageFramer()
        result = framer.try_parse(buffer)

        assert isinstance(result, Incomplete)
        assert "expected 10" in result.reason
        assert framer.awaiting_body

    def test_short_body_repeated_calls_do_not_mutate(self):
        buffer = ByteBuffer(b"POST / HTTP/1.1\r\nContent-Length: 10\r\n\r\n12345")
        framer = MessageFramer()
        framer.try_parse(buffer)
        remaining = buffer.view()

        for _ in range(3):
            assert isinstance(framer.try_parse(buffer), Incomplete)
            assert buffer.view() == remaining


class TestInvalid:
    """Bytes that can never become a request."""

    def test_separator_only(self):
        result = MessageFramer().try_parse(ByteBuffer(b"\r\n\r\n"))

        assert isinstance(result, Invalid)
        assert result.status == 400

    def test_missing_colon(self):
        raw = b"GET / HTTP/1.1\r\nHost example.com\r\n\r\n"
        result = MessageFramer().try_parse(ByteBuffer(raw))

        assert isinstance(result, Invalid)
        assert result.status == 400

    @pytest.mark.parametrize("line", [
        b"GET /",
        b"GET / HTTP/1.1 extra",
        b"GET",
    ])
    def test_bad_request_line(self, line):
        result = MessageFramer().try_parse(ByteBuffer(line + b"\r\nHost: x\r\n\r\n"))

        assert isinstance(result, Invalid)
        assert result.status == 400

    def test_non_utf8_header_block(self):
        raw = b"GET /\xff\xfe HTTP/1.1\r\n\r\n"
        result = MessageFramer().try_parse(ByteBuffer(raw))

        assert isinstance(result, Invalid)
        assert result.status == 400


class TestContentLength:
    """Lenient and strict Content-Length handling."""

    @pytest.mark.parametrize("value", [b"abc", b"-5", b"12abc", b""])
    def test_lenient_treats_garbage_as_zero(self, value):
        raw = b"POST / HTTP/1.1\r\nContent-Length: " + value + b"\r\n\r\nrest"
        buffer = ByteBuffer(raw)
        result = MessageFramer().try_parse(buffer)

        assert isinstance(result, Complete)
        assert result.message.body == b""
        assert buffer.view() == b"rest"

    @pytest.mark.parametrize("value", [b"abc", b"-5", b"12abc", b""])
    def test_strict_rejects_garbage(self, value):
        raw = b"POST / HTTP/1.1\r\nContent-Length: " + value + b"\r\n\r\n"
        result = MessageFramer(strict_content_length=True).try_parse(ByteBuffer(raw))

        assert isinstance(result, Invalid)
        assert result.status == 400

    def test_strict_accepts_digits(self, sample_post_request):
        framer = MessageFramer(strict_content_length=True)
        result = framer.try_parse(ByteBuffer(sample_post_request))

        assert isinstance(result, Complete)

    def test_header_name_case_does_not_matter(self):
        raw = b"POST / HTTP/1.1\r\ncontent-LENGTH: 3\r\n\r\nabc"
        result = MessageFramer().try_parse(ByteBuffer(raw))

        assert result.message.body == b"abc"

    def test_zero_length(self):
        raw = b"POST / HTTP/1.1\r\nContent-Length: 0\r\n\r\n"
        result = MessageFramer().try_parse(ByteBuffer(raw))

        assert isinstance(result, Complete)
        assert result.message.body == b""


class TestSizeLimit:
    """max_request_size → 413."""

    def test_oversized_header_block(self):
        framer = MessageFramer(max_request_size=32)
        result = framer.try_parse(ByteBuffer(b"GET / HTTP/1.1\r\nX-Pad: " + b"a" * 64))

        assert isinstance(result, Invalid)
        assert result.status == 413

    def test_oversized_header_block_with_separator(self):
        """The separator arriving in the same chunk does not skip the check."""
        framer = MessageFramer(max_request_size=1024)
        raw = b"GET / HTTP/1.1\r\nX-Pad: " + b"a" * 8000 + b"\r\n\r\n"
        result = framer.try_parse(ByteBuffer(raw))

        assert isinstance(result, Invalid)
        assert result.status == 413

    def test_header_block_at_limit_is_allowed(self):
        head = b"GET / HTTP/1.1\r\nHost: example.com"
        framer = MessageFramer(max_request_size=len(head))
        result = framer.try_parse(ByteBuffer(head + b"\r\n\r\n"))

        assert isinstance(result, Complete)

    def test_separator_in_chunk_crossing_limit(self):
        framer = MessageFramer(max_request_size=64)
        buffer = ByteBuffer()
        first, second = feed(
            framer, buffer,
            b"GET / HTTP/1.1\r\nX-Pad: " + b"a" * 30,
            b"a" * 40 + b"\r\n\r\n",
        )

        assert isinstance(first, Incomplete)
        assert isinstance(second, Invalid)
        assert second.status == 413

    def test_oversized_declared_body(self):
        framer = MessageFramer(max_request_size=100)
        raw = b"POST / HTTP/1.1\r\nContent-Length: 101\r\n\r\n"
        result = framer.try_parse(ByteBuffer(raw))

        assert isinstance(result, Invalid)
        assert result.status == 413

    def test_body_at_limit_is_allowed(self):
        framer = MessageFramer(max_request_size=100)
        raw = b"POST / HTTP/1.1\r\nContent-Length: 100\r\n\r\n" + b"x" * 100
        result = framer.try_parse(ByteBuffer(raw))

        assert isinstance(result, Complete)

    @pytest.mark.parametrize("limit", [None, 0])
    def test_limit_disabled(self, limit):
        framer = MessageFramer(max_request_size=limit)
        result = framer.try_parse(ByteBuffer(b"GET / HTTP/1.1\r\nX-Pad: " + b"a" * 4096))

        assert isinstance(result, Incomplete)


class TestChunkBoundaries:
    """The same request gives the same answer wherever it is split."""

    def _frame_in_pieces(self, raw, cuts):
        buffer = ByteBuffer()
        framer = MessageFramer()
        pieces = []
        start = 0
        for cut in list(cuts) + [len(raw)]:
            pieces.append(raw[start:cut])
            start = cut

        results = feed(framer, buffer, *pieces)
        return results, buffer

    def _assert_single_complete(self, results, expected):
        assert all(isinstance(r, Incomplete) for r in results[:-1])
        assert isinstance(results[-1], Complete)
        assert results[-1].message == expected

    def test_two_chunks_every_offset(self, sample_post_request):
        expected = parse_request(sample_post_request)

        for cut in range(1, len(sample_post_request)):
            results, buffer = self._frame_in_pieces(sample_post_request, [cut])
            self._assert_single_complete(results, expected)
            assert len(buffer) == 0

    def test_three_chunks_every_offset(self, sample_get_request):
        expected = parse_request(sample_get_request)
        n = len(sample_get_request)

        for first in range(1, n - 1):
            for second in range(first + 1, n):
                results, _ = self._frame_in_pieces(sample_get_request, [first, second])
                self._assert_single_complete(results, expected)

    def test_byte_at_a_time(self, sample_post_request):
        expected = parse_request(sample_post_request)
        results, _ = self._frame_in_pieces(
            sample_post_request, range(1, len(sample_post_request))
        )
        self._assert_single_complete(results, expected)

    def test_separator_straddles_chunks(self):
        buffer = ByteBuffer()
        framer = MessageFramer()
        results = feed(framer, buffer, b"GET / HTTP/1.1\r\n\r", b"\n")

        assert isinstance(results[0], Incomplete)
        assert isinstance(results[1], Complete)

    def test_body_resumes_without_rereading_headers(self):
        buffer = ByteBuffer()
        framer = MessageFramer()

        first = feed(framer, buffer, b"POST /x HTTP/1.1\r\nContent-Length: 6\r\n\r\nab")[0]
        assert isinstance(first, Incomplete)
        assert framer.awaiting_body
        assert buffer.view() == b"ab"

        second = feed(framer, buffer, b"cdef")[0]
        assert isinstance(second, Complete)
        assert second.message.body == b"abcdef"
        assert second.message.target == "/x"
        assert not framer.awaiting_body

    def test_reset_forgets_pending_head(self):
        buffer = ByteBuffer(b"POST / HTTP/1.1\r\nContent-Length: 6\r\n\r\n")
        framer = MessageFramer()
        framer.try_parse(buffer)
        assert framer.awaiting_body

        framer.reset()
        assert not framer.awaiting_body


class TestParseRequest:
    """The one-shot parse_request helper."""

    def test_complete(self, sample_get_request):
        msg = parse_request(sample_get_request)
        assert msg.method == "GET"

    def test_incomplete_raises(self):
        with pytest.raises(IncompleteMessageError):
            parse_request(b"GET / HTTP/1.1\r\n")

    def test_invalid_raises_with_status(self):
        with pytest.raises(InvalidMessageError) as exc_info:
            parse_request(b"POST / HTTP/1.1\r\nContent-Length: 99\r\n\r\n", max_request_size=10)

        assert exc_info.value.status_code == 413

    def test_framer_options_forwarded(self):
        with pytest.raises(InvalidMessageError):
            parse_request(
                b"POST / HTTP/1.1\r\nContent-Length: x\r\n\r\n",
                strict_content_length=True,
            )
