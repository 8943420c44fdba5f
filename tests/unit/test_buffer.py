"""
Unit tests for the accumulation buffer.
"""

import pytest

from httpframer.core.buffer import ByteBuffer


class TestByteBuffer:
    """Tests for ByteBuffer."""

    def test_starts_empty(self):
        buf = ByteBuffer()
        assert len(buf) == 0
        assert not buf
        assert buf.view() == b""

    def test_append_preserves_order(self):
        buf = ByteBuffer()
        buf.append(b"GET / ")
        buf.append(b"HTTP/1.1")
        buf.append(bytearray(b"\r\n"))

        assert len(buf) == 16
        assert buf.view() == b"GET / HTTP/1.1\r\n"

    def test_append_never_truncates(self):
        buf = ByteBuffer()
        payload = b"x" * 100_000
        buf.append(payload)
        buf.append(payload)
        assert len(buf) == 200_000

    def test_consume_discards_prefix(self):
        buf = ByteBuffer(b"headerBODY")
        buf.consume(6)

        assert len(buf) == 4
        assert buf.view() == b"BODY"
        # Remaining content starts at offset 0
        assert buf.view(0, 1) == b"B"

    def test_consume_zero_and_all(self):
        buf = ByteBuffer(b"abc")
        buf.consume(0)
        assert buf.view() == b"abc"

        buf.consume(3)
        assert len(buf) == 0

    def test_consume_more_than_length_is_caller_bug(self):
        buf = ByteBuffer(b"abc")

        with pytest.raises(ValueError):
            buf.consume(4)

        # Failed consume leaves content untouched
        assert buf.view() == b"abc"

    def test_consume_negative_rejected(self):
        with pytest.raises(ValueError):
            ByteBuffer(b"abc").consume(-1)

    def test_view_does_not_consume(self):
        buf = ByteBuffer(b"hello world")
        assert buf.view(0, 5) == b"hello"
        assert buf.view(6) == b"world"
        assert len(buf) == 11

    def test_find_spans_appended_chunks(self):
        """The separator may straddle two appends."""
        buf = ByteBuffer()
        buf.append(b"GET / HTTP/1.1\r\n\r")
        buf.append(b"\n")
        assert buf.find(b"\r\n\r\n") == 14

    def test_find_missing(self):
        assert ByteBuffer(b"no separator").find(b"\r\n\r\n") == -1

    def test_clear(self):
        buf = ByteBuffer(b"abc")
        buf.clear()
        assert len(buf) == 0
