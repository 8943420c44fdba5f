"""
=============================================================================
ACCUMULATION BUFFER
=============================================================================

TCP is a byte stream, not a message protocol. A single request may show
up as one recv() or as fifty:

    recv() → b"GET /ind"
    recv() → b"ex.html HTTP/1.1\\r\\nHo"
    recv() → b"st: example.com\\r\\n\\r\\n"

ByteBuffer is where those fragments pile up until the framer can carve a
complete request out of them.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         ByteBuffer                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   append(chunk)      ──► grow at the tail, never truncate           │
    │   consume(n)         ──► drop the first n bytes, keep the rest      │
    │   len(buf)           ──► bytes currently held                       │
    │   view(start, end)   ──► read-only look without consuming           │
    │   find(sub)          ──► scan the WHOLE content, not just the tail  │
    │                                                                     │
    │      offset 0                                         len(buf)      │
    │         │                                                │          │
    │         ▼                                                ▼          │
    │         [ consumed prefix │ remaining content ...........]          │
    │           └─ consume(n) ─┘                                          │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

A buffer belongs to exactly one connection and is touched only by that
connection's thread, so there is no locking here.

=============================================================================
"""

from typing import Optional, Union


class ByteBuffer:
    """
    Append-only, consumable byte store.

    Backed by a bytearray; the logical length is always len(self._data),
    so it can never exceed the allocated region.

    Example:
        buf = ByteBuffer()
        buf.append(b"GET / HTTP/1.1\\r\\n")
        buf.append(b"\\r\\n")
        buf.find(b"\\r\\n\\r\\n")   # → 14
        buf.consume(18)
        len(buf)                    # → 0
    """

    __slots__ = ("_data",)

    def __init__(self, initial: Union[bytes, bytearray, memoryview] = b""):
        self._data = bytearray(initial)

    def append(self, chunk: Union[bytes, bytearray, memoryview]) -> None:
        """Copy chunk onto the end of the current content."""
        self._data += chunk

    def consume(self, n: int) -> None:
        """
        Permanently discard the first n bytes.

        The remaining bytes keep their order and start at offset 0.

        Raises:
            ValueError: If n is negative or larger than the current length.
                        This is a caller bug, not a protocol error.
        """
        if n < 0 or n > len(self._data):
            raise ValueError(
                f"cannot consume {n} bytes from a buffer of {len(self._data)}"
            )
        # bytearray slice deletion shifts the tail down in place
        del self._data[:n]

    def view(self, start: int = 0, end: Optional[int] = None) -> bytes:
        """Return a copy of content[start:end] without consuming it."""
        return bytes(self._data[start:end])

    def find(self, sub: bytes, start: int = 0) -> int:
        """Offset of the first occurrence of sub, or -1."""
        return self._data.find(sub, start)

    def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)

    def __bool__(self) -> bool:
        return bool(self._data)

    def __repr__(self) -> str:
        return f"ByteBuffer(length={len(self._data)})"
