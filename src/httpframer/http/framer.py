"""
=============================================================================
MESSAGE FRAMER
=============================================================================

Turns whatever has accumulated in a ByteBuffer into at most one request.

The hard part is that the same logical request can arrive split at ANY
byte offset. The framer must give the same answer no matter where the
splits fall, and it must tell apart two very different "no":

    ┌──────────────┬───────────────────────────────────────────────────────┐
    │ Incomplete   │ Not enough bytes yet. Read more and call again.      │
    │              │ Never reported to the peer.                           │
    ├──────────────┼───────────────────────────────────────────────────────┤
    │ Invalid      │ These bytes can never become a request. Send a 4xx   │
    │              │ and close. Never retried.                             │
    ├──────────────┼───────────────────────────────────────────────────────┤
    │ Complete     │ Here is the request.                                  │
    └──────────────┴───────────────────────────────────────────────────────┘

These are returned as values, so a caller cannot mistake "retry" for
"terminate" the way it could if both were exceptions.

=============================================================================
FRAMING ALGORITHM
=============================================================================

    try_parse(buffer)
        │
        ├── waiting on a body from an earlier call? ──► skip to BODY
        │
        ├── buffer empty?                     ──► Incomplete
        ├── header block over max_request_size? ──► Invalid (413)
        │       (everything buffered counts while no separator
        │        has been seen)
        ├── no \\r\\n\\r\\n anywhere in buffer?     ──► Incomplete
        │       (scan the whole buffer: the separator may straddle
        │        two chunks)
        │
        ├── HEAD: consume header block + separator
        │         decode UTF-8, split on CRLF, drop empty lines
        │         zero lines?                 ──► Invalid("Empty request")
        │         line 0  → decode_request_line
        │         rest    → decode_headers
        │         Content-Length → body length
        │
        └── BODY: length 0?                   ──► Complete (leftover bytes
                  │                                 stay in the buffer)
                  ├── fewer bytes than length? ──► Incomplete, REMEMBER
                  │                                 the decoded head
                  └── take exactly length bytes ──► Complete

Once the header block has been consumed it is never asked for again: the
decoded request line and headers are kept on the framer until the body
shows up.

=============================================================================
CONTENT-LENGTH
=============================================================================

    absent                      → 0
    "24"                        → 24
    "abc", "-5", "12abc", ""    → 0 (lenient, default)
                                → Invalid (strict_content_length=True)

Silently treating a garbage length as 0 means the "body" bytes will be
read as the start of the next request. That is a request-smuggling
hazard, hence the strict switch.

=============================================================================
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional, Union

from ..core.buffer import ByteBuffer
from .decoder import decode_headers, decode_request_line
from .errors import HTTPParseError, IncompleteMessageError, InvalidMessageError
from .message import HeaderMap, ParsedMessage, RequestLine
from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)


# =============================================================================
# PARSE RESULTS
# =============================================================================

@dataclass(frozen=True)
class Complete:
    """A full request was framed."""

    message: ParsedMessage


@dataclass(frozen=True)
class Incomplete:
    """More bytes are needed before anything can be decided."""

    reason: str = "Incomplete HTTP message"


@dataclass(frozen=True)
class Invalid:
    """The buffered bytes can never become a valid request."""

    reason: str
    status: int = HTTPStatus.BAD_REQUEST


ParseResult = Union[Complete, Incomplete, Invalid]


@dataclass(frozen=True)
class _PendingHead:
    """Decoded head of a request whose body has not fully arrived."""

    request_line: RequestLine
    headers: HeaderMap
    body_length: int


# =============================================================================
# FRAMER
# =============================================================================

class MessageFramer:
    """
    Stateful request framer for one connection.

    Usage:
        buffer = ByteBuffer()
        framer = MessageFramer()

        for chunk in chunks:
            buffer.append(chunk)
            result = framer.try_parse(buffer)
            if isinstance(result, Complete):
                handle(result.message)
                break
            if isinstance(result, Invalid):
                reject(result.status, result.reason)
                break
            # Incomplete: keep reading

    Calling try_parse again on an unchanged buffer after Incomplete always
    returns Incomplete again and does not touch the buffer.
    """

    HEADER_TERMINATOR = b"\r\n\r\n"

    CONTENT_LENGTH_PATTERN = re.compile(r"[0-9]+")

    def __init__(
        self,
        max_request_size: Optional[int] = 10 * 1024 * 1024,
        strict_content_length: bool = False,
    ):
        """
        Args:
            max_request_size: Upper bound in bytes for the header block and
                              for the declared body. None or 0 disables it.
            strict_content_length: Reject a Content-Length that is not a
                                   non-negative decimal integer instead of
                                   treating it as 0.
        """
        self.max_request_size = max_request_size
        self.strict_content_length = strict_content_length
        self._pending: Optional[_PendingHead] = None

    @property
    def awaiting_body(self) -> bool:
        """True once a header block was consumed but its body is still short."""
        return self._pending is not None

    def reset(self) -> None:
        """Forget any half-framed request."""
        self._pending = None

    def try_parse(self, buffer: ByteBuffer) -> ParseResult:
        """
        Attempt to frame one request from the front of buffer.

        Returns:
            Complete, Incomplete or Invalid.
        """
        if self._pending is None:
            if not buffer:
                return Incomplete("No data buffered")

            header_end = buffer.find(self.HEADER_TERMINATOR)

            # Without a separator everything buffered so far is header block
            header_size = len(buffer) if header_end == -1 else header_end
            if self._exceeds_limit(header_size):
                return Invalid(
                    f"Header block larger than {self.max_request_size} bytes",
                    HTTPStatus.PAYLOAD_TOO_LARGE,
                )

            if header_end == -1:
                return Incomplete("Incomplete headers: missing CRLF CRLF separator")

            header_bytes = buffer.view(0, header_end)
            buffer.consume(header_end + len(self.HEADER_TERMINATOR))

            try:
                self._pending = self._decode_head(header_bytes)
            except HTTPParseError as e:
                logger.debug(f"Rejecting header block: {e}")
                return Invalid(str(e), e.status_code)

        return self._take_body(buffer)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _decode_head(self, header_bytes: bytes) -> _PendingHead:
        try:
            header_text = header_bytes.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidMessageError(f"Header block is not valid UTF-8: {e}")

        lines = [line for line in header_text.split("\r\n") if line]
        if not lines:
            raise InvalidMessageError("Empty request")

        request_line = decode_request_line(lines[0])
        headers = decode_headers(lines[1:])
        body_length = self._body_length(headers)

        if self._exceeds_limit(body_length):
            raise InvalidMessageError(
                f"Declared body of {body_length} bytes exceeds {self.max_request_size}",
                status_code=HTTPStatus.PAYLOAD_TOO_LARGE,
            )

        return _PendingHead(request_line, headers, body_length)

    def _body_length(self, headers: HeaderMap) -> int:
        raw = headers.get("content-length")
        if raw is None:
            return 0

        if self.CONTENT_LENGTH_PATTERN.fullmatch(raw):
            return int(raw)

        if self.strict_content_length:
            raise InvalidMessageError(f"Invalid Content-Length: {raw!r}")

        logger.debug(f"Treating unparsable Content-Length {raw!r} as 0")
        return 0

    def _take_body(self, buffer: ByteBuffer) -> ParseResult:
        head = self._pending
        needed = head.body_length

        if needed == 0:
            body = b""
        elif len(buffer) < needed:
            return Incomplete(
                f"Incomplete body: expected {needed} bytes, got {len(buffer)}"
            )
        else:
            body = buffer.view(0, needed)
            buffer.consume(needed)

        self._pending = None
        return Complete(ParsedMessage.from_parts(head.request_line, head.headers, body))

    def _exceeds_limit(self, size: int) -> bool:
        return bool(self.max_request_size) and size > self.max_request_size


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request(data: bytes, **framer_options) -> ParsedMessage:
    """
    Frame a request that is already fully in memory.

    Handy for tests and tools. Anything after the request is ignored.

    Raises:
        IncompleteMessageError: data ends before the request does.
        InvalidMessageError: data can never be a valid request.
    """
    buffer = ByteBuffer(data)
    result = MessageFramer(**framer_options).try_parse(buffer)

    if isinstance(result, Complete):
        return result.message
    if isinstance(result, Invalid):
        raise InvalidMessageError(result.reason, status_code=result.status)
    raise IncompleteMessageError(result.reason)
