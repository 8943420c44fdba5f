"""
=============================================================================
REQUEST-LINE AND HEADER DECODER
=============================================================================

Pure functions over already-decoded text. The framer hands these the
lines of a header block; they never see raw bytes or the buffer.

=============================================================================
REQUEST LINE
=============================================================================

    GET /api/users?page=1 HTTP/1.1
    ─┬─ ────────┬──────── ───┬────
     │          │            │
   method     target      version

Split on single spaces, exactly three tokens. The tokens are returned
verbatim: the target is NOT percent-decoded and the method is NOT checked
against a list of known methods. A double space produces an empty token,
which makes four tokens, which is invalid.

=============================================================================
HEADER LINES
=============================================================================

    Content-Type:   text/plain
    ───────┬────│───────┬──────
         name   │     value
                └── first colon splits the line

    name  → trimmed, lower-cased
    value → trimmed (later colons stay in the value: "Host: a:8080")

A line with no colon at all is a hard failure. When a name repeats, the
later line replaces the earlier one.

=============================================================================
"""

from typing import Dict, Iterable, Mapping

from .errors import InvalidMessageError
from .message import HeaderMap, RequestLine


def decode_request_line(line: str) -> RequestLine:
    """
    Decode "METHOD TARGET VERSION" into a RequestLine.

    Raises:
        InvalidMessageError: Unless the line is exactly three tokens.
    """
    parts = line.strip().split(" ")
    if len(parts) != 3 or not all(parts):
        raise InvalidMessageError(f"Invalid request line: {line!r}")

    method, target, version = parts
    return RequestLine(method=method, target=target, version=version)


def decode_headers(lines: Iterable[str]) -> HeaderMap:
    """
    Decode "Name: value" lines into a HeaderMap.

    Raises:
        InvalidMessageError: On a line without a colon or with an empty name.
    """
    headers: Dict[str, str] = {}

    for line in lines:
        colon = line.find(":")
        if colon == -1:
            raise InvalidMessageError(f"Invalid header line: {line!r}")

        name = line[:colon].strip().lower()
        if not name:
            raise InvalidMessageError(f"Empty header name: {line!r}")

        # Last duplicate wins
        headers[name] = line[colon + 1:].strip()

    return HeaderMap(headers)


def encode_headers(headers: Mapping[str, str]) -> str:
    """
    Render a mapping back into CRLF-terminated header lines.

    decode_headers(encode_headers(h).split("\\r\\n")[:-1]) == h
    """
    return "".join(f"{name}: {value}\r\n" for name, value in headers.items())
