"""
HTTP/1.1 request framing and response formatting.

    status_codes.py  HTTPStatus enum with reason phrases
    message.py       RequestLine, HeaderMap, ParsedMessage
    errors.py        HTTPParseError and friends
    decoder.py       decode_request_line / decode_headers / encode_headers
    framer.py        MessageFramer and its Complete / Incomplete / Invalid results
    response.py      HTTPResponse with the fixed close-after-response shape
"""

from .status_codes import HTTPStatus
from .message import HeaderMap, ParsedMessage, RequestLine
from .errors import HTTPParseError, IncompleteMessageError, InvalidMessageError
from .decoder import decode_headers, decode_request_line, encode_headers
from .framer import (
    Complete,
    Incomplete,
    Invalid,
    MessageFramer,
    ParseResult,
    parse_request,
)
from .response import (
    HTTPResponse,
    bad_request,
    error_response,
    internal_error,
    ok,
    request_timeout,
)

__all__ = [
    "HTTPStatus",
    "HeaderMap",
    "ParsedMessage",
    "RequestLine",
    "HTTPParseError",
    "IncompleteMessageError",
    "InvalidMessageError",
    "decode_headers",
    "decode_request_line",
    "encode_headers",
    "Complete",
    "Incomplete",
    "Invalid",
    "MessageFramer",
    "ParseResult",
    "parse_request",
    "HTTPResponse",
    "bad_request",
    "error_response",
    "internal_error",
    "ok",
    "request_timeout",
]
