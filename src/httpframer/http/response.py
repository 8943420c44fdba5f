"""
=============================================================================
HTTP RESPONSE FORMATTING
=============================================================================

Every response this server writes has the same fixed shape. There is no
streaming, no chunked encoding and no keep-alive, so the connection is
always closed after the body:

    HTTP/1.1 200 OK\\r\\n                  ← status line
    Content-Type: text/plain\\r\\n
    Content-Length: 38\\r\\n               ← byte length of the body
    Connection: close\\r\\n
    \\r\\n                                 ← end of headers
    Hello! You requested: GET /index.html  ← body

Content-Length counts encoded BYTES, not characters: "héllo" is 6 bytes.

=============================================================================
"""

from dataclasses import dataclass
from typing import Union

from .status_codes import HTTPStatus


@dataclass
class HTTPResponse:
    """
    A response ready to be serialized onto the wire.

    Handlers return one of these; the connection driver calls to_bytes()
    and writes the result to the socket.
    """

    status: HTTPStatus = HTTPStatus.OK
    body: bytes = b""
    content_type: str = "text/plain"
    version: str = "HTTP/1.1"

    def __post_init__(self):
        if isinstance(self.body, str):
            self.body = self.body.encode("utf-8")
        if not isinstance(self.status, HTTPStatus):
            self.status = HTTPStatus(self.status)

    @property
    def status_line(self) -> str:
        """e.g. "HTTP/1.1 400 Bad Request"."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def to_bytes(self) -> bytes:
        """Serialize status line, the four fixed headers and the body."""
        lines = [
            self.status_line,
            f"Content-Type: {self.content_type}",
            f"Content-Length: {len(self.body)}",
            "Connection: close",
            "",
        ]
        head = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return head + self.body


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def ok(body: Union[str, bytes] = "") -> HTTPResponse:
    """200 OK with a text/plain body."""
    return HTTPResponse(status=HTTPStatus.OK, body=body)


def error_response(status: Union[HTTPStatus, int]) -> HTTPResponse:
    """
    Generic error response: "Error <code> : <reason>".

    The body never echoes request data or exception details back to
    the client.
    """
    status = HTTPStatus(status)
    return HTTPResponse(status=status, body=f"Error {int(status)} : {status.phrase}")


def bad_request() -> HTTPResponse:
    return error_response(HTTPStatus.BAD_REQUEST)


def request_timeout() -> HTTPResponse:
    return error_response(HTTPStatus.REQUEST_TIMEOUT)


def internal_error() -> HTTPResponse:
    return error_response(HTTPStatus.INTERNAL_SERVER_ERROR)
