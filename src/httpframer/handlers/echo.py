"""
Default request handler.

Answers every well-framed request with a one-line plain-text echo of the
method and target:

    GET /index.html HTTP/1.1   →   200 OK
                                   Hello! You requested: GET /index.html
"""

from ..http.message import ParsedMessage
from ..http.response import HTTPResponse, ok


def echo_handler(message: ParsedMessage) -> HTTPResponse:
    return ok(f"Hello! You requested: {message.method} {message.target}\n")
