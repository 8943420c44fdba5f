"""
=============================================================================
HTTPFRAMER - Incremental HTTP/1.1 Request Framing
=============================================================================

TCP hands a server bytes in whatever pieces the network felt like. This
package turns those pieces back into HTTP requests, one request per
connection, and answers each with a fixed-shape plain-text response.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    httpframer/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m httpframer)
    ├── server.py            # HTTPServer: accept loop + thread per connection
    ├── config.py            # ServerConfig dataclass
    ├── core/
    │   ├── buffer.py        # ByteBuffer (append / consume)
    │   ├── connection.py    # Connection: chunk source + byte sink
    │   ├── driver.py        # ConnectionDriver state machine
    │   └── socket_server.py # TCP listening socket
    ├── http/
    │   ├── framer.py        # MessageFramer: Complete / Incomplete / Invalid
    │   ├── decoder.py       # request line + header decoding
    │   ├── message.py       # ParsedMessage, HeaderMap, RequestLine
    │   ├── response.py      # HTTPResponse
    │   ├── errors.py        # HTTPParseError hierarchy
    │   └── status_codes.py  # HTTPStatus
    └── handlers/
        └── echo.py          # default handler

=============================================================================
QUICK START
=============================================================================

    from httpframer import HTTPServer, ServerConfig
    from httpframer.http import ok

    def hello(message):
        return ok(f"{message.method} {message.target}\\n")

    HTTPServer(ServerConfig(port=8000), handler=hello).run()

Or drive the framer by hand:

    from httpframer import ByteBuffer, MessageFramer, Complete

    buffer, framer = ByteBuffer(), MessageFramer()
    for chunk in (b"GET / HT", b"TP/1.1\\r\\nHost: x\\r\\n\\r\\n"):
        buffer.append(chunk)
        result = framer.try_parse(buffer)
    assert isinstance(result, Complete)

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .core.buffer import ByteBuffer
from .http.framer import Complete, Incomplete, Invalid, MessageFramer, parse_request
from .http.message import ParsedMessage
from .server import HTTPServer

__all__ = [
    "HTTPServer",
    "ServerConfig",
    "ByteBuffer",
    "MessageFramer",
    "Complete",
    "Incomplete",
    "Invalid",
    "ParsedMessage",
    "parse_request",
    "__version__",
]
