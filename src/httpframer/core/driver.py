"""
=============================================================================
CONNECTION DRIVER
=============================================================================

The per-connection control loop: pull a chunk, feed the buffer, try to
frame a request, and then either dispatch it, reject it, or go back for
more bytes.

=============================================================================
STATE MACHINE
=============================================================================

                    ┌──────────────────── Incomplete ───────────────────┐
                    │                                                    │
                    ▼                                                    │
            ┌───────────────┐   DATA (append)   ┌──────────────┐        │
    start ─►│ AWAITING_DATA │──────────────────►│   PARSING    │────────┘
            └───────┬───────┘                   └──────┬───────┘
                    │                                  │
       END / ERROR  │                   Complete       │      Invalid
       (no write)   │               ┌──────────────────┴──────────────┐
                    │               ▼                                 ▼
                    │       ┌──────────────┐                 ┌──────────────┐
                    │       │  DISPATCHED  │                 │  ERROR_SENT  │
                    │       │ handler(msg) │                 │  400 / 413   │
                    │       │ write resp.  │                 │  (500, 408)  │
                    │       └──────┬───────┘                 └──────┬───────┘
                    │              │                                │
                    └──────────────┴──────────────┬─────────────────┘
                                                  ▼
                                          ┌──────────────┐
                                          │    CLOSED    │  sink.close()
                                          └──────────────┘  exactly once

One request per connection: after a response (or an error response) the
connection is always closed. No keep-alive, no pipelining.

=============================================================================
ERROR CLASSES
=============================================================================

    Incomplete  → not an error, read more
    Invalid     → 400-class response, close
    Internal    → any other exception while dispatching → 500, close
    Transport   → read failed → close without writing (socket unusable)
    Idle timeout→ 408, close (the socket still works, the client is just
                  slow)

=============================================================================
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .buffer import ByteBuffer
from .connection import ByteSink, ChunkSource, ReadKind
from ..http.framer import Incomplete, Invalid, MessageFramer
from ..http.message import ParsedMessage
from ..http.response import HTTPResponse, error_response
from ..http.status_codes import HTTPStatus


logger = logging.getLogger(__name__)


Handler = Callable[[ParsedMessage], HTTPResponse]


class DriverState(Enum):
    AWAITING_DATA = "awaiting_data"
    PARSING = "parsing"
    DISPATCHED = "dispatched"
    ERROR_SENT = "error_sent"
    CLOSED = "closed"


@dataclass
class DriverOutcome:
    """
    How a connection ended.

    Attributes:
        state: Terminal state reached before closing: DISPATCHED,
               ERROR_SENT, or CLOSED when nothing was written.
        message: The framed request, if one was framed.
        status: Status of the response written (or attempted), if any.
        sent: Whether the response write succeeded.
        reason: Short human-readable explanation, for logs.
    """

    state: DriverState
    message: Optional[ParsedMessage] = None
    status: Optional[int] = None
    sent: bool = False
    reason: str = ""


class ConnectionDriver:
    """
    Drives one connection from first byte to close.

    The driver owns its ByteBuffer and MessageFramer; nothing here is
    shared with other connections, so no locking is needed.

    Usage:
        conn = Connection(sock, addr)
        outcome = ConnectionDriver(conn, conn, handler).run()

    source and sink are usually the same Connection object, but tests
    pass scripted fakes.
    """

    def __init__(
        self,
        source: ChunkSource,
        sink: ByteSink,
        handler: Handler,
        framer: Optional[MessageFramer] = None,
        connection_id: str = "-",
    ):
        self.source = source
        self.sink = sink
        self.handler = handler
        self.framer = framer or MessageFramer()
        self.buffer = ByteBuffer()
        self.state = DriverState.AWAITING_DATA
        self._tag = f"[{connection_id}]"

    def run(self) -> DriverOutcome:
        """
        Serve the connection to completion.

        Never raises for protocol, handler or transport failures; the sink
        is closed exactly once on every path.
        """
        try:
            outcome = self._serve()
        except Exception as e:
            logger.exception(f"{self._tag} Unexpected error while serving: {e}")
            outcome = self._send_error(HTTPStatus.INTERNAL_SERVER_ERROR, str(e))
        finally:
            self.sink.close()
            self.state = DriverState.CLOSED

        return outcome

    # =========================================================================
    # MAIN LOOP
    # =========================================================================

    def _serve(self) -> DriverOutcome:
        while True:
            # ─────────────────────────────────────────────────────────────
            # AWAITING_DATA: the only suspension point
            # ─────────────────────────────────────────────────────────────
            result = self.source.next_chunk()

            if result.kind is ReadKind.ERROR:
                if result.timed_out:
                    logger.info(f"{self._tag} Idle timeout waiting for request")
                    return self._send_error(HTTPStatus.REQUEST_TIMEOUT, "idle timeout")
                logger.warning(f"{self._tag} Transport error: {result.error}")
                return DriverOutcome(DriverState.CLOSED, reason=f"transport error: {result.error}")

            if result.kind is ReadKind.END or not result.data:
                if self.buffer or self.framer.awaiting_body:
                    logger.debug(
                        f"{self._tag} Peer closed with {len(self.buffer)} bytes "
                        f"of an unfinished request"
                    )
                return DriverOutcome(DriverState.CLOSED, reason="end of stream")

            self.buffer.append(result.data)
            logger.debug(
                f"{self._tag} Received {len(result.data)} bytes "
                f"({len(self.buffer)} buffered)"
            )

            # ─────────────────────────────────────────────────────────────
            # PARSING
            # ─────────────────────────────────────────────────────────────
            self.state = DriverState.PARSING
            parsed = self.framer.try_parse(self.buffer)

            if isinstance(parsed, Incomplete):
                self.state = DriverState.AWAITING_DATA
                continue

            if isinstance(parsed, Invalid):
                logger.warning(f"{self._tag} Invalid request: {parsed.reason}")
                return self._send_error(parsed.status, parsed.reason)

            return self._dispatch(parsed.message)

    # =========================================================================
    # RESPONSES
    # =========================================================================

    def _dispatch(self, message: ParsedMessage) -> DriverOutcome:
        logger.info(f"{self._tag} Parsed HTTP request: {message}")

        try:
            response = self.handler(message)
            payload = response.to_bytes()
        except Exception as e:
            logger.exception(f"{self._tag} Handler error: {e}")
            return self._send_error(
                HTTPStatus.INTERNAL_SERVER_ERROR, f"handler error: {e}", message
            )

        sent = self.sink.send_response(payload)
        self.state = DriverState.DISPATCHED
        return DriverOutcome(
            DriverState.DISPATCHED,
            message=message,
            status=int(response.status),
            sent=sent,
            reason="dispatched",
        )

    def _send_error(
        self,
        status: int,
        reason: str,
        message: Optional[ParsedMessage] = None,
    ) -> DriverOutcome:
        response = error_response(status)
        sent = self.sink.send_response(response.to_bytes())
        self.state = DriverState.ERROR_SENT
        return DriverOutcome(
            DriverState.ERROR_SENT,
            message=message,
            status=int(response.status),
            sent=sent,
            reason=reason,
        )
