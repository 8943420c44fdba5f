"""
=============================================================================
CONNECTION: CHUNK SOURCE AND BYTE SINK
=============================================================================

This module wraps an accepted client socket in the two small interfaces
the connection driver needs:

    ┌─────────────────────┐                 ┌─────────────────────┐
    │  ChunkSource        │                 │  ByteSink           │
    │  next_chunk()       │                 │  send_response(b)   │
    │    → ReadResult     │                 │    → bool           │
    └──────────┬──────────┘                 └──────────┬──────────┘
               │                                       │
               └───────────────┬───────────────────────┘
                               │
                        ┌──────▼──────┐
                        │ Connection  │  wraps socket.socket
                        └─────────────┘

=============================================================================
ONE WAIT, THREE OUTCOMES
=============================================================================

Waiting for the next chunk is the only place a connection ever blocks,
and it ends in exactly one of three ways:

    recv() returned bytes           → ReadResult(DATA,  data=b"...")
    recv() returned b""             → ReadResult(END)      peer closed
    recv() raised OSError / timeout → ReadResult(ERROR, error=exc)

Returning a tagged value instead of raising keeps the three cases
exhaustive and lets tests drive the driver with a scripted fake instead
of a live socket.

Backpressure comes for free: the next recv() is not issued until the
driver has appended the previous chunk and asked again.

Once END or ERROR has been seen the socket is not read again; further
calls replay the same outcome.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──► READING ──► WRITING ──► CLOSING ──► CLOSED
     │         │                       ▲
     └─────────┴───────────────────────┘

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Protocol


logger = logging.getLogger(__name__)


# =============================================================================
# READ RESULTS
# =============================================================================

class ReadKind(Enum):
    DATA = "data"
    END = "end"
    ERROR = "error"


@dataclass(frozen=True)
class ReadResult:
    """Outcome of one wait for the next chunk."""

    kind: ReadKind
    data: bytes = b""
    error: Optional[BaseException] = None

    @classmethod
    def chunk(cls, data: bytes) -> "ReadResult":
        return cls(ReadKind.DATA, data=data)

    @classmethod
    def end(cls) -> "ReadResult":
        return cls(ReadKind.END)

    @classmethod
    def failed(cls, error: BaseException) -> "ReadResult":
        return cls(ReadKind.ERROR, error=error)

    @property
    def timed_out(self) -> bool:
        """True for an idle-deadline expiry (the socket is still usable)."""
        return self.kind is ReadKind.ERROR and isinstance(self.error, socket.timeout)


class ChunkSource(Protocol):
    def next_chunk(self) -> ReadResult: ...


class ByteSink(Protocol):
    def send_response(self, data: bytes) -> bool: ...

    def close(self) -> None: ...


# =============================================================================
# SOCKET-BACKED CONNECTION
# =============================================================================

class ConnectionState(Enum):
    """Connection lifecycle states, for logging and close bookkeeping."""
    NEW = "new"              # Just accepted, nothing read yet
    READING = "reading"      # Waiting on / reading request bytes
    WRITING = "writing"      # Sending the response
    CLOSING = "closing"      # Shutdown sequence in progress
    CLOSED = "closed"        # Socket released


@dataclass
class Connection:
    """
    One accepted client socket.

    Implements both ChunkSource and ByteSink, and is a context manager
    that closes the socket exactly once:

        with Connection(sock, addr) as conn:
            result = conn.next_chunk()
            ...
            conn.send_response(b"HTTP/1.1 200 OK\\r\\n...")
        # closed here, whichever way the block was left

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short id used to prefix log lines.
        state: Current ConnectionState.
        buffer_size: Max bytes per recv().
        idle_timeout: Seconds a single recv() may wait. None = forever.
        bytes_received: Running total, for logging.
    """

    # Bounds on what close() reads back from a client that keeps sending
    DRAIN_LIMIT = 8 * 1024
    DRAIN_TIMEOUT = 0.5

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    last_activity: float = field(default_factory=time.time)

    buffer_size: int = 8192
    idle_timeout: Optional[float] = 30.0

    bytes_received: int = 0

    _ended: bool = field(default=False, repr=False)
    _error: Optional[BaseException] = field(default=None, repr=False)

    def __post_init__(self):
        # Blocking socket; the idle deadline is the only timeout
        self.socket.setblocking(True)
        self.socket.settimeout(self.idle_timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0] if self.address else ""

    @property
    def age(self) -> float:
        """Seconds since accept()."""
        return time.time() - self.created_at

    @property
    def is_closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    # =========================================================================
    # READING
    # =========================================================================

    def next_chunk(self) -> ReadResult:
        """
        Block until the next chunk, end-of-stream, or a transport error.

        Returns:
            ReadResult tagged DATA, END or ERROR. Never raises for
            socket-level failures.
        """
        if self._error is not None:
            return ReadResult.failed(self._error)
        if self._ended or self.is_closed:
            return ReadResult.end()

        self.state = ConnectionState.READING

        try:
            data = self.socket.recv(self.buffer_size)
        except socket.timeout as e:
            logger.debug(f"[{self.id}] Idle timeout after {self.idle_timeout}s")
            self._error = e
            return ReadResult.failed(e)
        except OSError as e:
            # ConnectionResetError, BrokenPipeError, ...
            logger.debug(f"[{self.id}] Read failed: {e}")
            self._error = e
            return ReadResult.failed(e)

        self.last_activity = time.time()

        if not data:
            self._ended = True
            return ReadResult.end()

        self.bytes_received += len(data)
        return ReadResult.chunk(data)

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Write a full response with sendall().

        Returns:
            True if every byte was handed to the kernel, False if the
            client went away.
        """
        if self.is_closed:
            return False

        self.state = ConnectionState.WRITING
        self.last_activity = time.time()

        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection. Safe to call more than once.

        1. shutdown(SHUT_WR) sends FIN so the client sees end of response
        2. drain whatever the client still sent, so close() does not turn
           into an RST that could discard the response in flight. At most
           DRAIN_LIMIT bytes, for at most DRAIN_TIMEOUT seconds in total
        3. close() releases the descriptor
        """
        if self.state in (ConnectionState.CLOSING, ConnectionState.CLOSED):
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        if self._error is None:
            self._drain()

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(
            f"[{self.id}] Connection closed after {self.age:.3f}s, "
            f"{self.bytes_received} bytes received"
        )

    def _drain(self):
        deadline = time.monotonic() + self.DRAIN_TIMEOUT
        drained = 0

        try:
            while drained < self.DRAIN_LIMIT:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                data = self.socket.recv(1024)
                if not data:
                    return
                drained += len(data)
        except OSError:
            return  # Timed out or reset

        logger.debug(f"[{self.id}] Stopped draining after {drained} bytes")

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
