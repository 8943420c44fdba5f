"""
Connection-level building blocks.

    buffer.py         ByteBuffer, the per-connection accumulation buffer
    connection.py     Connection (socket-backed chunk source + byte sink)
    driver.py         ConnectionDriver, the read/parse/dispatch loop
    socket_server.py  SocketServer, the accept loop

driver and socket_server are imported from their modules directly; they
depend on the http package, which itself depends on buffer.
"""

from .buffer import ByteBuffer
from .connection import (
    ByteSink,
    ChunkSource,
    Connection,
    ConnectionState,
    ReadKind,
    ReadResult,
)

__all__ = [
    "ByteBuffer",
    "ByteSink",
    "ChunkSource",
    "Connection",
    "ConnectionState",
    "ReadKind",
    "ReadResult",
]
