"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Generator, List, Optional

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from httpframer import HTTPServer, ServerConfig
from httpframer.core.connection import ReadResult


@pytest.fixture
def sample_get_request() -> bytes:
    """The GET example: no body."""
    return (
        b"GET /index.html HTTP/1.1\r\n"
        b"Host: example.com\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """POST with a 24-byte body."""
    body = b"name=alice&role=operator"
    assert len(body) == 24
    return (
        b"POST /submit?draft=1 HTTP/1.1\r\n"
        b"Host: example.com\r\n"
        b"Content-Type: application/x-www-form-urlencoded\r\n"
        b"Content-Length: 24\r\n"
        b"\r\n"
    ) + body


# =============================================================================
# FAKE COLLABORATORS
# =============================================================================

class ScriptedSource:
    """Chunk source that replays a fixed list of ReadResults, then END."""

    def __init__(self, results: List[ReadResult]):
        self._results = list(results)
        self.reads = 0

    @classmethod
    def from_chunks(cls, *chunks: bytes) -> "ScriptedSource":
        return cls([ReadResult.chunk(c) for c in chunks] + [ReadResult.end()])

    def next_chunk(self) -> ReadResult:
        self.reads += 1
        if self._results:
            return self._results.pop(0)
        return ReadResult.end()


class RecordingSink:
    """Byte sink that records writes and counts close() calls."""

    def __init__(self, fail_writes: bool = False):
        self.fail_writes = fail_writes
        self.writes: List[bytes] = []
        self.close_count = 0

    def send_response(self, data: bytes) -> bool:
        if self.fail_writes:
            return False
        self.writes.append(data)
        return True

    def close(self) -> None:
        self.close_count += 1

    @property
    def status_line(self) -> Optional[bytes]:
        if not self.writes:
            return None
        return self.writes[0].split(b"\r\n", 1)[0]


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def failing_sink() -> RecordingSink:
    """Sink whose writes all fail, as if the client hung up."""
    return RecordingSink(fail_writes=True)


# =============================================================================
# LIVE SERVER
# =============================================================================

@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class LiveServer:
    """Runs an HTTPServer in a background thread."""

    def __init__(self, server: HTTPServer, port: int):
        self.server = server
        self.port = port
        self._thread: Optional[threading.Thread] = None

    def start(self):
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"port": self.port, "setup_logging": False},
            daemon=True,
        )
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def connect(self) -> socket.socket:
        sock = socket.create_connection(("127.0.0.1", self.port), timeout=5.0)
        return sock


@pytest.fixture
def live_server(free_port: int) -> Generator[LiveServer, None, None]:
    """Echo server with a short idle timeout."""
    server = HTTPServer(ServerConfig(
        host="127.0.0.1",
        port=free_port,
        idle_timeout=1.0,
        max_request_size=64 * 1024,
        log_level="WARNING",
    ))

    srv = LiveServer(server, free_port)
    srv.start()

    yield srv

    srv.stop()


@pytest.fixture
def scripted_source():
    """Factory: scripted_source(b"chunk1", b"chunk2") or scripted_source(results=[...])."""
    def make(*chunks: bytes, results: Optional[List[ReadResult]] = None) -> ScriptedSource:
        if results is not None:
            return ScriptedSource(results)
        return ScriptedSource.from_chunks(*chunks)
    return make
