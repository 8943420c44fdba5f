"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together:

    ┌──────────────┐  accept   ┌────────────┐  thread   ┌──────────────────┐
    │ SocketServer │──────────►│ Connection │──────────►│ ConnectionDriver │
    └──────────────┘           └────────────┘           │  ByteBuffer      │
                                                        │  MessageFramer   │
                                                        │  handler(msg)    │
                                                        └──────────────────┘

Every accepted connection gets its own thread, its own buffer and its own
framer. Connections share nothing but the (stateless) handler, so there
are no locks on the request path.

One request per connection: the driver closes the socket after writing
the response.

=============================================================================
"""

import logging
import threading
from typing import Optional, Set

from .config import ServerConfig
from .core.connection import Connection
from .core.driver import ConnectionDriver, DriverOutcome, Handler
from .core.socket_server import SocketServer
from .handlers import echo_handler
from .http.framer import MessageFramer


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Threaded HTTP/1.1 server, one request per connection.

    Usage:
        def hello(message):
            return ok(f"hi {message.target}\\n")

        server = HTTPServer(ServerConfig(port=8000), handler=hello)
        server.run()    # blocks until Ctrl+C / SIGTERM / shutdown()
    """

    def __init__(self, config: Optional[ServerConfig] = None, handler: Optional[Handler] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self.handler: Handler = handler or echo_handler

        self._socket_server = SocketServer(self.config)
        self._workers: Set[threading.Thread] = set()
        self._workers_lock = threading.Lock()

    @property
    def address(self):
        return self._socket_server.address

    def new_framer(self) -> MessageFramer:
        """A fresh framer per connection, configured from ServerConfig."""
        return MessageFramer(
            max_request_size=self.config.max_request_size or None,
            strict_content_length=self.config.strict_content_length,
        )

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None, setup_logging: bool = True):
        """
        Start serving (blocking).

        Args:
            host: Override config host.
            port: Override config port.
            setup_logging: Configure the root logger from config.log_level.
        """
        if host:
            self.config.host = host
        if port is not None:
            self.config.port = port

        if setup_logging:
            self._setup_logging()

        logger.info(f"Starting {self.config.server_name} on {self.config.host}:{self.config.port}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self):
        """Ask the accept loop to stop. run() returns once it has."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("httpframer").setLevel(level)

    def _shutdown(self, timeout: float = 5.0):
        logger.info("Shutting down server...")

        with self._workers_lock:
            workers = list(self._workers)

        # In-flight connections finish on their own (idle_timeout bounds them)
        for worker in workers:
            worker.join(timeout=timeout)

        logger.info("Server stopped")

    # =========================================================================
    # PER-CONNECTION WORK
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        worker = threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        with self._workers_lock:
            self._workers.add(worker)
        worker.start()

    def _process_connection(self, conn: Connection) -> DriverOutcome:
        try:
            driver = ConnectionDriver(
                source=conn,
                sink=conn,
                handler=self.handler,
                framer=self.new_framer(),
                connection_id=conn.id,
            )
            outcome = driver.run()
            logger.debug(f"[{conn.id}] {outcome.state.value}: {outcome.reason}")
            return outcome
        finally:
            # ConnectionDriver.run() already closed it; close() is idempotent
            conn.close()
            with self._workers_lock:
                self._workers.discard(threading.current_thread())
