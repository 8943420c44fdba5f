"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the framer and the server around it.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   Priority (highest to lowest):                                     │
    │                                                                     │
    │   1. Command-line arguments                                         │
    │      └── python -m httpframer --port 3000                           │
    │                                                                     │
    │   2. Environment variables                                          │
    │      └── HTTPFRAMER_PORT=3000 python -m httpframer                  │
    │                                                                     │
    │   3. Defaults in this dataclass                                     │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK
    - host, port, backlog, buffer_size, idle_timeout

    FRAMING
    - max_request_size, strict_content_length

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only (development)
    - "0.0.0.0" - All network interfaces (containers)
    """

    port: int = 8000
    """
    The port number to listen on. 0 asks the OS for a free port.
    """

    backlog: int = 128
    """Maximum number of queued, not yet accepted connections."""

    buffer_size: int = 8192
    """Max bytes requested from a single recv() (one chunk)."""

    idle_timeout: Optional[float] = 30.0
    """
    Seconds a connection may sit waiting for its next chunk.
    Expiry answers 408 Request Timeout and closes.
    None = wait forever (a slow client then holds its thread forever).
    """

    # ─────────────────────────────────────────────────────────────────────
    # FRAMING
    # ─────────────────────────────────────────────────────────────────────

    max_request_size: int = 10 * 1024 * 1024  # 10 MB
    """
    Upper bound for the header block and for a declared body.
    Exceeding it answers 413 Payload Too Large. 0 disables the limit.
    """

    strict_content_length: bool = False
    """
    Reject a Content-Length that is not a plain non-negative integer
    (400) instead of treating it as 0.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING / IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    server_name: str = "httpframer/1.0"

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

            HTTPFRAMER_HOST                   (default: 127.0.0.1)
            HTTPFRAMER_PORT                   (default: 8000)
            HTTPFRAMER_IDLE_TIMEOUT           seconds, "none" disables
            HTTPFRAMER_MAX_REQUEST_SIZE       bytes (default: 10 MB)
            HTTPFRAMER_STRICT_CONTENT_LENGTH  1/true/yes/on
            HTTPFRAMER_LOG_LEVEL              (default: INFO)
        """
        idle = os.getenv("HTTPFRAMER_IDLE_TIMEOUT", "30")
        return cls(
            host=os.getenv("HTTPFRAMER_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTPFRAMER_PORT", "8000")),
            idle_timeout=None if idle.lower() == "none" else float(idle),
            max_request_size=int(
                os.getenv("HTTPFRAMER_MAX_REQUEST_SIZE", str(10 * 1024 * 1024))
            ),
            strict_content_length=(
                os.getenv("HTTPFRAMER_STRICT_CONTENT_LENGTH", "").lower() in _TRUTHY
            ),
            log_level=os.getenv("HTTPFRAMER_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """Fail fast on nonsensical values."""
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.idle_timeout is not None and self.idle_timeout <= 0:
            raise ValueError("idle_timeout must be > 0 or None")

        if self.max_request_size < 0:
            raise ValueError("max_request_size must be >= 0")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log_level: {self.log_level}")
