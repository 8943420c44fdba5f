"""
=============================================================================
HTTPFRAMER CLI ENTRY POINT
=============================================================================

    python -m httpframer                         # 127.0.0.1:8000
    python -m httpframer --port 3000
    python -m httpframer --host 0.0.0.0          # containers
    python -m httpframer --strict-content-length
    python -m httpframer --log-level DEBUG       # log every chunk

Flags override HTTPFRAMER_* environment variables, which override the
ServerConfig defaults.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import ServerConfig
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="httpframer",
        description="One-request-per-connection HTTP/1.1 server with an incremental request framer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m httpframer                          # Run with defaults
  python -m httpframer --port 3000              # Custom port
  python -m httpframer --idle-timeout 5         # Drop slow clients sooner
  python -m httpframer --strict-content-length  # 400 on bad Content-Length
        """,
    )

    parser.add_argument("--host", "-H", help="Host to bind to (default: 127.0.0.1)")
    parser.add_argument("--port", "-p", type=int, help="Port to listen on (default: 8000)")
    parser.add_argument(
        "--idle-timeout",
        type=float,
        help="Seconds to wait for the next chunk before answering 408 (default: 30)",
    )
    parser.add_argument(
        "--max-request-size",
        type=int,
        help="Largest header block / body accepted, in bytes; 0 disables (default: 10 MB)",
    )
    parser.add_argument(
        "--strict-content-length",
        action="store_true",
        default=None,
        help="Reject a malformed Content-Length instead of treating it as 0",
    )
    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {__version__}")

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment first, then any flag that was actually given."""
    config = ServerConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.idle_timeout is not None:
        config.idle_timeout = args.idle_timeout
    if args.max_request_size is not None:
        config.max_request_size = args.max_request_size
    if args.strict_content_length is not None:
        config.strict_content_length = args.strict_content_length
    if args.log_level is not None:
        config.log_level = args.log_level

    return config


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
        server = HTTPServer(config)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    try:
        server.run()
    except OSError as e:
        print(f"Server error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
