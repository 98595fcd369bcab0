"""
=============================================================================
RAWHTTPD CLI ENTRY POINT
=============================================================================

    # Serve the current directory on localhost:4221
    python -m rawhttpd

    # Serve a specific directory under /files/
    python -m rawhttpd --directory /tmp/files

    # Listen on all interfaces, verbose logs
    python -m rawhttpd --host 0.0.0.0 --log-level DEBUG

Settings come from, highest priority first: command-line flags, HTTP_*
environment variables (see ServerConfig.from_env), built-in defaults.

An invalid setting (e.g. a --directory that doesn't exist) is printed to
stderr and the process exits with status 1.

=============================================================================
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .config import ServerConfig, LOG_FORMATS
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rawhttpd",
        description="Minimal HTTP/1.1 server on raw TCP sockets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m rawhttpd                          # Serve . on localhost:4221
  python -m rawhttpd --directory /tmp/files   # Serve /tmp/files under /files/
  python -m rawhttpd --port 8080              # Custom port
        """
    )

    # Every default is None so that "not given" falls through to the
    # environment / dataclass defaults

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--directory", "-d",
        default=None,
        help="Directory served under /files/ (default: .)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: localhost)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 4221)"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for a complete request (default: 30)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="Access log format (default: text)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"rawhttpd {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment config, with every flag that was given layered on top."""
    config = ServerConfig.from_env()

    overrides = {
        "directory": args.directory,
        "host": args.host,
        "port": args.port,
        "timeout": args.timeout,
        "log_level": args.log_level,
        "log_format": args.log_format,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(config, name, value)

    return config


def main(argv: Optional[List[str]] = None):
    """
    Parse arguments, build the server, run it until interrupted.

    Exits with status 1 on invalid configuration or if the port can't be
    bound.
    """
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
        server = HTTPServer(config)  # Validates
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
