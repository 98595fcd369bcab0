"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Every knob the server has, in one dataclass.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   Priority (highest to lowest):                                     │
    │                                                                     │
    │   1. Command-line arguments                                         │
    │      └── python -m rawhttpd --directory /srv/files                  │
    │                                                                     │
    │   2. Environment variables                                          │
    │      └── HTTP_PORT=8080 python -m rawhttpd                          │
    │                                                                     │
    │   3. Default values (in this dataclass)                             │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

The same ServerConfig instance is handed to the socket server (network
settings), every Connection (buffer, timeout, size cap) and the file
service (directory). Nothing reads module-level globals.

=============================================================================
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional


LOG_FORMATS = ("text", "json")

ENV_PREFIX = "HTTP_"


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK
    - host, port, backlog, buffer_size, timeout

    REQUESTS
    - max_request_size

    FILES
    - directory (served under /files/)

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "localhost"
    """Address to bind. "0.0.0.0" listens on every interface."""

    port: int = 4221
    """TCP port to listen on."""

    backlog: int = 128
    """Pending connections the OS queues before refusing new ones."""

    buffer_size: int = 8192
    """Bytes requested per recv() call."""

    timeout: Optional[float] = 30.0
    """
    Seconds a connection may sit silent before it is dropped.
    None waits forever (a silent client then holds its thread forever).
    """

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST LIMITS
    # ─────────────────────────────────────────────────────────────────────

    max_request_size: int = 10 * 1024 * 1024  # 10 MB
    """Largest request (headers + body) accepted; bigger ones get 400."""

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    directory: str = "."
    """Directory read and written by GET/POST /files/<path>."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG, INFO, WARNING, ERROR or CRITICAL."""

    log_format: str = "text"
    """Access log format: 'text' (Apache-like) or 'json' (one object per line)."""

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        HTTP_HOST        Bind address (default: localhost)
        HTTP_PORT        Port (default: 4221)
        HTTP_DIRECTORY   Files directory (default: .)
        HTTP_TIMEOUT     Read timeout in seconds (default: 30)
        HTTP_LOG_LEVEL   Logging level (default: INFO)
        HTTP_LOG_FORMAT  Access log format (default: text)

        =====================================================================

        Args:
            environ: Mapping to read instead of os.environ (for tests).

        Raises:
            ValueError: HTTP_PORT or HTTP_TIMEOUT is not a number.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        def get(name: str, default):
            return env.get(ENV_PREFIX + name, default)

        return cls(
            host=get("HOST", defaults.host),
            port=int(get("PORT", defaults.port)),
            directory=get("DIRECTORY", defaults.directory),
            timeout=float(get("TIMEOUT", defaults.timeout)),
            log_level=get("LOG_LEVEL", defaults.log_level),
            log_format=get("LOG_FORMAT", defaults.log_format),
        )

    def validate(self) -> None:
        """
        Check every value, raising ValueError on the first bad one.

        Called by HTTPServer.__init__ so a typo fails at startup rather
        than on the first request that needs the value.
        """
        if not 0 < self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 1-65535.")

        if not os.path.isdir(self.directory):
            raise ValueError(f"Directory does not exist: {self.directory}")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_request_size < self.buffer_size:
            raise ValueError("max_request_size must be >= buffer_size")

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(
                f"Unknown log format: {self.log_format}. Use one of {', '.join(LOG_FORMATS)}."
            )
