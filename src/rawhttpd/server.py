"""
=============================================================================
MAIN HTTP SERVER
=============================================================================

Ties the pieces together: listener, worker threads, parser, router and
handlers.

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    HTTP SERVER ARCHITECTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │                        ┌─────────────────┐                          │
    │                        │   HTTPServer    │                          │
    │                        └────────┬────────┘                          │
    │                                 │                                   │
    │            ┌────────────────────┼────────────────────┐              │
    │            ▼                    ▼                    ▼              │
    │    ┌──────────────┐   ┌───────────────────┐   ┌──────────────┐      │
    │    │ SocketServer │   │ ConnectionWorkers │   │    Router    │      │
    │    │  (accept)    │   │ (thread per conn) │   │  (dispatch)  │      │
    │    └──────────────┘   └───────────────────┘   └──────┬───────┘      │
    │                                                      │              │
    │                               ┌──────────────────────┤              │
    │                               ▼                      ▼              │
    │                        ┌─────────────┐       ┌──────────────┐       │
    │                        │ FileHandler │       │ index / echo │       │
    │                        │ FileService │       │ user_agent   │       │
    │                        └─────────────┘       └──────────────┘       │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
REQUEST FLOW (one connection, one request, one response)
=============================================================================

    accept() ──► Connection ──► worker thread
                                     │
                    read_request()   │  accumulate until CRLFCRLF + body
                                     │  (peer closed / timeout → close, no reply)
                                     ▼
                    parse()          │  HTTPParseError → 400
                                     ▼
                    router.handle()  │  no route → 404
                                     │  handler raised → 500
                                     ▼
                    send_response()  │
                                     ▼
                    access log, close()

=============================================================================
"""

import time
import logging
from typing import Optional, Tuple

from .config import ServerConfig
from .core.socket_server import SocketServer
from .core.connection import Connection
from .core.workers import ConnectionWorkers
from .http.request import HTTPRequest, HTTPParseError, RequestParser
from .http.response import HTTPResponse, bad_request, internal_error
from .http.router import Router
from .handlers import FileHandler, FileService, index, echo, user_agent
from .access_log import RequestLog, log_request


logger = logging.getLogger(__name__)


# Seconds run() waits for in-flight connections once the listener stops
SHUTDOWN_GRACE_PERIOD = 5.0


class HTTPServer:
    """
    HTTP/1.1 server for a fixed set of routes.

    =========================================================================
    ROUTES (first match wins, any method unless noted)
    =========================================================================

        /               200, empty body
        /echo/<text>    200, <text> as text/plain
        /user-agent     200, User-Agent header as text/plain
        GET  /files/<p> 200 file bytes | 404 | 500
        POST /files/<p> 201 | 500
        anything else   404

    =========================================================================
    USAGE
    =========================================================================

        server = HTTPServer(ServerConfig(directory="/srv/files"))
        server.run()                     # Blocks until Ctrl+C / stop()

        # From another thread (tests):
        thread = threading.Thread(target=server.run, daemon=True)
        thread.start()
        server.wait_until_ready(timeout=5)
        ...
        server.stop()

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Server configuration. Defaults to ServerConfig().

        Raises:
            ValueError: The configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail fast

        self._socket_server = SocketServer(self.config)
        self._workers = ConnectionWorkers()
        self._parser = RequestParser()

        self._files = FileService(self.config.directory)
        self._router = Router()
        self._register_routes()

    def _register_routes(self):
        # Order matters: first match wins
        files = FileHandler(self._files)

        self._router.route("/")(index)
        self._router.route("/echo/*text")(echo)
        self._router.route("/user-agent")(user_agent)
        self._router.get("/files/*path")(files.get)
        self._router.post("/files/*path")(files.post)

    @property
    def address(self) -> Tuple[str, int]:
        """(host, port) actually bound, once running."""
        return self._socket_server.address

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Returns after stop(), SIGINT or SIGTERM, once in-flight
        connections have finished or the grace period has run out.

        Raises:
            OSError: The address could not be bound.
        """
        self._setup_logging()
        logger.info(f"Serving directory {self._files.root} on /files/")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def stop(self):
        """Ask run() to return. Safe from any thread."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listener is accepting. False on timeout."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("rawhttpd").setLevel(level)

    def _shutdown(self):
        logger.info("Shutting down server...")
        self._workers.join_all(timeout=SHUTDOWN_GRACE_PERIOD)
        logger.info("Server stopped")

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Called by SocketServer on the accept thread; hands off at once."""
        self._workers.spawn(self._process_connection, conn, name=f"conn-{conn.id}")

    def _process_connection(self, conn: Connection):
        """
        Serve one connection (runs on its own worker thread).

        Exactly one response is written, then the connection is closed.
        If the client sends nothing, or goes quiet past the timeout,
        nothing is written at all.
        """
        with conn:
            request: Optional[HTTPRequest] = None

            try:
                raw_request = conn.read_request()
            except HTTPParseError as e:
                logger.info(f"[{conn.id}] Bad request: {e}")
                raw_request = None
                response = bad_request()
            else:
                if raw_request is None:
                    return  # Peer ended the stream or timed out

            start_time = time.time()

            if raw_request is not None:
                try:
                    request = self._parser.parse(raw_request, conn.address)
                except HTTPParseError as e:
                    logger.info(f"[{conn.id}] Bad request: {e}")
                    response = bad_request()
                else:
                    logger.debug(f"[{conn.id}] {request.method} {request.target}")
                    response = self._dispatch(conn, request)

            if conn.send_response(response.to_bytes()):
                duration_ms = (time.time() - start_time) * 1000
                log_request(
                    RequestLog.create(conn.id, conn.client_ip, request, response, duration_ms),
                    self.config.log_format,
                )

    def _dispatch(self, conn: Connection, request: HTTPRequest) -> HTTPResponse:
        """Route the request; any unexpected handler exception becomes a 500."""
        try:
            return self._router.handle(request)
        except Exception as e:
            logger.exception(f"[{conn.id}] Handler error: {e}")
            return internal_error(str(e))
