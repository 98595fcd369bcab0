"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

The listener: binds the port, accepts clients, wraps each accepted socket
in a Connection and hands it to a callback. It knows nothing about HTTP.

SOCKET LIFECYCLE (server side):

    socket()  ──►  bind()  ──►  listen()  ──►  accept() ─┐
                                                 ▲       │ new client socket
                                                 └───────┘ per connection

accept() returns a NEW socket for each client; the listening socket keeps
listening. That is how one listener serves many clients.

=============================================================================
INTERRUPTIBLE ACCEPT
=============================================================================

accept() blocks. To let shutdown() take effect, the listening socket has
a 1 second timeout and the loop re-checks its running flag each time
accept() gives up:

    while running:
        try:
            accept()            # at most 1 second
        except timeout:
            continue            # re-check running

=============================================================================
SIGNALS
=============================================================================

SIGINT (Ctrl+C) and SIGTERM (kill, docker stop) trigger shutdown() instead
of killing the process mid-response. Python only allows signal handlers
on the main thread, so when the server runs in a background thread (as
the tests do) handlers are left alone and shutdown() is called directly.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    TCP listener that feeds Connections to a callback.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      SocketServer Internals                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │    start(handler)                                                   │
    │        ├──► _create_socket()   SO_REUSEADDR, TCP_NODELAY, 1s timeout│
    │        ├──► bind() / listen()                                       │
    │        ├──► _setup_signals()   main thread only                     │
    │        ├──► _ready.set()       wait_until_ready() returns           │
    │        └──► _accept_loop()     blocks until shutdown()              │
    │                                                                     │
    │    shutdown()                                                       │
    │        └──► _running = False                                        │
    │                                                                     │
    │    _cleanup()                                                       │
    │        └──► restore signal handlers, close listening socket         │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown
    """

    def __init__(self, config: ServerConfig):
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._bound_address: Optional[Tuple[str, int]] = None
        self._running = False

        self._ready = threading.Event()

        self._original_handlers: dict = {}

    @property
    def address(self) -> Tuple[str, int]:
        """
        The bound (host, port).

        Before binding this is the configured address. After binding it is
        what the OS actually assigned, so port 0 resolves to a real port.
        """
        if self._bound_address:
            return self._bound_address
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Rebind right after a restart instead of waiting out TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Send small responses immediately (disable Nagle)
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        # accept() timeout, so the loop can notice shutdown()
        sock.settimeout(1.0)

        return sock

    def _setup_signals(self):
        """Route SIGTERM/SIGINT to shutdown(). No-op off the main thread."""
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on the main thread, signal handlers not installed")
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        # Kept so an embedding application gets its handlers back
        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and accept until shutdown() is called.

        Args:
            connection_handler: Called with each accepted Connection. It
                must return quickly (the accept loop waits on it), so it
                should hand the connection off to a worker thread.

        Raises:
            OSError: The address could not be bound.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)
        self._bound_address = self._socket.getsockname()[:2]

        self._running = True
        self._setup_signals()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")
        self._ready.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                # Listening socket closed underneath us, usually shutdown
                if self._running:
                    logger.error(f"Accept error: {e}")
                break

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
                max_request_size=self.config.max_request_size,
            )
            connection_handler(conn)

    def shutdown(self):
        """Stop accepting. Safe to call from any thread, more than once."""
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._ready.clear()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. False on timeout."""
        return self._ready.wait(timeout)
