"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket: collects the request bytes, writes the
single response, closes.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL
=============================================================================

TCP only guarantees that bytes arrive in order. It does NOT preserve the
chunks the client wrote:

    Client sends:                      Server might recv():
        "POST /files/a HTTP/1.1\r\n"       "POST /fi"
        "Content-Length: 5\r\n\r\n"        "les/a HTTP/1.1\r\nContent-Le"
        "hello"                            "ngth: 5\r\n\r\nhel"
                                           "lo"

So a single recv() is never assumed to be a whole request. The
connection keeps a buffer and reads until the message is complete:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                     │
    │   1. recv() until the buffer contains \r\n\r\n (end of headers)     │
    │   2. read Content-Length from the header section (0 if absent)      │
    │   3. recv() until Content-Length body bytes are buffered            │
    │   4. hand exactly headers + body to the parser                      │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

Anything the client sends after the declared body is ignored: there is
exactly one request per connection.

=============================================================================
CONNECTION LIFECYCLE
=============================================================================

    AWAITING_REQUEST ──► DISPATCHING ──► RESPONDING ──► CLOSED
           │                                 ▲
           │      malformed request (400)    │
           └─────────────────────────────────┘

    AWAITING_REQUEST ──────────────────────────────────► CLOSED
           peer ended the stream or the read timed out
           before any byte arrived (nothing is sent)

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid

from ..http.request import HTTPParseError, HEADER_TERMINATOR, find_header_end, declared_content_length


logger = logging.getLogger(__name__)

# Upper bounds on discarding client input at close
DRAIN_TIMEOUT = 0.5
DRAIN_LIMIT = 64 * 1024


class ConnectionState(Enum):
    """Where a connection is in its one-request lifecycle."""
    AWAITING_REQUEST = "awaiting_request"  # Accumulating request bytes
    DISPATCHING = "dispatching"            # Parsed, handler is running
    RESPONDING = "responding"              # Writing the response
    CLOSED = "closed"                      # Socket released


@dataclass
class Connection:
    """
    One accepted client connection.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                  Connection Responsibilities                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │  1. BUFFERED READING                                                │
    │     └── _buffer holds partial data between recv() calls            │
    │     └── framing: header terminator, then Content-Length            │
    │                                                                     │
    │  2. LIMITS                                                          │
    │     └── read timeout: a silent client is dropped                   │
    │     └── max_request_size: oversized requests are rejected          │
    │                                                                     │
    │  3. STATE TRACKING                                                  │
    │     └── which phase the request is in, for logs                    │
    │                                                                     │
    │  4. CLOSE                                                           │
    │     └── exactly once, even if called again                         │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier used in log lines.
        state: Current ConnectionState.
        created_at: When the connection was accepted.
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.AWAITING_REQUEST
    created_at: float = field(default_factory=time.time)

    # From ServerConfig
    buffer_size: int = 8192
    timeout: Optional[float] = 30.0
    max_request_size: int = 10 * 1024 * 1024

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0] if self.address else ""

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Accumulate one complete request message.

        Returns:
            The request bytes (headers + declared body), or None if the
            client closed the stream or the read timed out before sending
            anything. In both cases no response should be written.

        Raises:
            HTTPParseError: The stream ended or timed out mid-request, or
                the request grew past max_request_size. All answer 400.
        """
        self.state = ConnectionState.AWAITING_REQUEST

        try:
            # ─────────────────────────────────────────────────────────────
            # STEP 1: Read until the header terminator shows up
            # ─────────────────────────────────────────────────────────────
            while find_header_end(self._buffer) == -1:
                chunk = self._recv()
                if not chunk:
                    if not self._buffer:
                        logger.debug(f"[{self.id}] Connection ended")
                        return None
                    raise HTTPParseError("Connection ended before headers were complete")
                self._append(chunk)

            header_end = find_header_end(self._buffer)
            body_start = header_end + len(HEADER_TERMINATOR)

            # ─────────────────────────────────────────────────────────────
            # STEP 2: Read the declared body
            # ─────────────────────────────────────────────────────────────
            content_length = declared_content_length(self._buffer[:header_end])
            if body_start + content_length > self.max_request_size:
                raise HTTPParseError(f"Request too large: {body_start + content_length} bytes")

            while len(self._buffer) - body_start < content_length:
                chunk = self._recv()
                if not chunk:
                    received = len(self._buffer) - body_start
                    raise HTTPParseError(
                        f"Body truncated: expected {content_length} bytes, got {received}"
                    )
                self._append(chunk)

        except socket.timeout:
            if self._buffer:
                raise HTTPParseError(
                    f"Read timed out after {self.timeout}s with an incomplete request"
                )
            logger.info(f"[{self.id}] Read timed out after {self.timeout}s")
            return None

        # ─────────────────────────────────────────────────────────────────
        # STEP 3: Cut exactly one message out of the buffer
        # ─────────────────────────────────────────────────────────────────
        request_end = body_start + content_length
        request_data = self._buffer[:request_end]

        extra = len(self._buffer) - request_end
        if extra:
            logger.debug(f"[{self.id}] Ignoring {extra} trailing bytes")
        self._buffer = b""

        self.state = ConnectionState.DISPATCHING
        return request_data

    def _recv(self) -> bytes:
        """socket.recv() that reports an abrupt reset as end of stream."""
        try:
            return self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            return b""

    def _append(self, chunk: bytes):
        self._buffer += chunk
        if len(self._buffer) > self.max_request_size:
            raise HTTPParseError(f"Request too large: {len(self._buffer)} bytes")

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Write the full response.

        sendall() loops until every byte is written; a plain send() may
        stop after a partial write.

        Returns:
            True if sent, False if the client had already gone away.
        """
        self.state = ConnectionState.RESPONDING

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
        Shut down and release the socket. Safe to call more than once.

        ┌─────────────────────────────────────────────────────────────────┐
        │   1. shutdown(SHUT_WR)   FIN: "the response is complete"        │
        │   2. drain               discard anything the client still sent │
        │   3. close()             release the descriptor                 │
        └─────────────────────────────────────────────────────────────────┘

        Closing with unread bytes in the kernel buffer makes the OS send
        RST instead of FIN, which can destroy the response before the
        client reads it. Ignored trailing bytes are exactly that case.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        self._drain()

        try:
            self.socket.close()
        except OSError as e:
            logger.debug(f"[{self.id}] Error closing socket: {e}")

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Socket closed")

    def _drain(self):
        """Discard pending input, bounded by DRAIN_TIMEOUT and DRAIN_LIMIT."""
        deadline = time.monotonic() + DRAIN_TIMEOUT
        drained = 0

        try:
            while drained < DRAIN_LIMIT:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                chunk = self.socket.recv(self.buffer_size)
                if not chunk:
                    return
                drained += len(chunk)
        except OSError:
            return  # Includes socket.timeout

        logger.debug(f"[{self.id}] Stopped draining after {drained} bytes")

    def __enter__(self):
        """
        Context manager support:

            with Connection(sock, addr) as conn:
                data = conn.read_request()
                conn.send_response(response)
            # closed here
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
