"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw bytes of one HTTP/1.1 request into an HTTPRequest object.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   POST /files/notes.txt HTTP/1.1\r\n        ← status line           │
    │   ─┬── ────────┬─────── ───┬────                                    │
    │    │           │           │                                        │
    │  Method      Target     Version (must be exactly HTTP/1.1)          │
    │                                                                     │
    │   Host: localhost:4221\r\n                  ← header block          │
    │   User-Agent: curl/8.4.0\r\n                                        │
    │   Content-Length: 5\r\n                                             │
    │   \r\n                                      ← blank line            │
    │   hello                                     ← body (raw bytes)      │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHAT WE DO (AND DON'T) VALIDATE
=============================================================================

The parser is deliberately small:

    1. The status line must split on single spaces into EXACTLY three
       tokens, and the third must be the literal "HTTP/1.1".
       Anything else → HTTPParseError (400 Bad Request).

    2. Method and target are taken verbatim. "BREW /../coffee" is a
       perfectly valid request as far as the parser is concerned; the
       router decides what it means.

    3. Header lines are split at the FIRST colon. Name and value are
       trimmed, so "Accept:text/html" and "Accept:   text/html" both give
       "text/html". Lines without a colon are skipped.

    4. Header names keep the case they arrived with. "User-Agent" and
       "user-agent" are two different keys here. A repeated header
       overwrites the earlier one (last wins).

    5. The body is every byte after the blank line. The connection layer
       already used Content-Length to cut exactly one message out of the
       socket stream, so the parser trusts what it is given.

=============================================================================
INTERVIEW QUESTIONS ABOUT HTTP PARSING
=============================================================================

Q: "How do you know when the HTTP headers end?"
A: "At the first empty line, i.e. the first \\r\\n\\r\\n. Everything before
   it is text (status line + headers), everything after it is the body."

Q: "Why keep the body as bytes?"
A: "POST /files/* uploads arbitrary files. Decoding a PNG as UTF-8 would
   corrupt it, so only the header section is ever decoded."

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict
import logging


logger = logging.getLogger(__name__)


CRLF = b"\r\n"
HEADER_TERMINATOR = b"\r\n\r\n"
SUPPORTED_VERSION = "HTTP/1.1"


class HTTPParseError(Exception):
    """
    Raised when request bytes do not form a usable request.

    This is the "error marker" of the parser: a request is either fully
    parsed or this exception is raised, never something in between.
    The server answers it with the carried status code (always 400 Bad
    Request today) and an empty body.
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code  # HTTP status to return


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    =========================================================================
    ATTRIBUTES
    =========================================================================

        method:         Request method, verbatim ("GET", "POST", ...)

        target:         Raw request target from the status line
                        "/echo/abc" (no decoding, no normalisation)

        version:        Protocol version, always "HTTP/1.1" once parsed

        headers:        Header name → value, in arrival order,
                        names case-sensitive as received

        body:           Raw body bytes (may be empty)

        path_params:    Filled in by the router for wildcard routes
                        "/files/*path" + "/files/a.txt" → {"path": "a.txt"}

        client_address: (ip, port) of the peer, for logging

    =========================================================================
    """

    method: str
    target: str
    version: str = SUPPORTED_VERSION
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    # Router-injected parameters
    path_params: Dict[str, str] = field(default_factory=dict)

    # Metadata
    client_address: tuple[str, int] = ("", 0)

    @property
    def user_agent(self) -> str:
        """Value of the User-Agent header, or "" when the client sent none."""
        return self.headers.get("User-Agent", "")

    def get_header(self, name: str, default: str = "") -> str:
        """
        Get a header value by its exact (case-sensitive) name.

        Args:
            name: Header name as the client spelled it.
            default: Value to return if the header is missing.
        """
        return self.headers.get(name, default)


class RequestParser:
    """
    Parses raw request bytes into HTTPRequest objects.

    ==========================================================================
    PARSER FLOW
    ==========================================================================

        raw bytes
            │
            ├──► find first \\r\\n           → status line
            │       split(" ") == 3 tokens?  no → HTTPParseError
            │       version == HTTP/1.1?     no → HTTPParseError
            │
            ├──► find first \\r\\n\\r\\n       → end of header block
            │       missing?                 → HTTPParseError
            │
            ├──► header block.split("\\r\\n")  → "Name: Value" pairs
            │
            └──► bytes after \\r\\n\\r\\n       → body

    ==========================================================================
    """

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse one complete HTTP message.

        Args:
            data: Raw bytes of exactly one request.
            client_address: Peer (ip, port) for logging.

        Returns:
            The parsed HTTPRequest.

        Raises:
            HTTPParseError: If the status line is malformed, the version is
                not HTTP/1.1, or the header block never terminates.
        """
        # =====================================================================
        # STEP 1: Status line (everything before the first CRLF)
        # =====================================================================
        status_end = data.find(CRLF)
        if status_end == -1:
            raise HTTPParseError("Incomplete request: no status line terminator")

        status_line = data[:status_end].decode("utf-8", errors="replace")
        method, target, version = self._parse_status_line(status_line)

        # =====================================================================
        # STEP 2: Header block (status line CRLF .. first CRLF CRLF)
        # =====================================================================
        # With no headers at all, the status line's own CRLF is the first
        # half of the terminator:
        #
        #   GET / HTTP/1.1\r\n\r\n
        #                 ▲
        #                 └── status_end == header_end, empty header block
        #
        header_end = find_header_end(data)
        if header_end == -1:
            raise HTTPParseError("Incomplete request: no header terminator")

        header_block = data[status_end + len(CRLF):header_end]
        headers = self._parse_headers(header_block.decode("utf-8", errors="replace"))

        # =====================================================================
        # STEP 3: Body (verbatim bytes after the blank line)
        # =====================================================================
        body = data[header_end + len(HEADER_TERMINATOR):]

        return HTTPRequest(
            method=method,
            target=target,
            version=version,
            headers=headers,
            body=body,
            client_address=client_address,
        )

    def _parse_status_line(self, line: str) -> tuple[str, str, str]:
        """
        Split "METHOD SP TARGET SP VERSION" into its three parts.

        Only single spaces separate tokens, so "GET  / HTTP/1.1" (two spaces)
        has four tokens and is rejected.

        Raises:
            HTTPParseError: On a wrong token count or unsupported version.
        """
        tokens = line.split(" ")
        if len(tokens) != 3:
            raise HTTPParseError(f"Invalid status line: {line!r}")

        method, target, version = tokens
        if version != SUPPORTED_VERSION:
            raise HTTPParseError(f"Unsupported protocol version: {version!r}")

        return method, target, version

    def _parse_headers(self, block: str) -> Dict[str, str]:
        """
        Parse the header block into an ordered dict.

        =====================================================================
        HEADER LINE FORMAT
        =====================================================================

            Name ":" OWS Value OWS

            "User-Agent: curl/8.4.0"   → ("User-Agent", "curl/8.4.0")
            "X-Empty:"                 → ("X-Empty", "")
            "Host:localhost"           → ("Host", "localhost")
            "garbage"                  → skipped

        =====================================================================
        """
        headers: Dict[str, str] = {}

        for line in block.split("\r\n"):
            if not line:
                continue

            name, sep, value = line.partition(":")
            if not sep:
                logger.debug(f"Skipping header line without colon: {line!r}")
                continue

            # Last duplicate wins
            headers[name.strip()] = value.strip()

        return headers


# =============================================================================
# FRAMING HELPERS
# =============================================================================
#
# The connection layer needs to know where a message ends BEFORE it can be
# parsed: headers end at the first CRLF CRLF, the body is Content-Length
# bytes long. These helpers work on raw bytes so they can be called on a
# half-received buffer.
#
# =============================================================================

def find_header_end(buffer: bytes) -> int:
    """Index of the first CRLF CRLF in buffer, or -1 if not received yet."""
    return buffer.find(HEADER_TERMINATOR)


def declared_content_length(header_section: bytes) -> int:
    """
    Read Content-Length out of raw header bytes.

    The lookup is case-insensitive here (unlike HTTPRequest.headers) because
    getting the framing wrong would leave body bytes on the wire. When the
    header repeats, the last value wins, as it does in HTTPRequest.headers.

    Returns:
        The declared length, or 0 when missing, negative, or not a number.
    """
    value = None
    text = header_section.decode("utf-8", errors="replace")
    for line in text.split("\r\n")[1:]:
        name, sep, rest = line.partition(":")
        if sep and name.strip().lower() == "content-length":
            value = rest.strip()

    if value is None:
        return 0
    try:
        return max(int(value), 0)
    except ValueError:
        return 0


def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0)
) -> HTTPRequest:
    """
    Convenience wrapper: RequestParser().parse(data, client_address).
    """
    return RequestParser().parse(data, client_address)
