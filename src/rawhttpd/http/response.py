"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Serializes a status code, an ordered header mapping and a body into the
bytes that go back over the socket.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │    HTTP/1.1 200 OK\r\n                   ← status line              │
    │    Content-Type: text/plain\r\n          ← headers, in the order    │
    │    Content-Length: 3\r\n                   they were set            │
    │    \r\n                                  ← blank line               │
    │    abc                                   ← body                     │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

Smallest possible response (no headers, no body):

    b"HTTP/1.1 200 OK\r\n\r\n"

=============================================================================
NO IMPLICIT HEADERS
=============================================================================

to_bytes() writes EXACTLY the headers it was given. It never adds
Content-Length, Date or Server on its own. Whoever attaches a body is
responsible for describing it:

    ResponseBuilder().text("abc")
        → Content-Type: text/plain
        → Content-Length: 3

    ResponseBuilder().octet_stream(file_bytes)
        → Content-Type: application/octet-stream
        → Content-Length: len(file_bytes)

That keeps the wire format fully predictable: what the handler built is
what the client receives, byte for byte.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from .status_codes import HTTPStatus, status_text


HTTP_VERSION = "HTTP/1.1"
TEXT_PLAIN = "text/plain"
OCTET_STREAM = "application/octet-stream"

Body = Union[str, bytes]


def _to_bytes(body: Body) -> bytes:
    """Encode str bodies as UTF-8; pass bytes through."""
    if isinstance(body, str):
        return body.encode("utf-8")
    return body


@dataclass
class HTTPResponse:
    """
    An HTTP response waiting to be written to the client.

    =========================================================================
    RESPONSE LIFECYCLE
    =========================================================================

        Handler returns          to_bytes()              Connection sends
        HTTPResponse    ─────►   serializes    ─────►    raw bytes, then
            │                       │                    closes the socket
        HTTPResponse(            b"HTTP/1.1 201 Created\r\n\r\n"
          status=201,
        )

    =========================================================================
    """

    status: int = HTTPStatus.OK                             # Any integer
    headers: Dict[str, str] = field(default_factory=dict)   # Insertion-ordered
    body: bytes = b""

    @property
    def status_line(self) -> str:
        """
        "HTTP/1.1 <code> <phrase>".

        Unknown codes still produce a line, with the fallback phrase:
        "HTTP/1.1 999 I don't know this code".
        """
        return f"{HTTP_VERSION} {status_text(self.status)}"

    def set_header(self, name: str, value: Union[str, int]) -> "HTTPResponse":
        """Set a header (kept in insertion order). Returns self for chaining."""
        self.headers[name] = str(value)
        return self

    def to_bytes(self) -> bytes:
        """
        Serialize to wire format.

        Lines (status line, each header, blank line) are joined with CRLF and
        the body is appended untouched:

            HTTP/1.1 404 Not Found\\r\\n
            \\r\\n

        Returns:
            Complete response bytes, ready for socket.sendall().
        """
        lines = [self.status_line]
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")

        # Empty line separates headers from body
        lines.append("")

        head = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return head + _to_bytes(self.body)


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

    Each method returns self, so a response reads top to bottom:

        response = (ResponseBuilder()
            .status(HTTPStatus.OK)
            .text("hello")
            .build())

    text() and octet_stream() set Content-Type AND Content-Length together
    with the body, which is how handlers satisfy the "body implies both
    headers" rule without to_bytes() guessing.
    """

    def __init__(self):
        self._status: int = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""

    def status(self, status: int) -> "ResponseBuilder":
        """Set the status code."""
        self._status = status
        return self

    def header(self, name: str, value: Union[str, int]) -> "ResponseBuilder":
        """Add a single header."""
        self._headers[name] = str(value)
        return self

    def headers(self, headers: Dict[str, Union[str, int]]) -> "ResponseBuilder":
        """Add several headers at once, in the mapping's order."""
        for name, value in headers.items():
            self.header(name, value)
        return self

    def body(self, body: Body) -> "ResponseBuilder":
        """
        Set the raw body WITHOUT touching any header.

        Prefer text() / octet_stream(); use this only when the caller sets
        Content-Type and Content-Length itself.
        """
        self._body = _to_bytes(body)
        return self

    def text(self, text: str, content_type: str = TEXT_PLAIN) -> "ResponseBuilder":
        """
        Plain text body.

        Content-Length is the UTF-8 byte length, not len(text):
        "héllo" is 5 characters but 6 bytes.
        """
        return self._with_body(_to_bytes(text), content_type)

    def octet_stream(self, content: bytes) -> "ResponseBuilder":
        """Binary body served as application/octet-stream."""
        return self._with_body(content, OCTET_STREAM)

    def _with_body(self, content: bytes, content_type: str) -> "ResponseBuilder":
        self._body = content
        self.header("Content-Type", content_type)
        self.header("Content-Length", len(content))
        return self

    def build(self) -> HTTPResponse:
        """Create the HTTPResponse."""
        return HTTPResponse(
            status=self._status,
            headers=dict(self._headers),
            body=self._body,
        )

    def to_bytes(self) -> bytes:
        """build().to_bytes() in one step."""
        return self.build().to_bytes()


def build_response(
    status: int = HTTPStatus.OK,
    body: Body = "",
    headers: Optional[Dict[str, Union[str, int]]] = None,
) -> bytes:
    """
    Serialize a response in one call.

    Args:
        status: Status code (unknown codes get the fallback phrase).
        body: Response body; str is UTF-8 encoded.
        headers: Headers in the order they should appear. Nothing is added.

    Returns:
        Response bytes.

    Example:
        build_response(200)
        # b"HTTP/1.1 200 OK\\r\\n\\r\\n"
    """
    return (ResponseBuilder()
        .status(status)
        .headers(headers or {})
        .body(body)
        .to_bytes())


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# One-liners for the responses the router produces.
#
#     return ok()                        # 200, no body
#     return not_found()                 # 404, no body
#     return internal_error(str(exc))    # 500, text/plain message
#
# =============================================================================

def ok(body: Optional[Body] = None, content_type: str = TEXT_PLAIN) -> HTTPResponse:
    """
    200 OK.

    With no body the response has no headers at all. With a body,
    Content-Type and Content-Length are set.
    """
    builder = ResponseBuilder().status(HTTPStatus.OK)
    if body is None:
        return builder.build()
    if isinstance(body, str):
        return builder.text(body, content_type).build()
    return builder._with_body(body, content_type).build()


def created() -> HTTPResponse:
    """201 Created, empty body."""
    return ResponseBuilder().status(HTTPStatus.CREATED).build()


def bad_request() -> HTTPResponse:
    """400 Bad Request, empty body."""
    return ResponseBuilder().status(HTTPStatus.BAD_REQUEST).build()


def not_found() -> HTTPResponse:
    """404 Not Found, empty body."""
    return ResponseBuilder().status(HTTPStatus.NOT_FOUND).build()


def internal_error(message: str) -> HTTPResponse:
    """
    500 Internal Server Error.

    The body is the underlying error message as text/plain, so the client
    sees e.g. "[Errno 13] Permission denied: '/srv/files/locked.txt'".
    """
    return (ResponseBuilder()
        .status(HTTPStatus.INTERNAL_SERVER_ERROR)
        .text(message)
        .build())
