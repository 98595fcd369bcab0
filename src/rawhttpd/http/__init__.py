"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Bytes in, bytes out. Nothing here touches a socket.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST PARSER (request.py)                                         │
    │ b"GET /echo/hi HTTP/1.1\r\nUser-Agent: curl\r\n\r\n"                │
    │   → HTTPRequest(method="GET", target="/echo/hi", ...)               │
    │ Malformed status line or wrong version → HTTPParseError (400)       │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ RESPONSE BUILDER (response.py)                                      │
    │ HTTPResponse(status=200) → b"HTTP/1.1 200 OK\r\n\r\n"               │
    │ No implicit headers: what you set is what is sent                   │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ ROUTER (router.py)                                                  │
    │ "/echo/*text" + "/echo/a/b" → handler, {"text": "a/b"}              │
    │ First match wins; no match → 404                                    │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ STATUS CODES (status_codes.py)                                      │
    │ 200 OK, 201 Created, 400 Bad Request, 404 Not Found,                │
    │ 500 Internal Server Error; anything else "I don't know this code"   │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
HTTP MESSAGE FORMAT
=============================================================================

    REQUEST:                          RESPONSE:
    ─────────                         ──────────
    GET /path HTTP/1.1\r\n            HTTP/1.1 200 OK\r\n
    Header: Value\r\n                 Header: Value\r\n
    \r\n                              \r\n
    [body]                            [body]

=============================================================================
"""

from .request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    parse_request,
    find_header_end,
    declared_content_length,
)
from .response import (
    HTTPResponse,
    ResponseBuilder,
    build_response,
    ok,              # 200 OK
    created,         # 201 Created
    bad_request,     # 400 Bad Request
    not_found,       # 404 Not Found
    internal_error,  # 500 Internal Server Error
)
from .router import Router, Route, RouteMatch
from .status_codes import HTTPStatus, reason_phrase, status_text, UNKNOWN_STATUS_PHRASE

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",
    "find_header_end",
    "declared_content_length",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "build_response",
    "ok",
    "created",
    "bad_request",
    "not_found",
    "internal_error",

    # Routing
    "Router",
    "Route",
    "RouteMatch",

    # Status codes
    "HTTPStatus",
    "reason_phrase",
    "status_text",
    "UNKNOWN_STATUS_PHRASE",
]
