"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status table used when writing the first line of every response.

=============================================================================
WHAT THE CLIENT SEES
=============================================================================

    HTTP/1.1 404 Not Found\r\n
    ──┬───── ─┬─ ────┬────
      │       │      │
    Version  Code  Reason phrase

The server only ever produces a handful of codes:

    ┌──────┬────────────────────────┬──────────────────────────────────────┐
    │ Code │ Phrase                 │ When                                 │
    ├──────┼────────────────────────┼──────────────────────────────────────┤
    │ 200  │ OK                     │ /, /echo/*, /user-agent, file read   │
    │ 201  │ Created                │ file written by POST /files/*        │
    │ 400  │ Bad Request            │ request could not be parsed          │
    │ 404  │ Not Found              │ unknown route or missing file        │
    │ 500  │ Internal Server Error  │ file read/write failed               │
    └──────┴────────────────────────┴──────────────────────────────────────┘

Any other integer still gets a status line: the phrase falls back to
UNKNOWN_STATUS_PHRASE instead of raising. A typo in a handler should never
turn into a dropped connection.

=============================================================================
"""

from enum import IntEnum


UNKNOWN_STATUS_PHRASE = "I don't know this code"


class HTTPStatus(IntEnum):
    """
    Status codes the server knows how to name.

    IntEnum members compare equal to plain integers, so handlers can pass
    either HTTPStatus.NOT_FOUND or 404 wherever a status is expected.
    """

    OK = 200                        # Request handled, body (maybe) follows
    CREATED = 201                   # POST stored a new file
    BAD_REQUEST = 400               # Malformed status line / wrong version
    NOT_FOUND = 404                 # No route, or no such file
    INTERNAL_SERVER_ERROR = 500     # Filesystem said no

    @property
    def phrase(self) -> str:
        """Reason phrase for this status ("OK", "Not Found", ...)."""
        return _STATUS_PHRASES[self]


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}


def reason_phrase(code: int) -> str:
    """
    Look up the reason phrase for a numeric status code.

    Args:
        code: Any integer (HTTPStatus members work too).

    Returns:
        The standard phrase for known codes, UNKNOWN_STATUS_PHRASE otherwise.

    Example:
        reason_phrase(404)  # "Not Found"
        reason_phrase(999)  # "I don't know this code"
    """
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return UNKNOWN_STATUS_PHRASE


def status_text(code: int) -> str:
    """Code and phrase as they appear after "HTTP/1.1 " ("200 OK")."""
    return f"{int(code)} {reason_phrase(code)}"
