"""
Inline handlers: the routes that answer straight from the request.

    /             → 200, no body
    /echo/<text>  → 200, body <text>
    /user-agent   → 200, body = User-Agent header (or "")

These answer any method.
"""

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok


def index(request: HTTPRequest) -> HTTPResponse:
    """Empty 200, handy as a liveness check."""
    return ok()


def echo(request: HTTPRequest) -> HTTPResponse:
    """Return whatever follows /echo/ in the target, verbatim."""
    return ok(request.path_params.get("text", ""))


def user_agent(request: HTTPRequest) -> HTTPResponse:
    """Return the client's User-Agent header."""
    return ok(request.user_agent)
