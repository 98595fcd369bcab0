"""
=============================================================================
URL ROUTER
=============================================================================

Maps a request's method and raw target to a handler function.

Two kinds of patterns are supported:
- Exact paths:      /          /user-agent
- Wildcard paths:   /echo/*text    /files/*path

=============================================================================
ROUTING FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ROUTING FLOW                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   GET /files/report.pdf                                             │
    │        │                                                            │
    │        ▼                                                            │
    │   Registered routes (checked in registration order):                │
    │                                                                     │
    │     ANY  /             → index                                      │
    │     ANY  /echo/*text   → echo                                       │
    │     ANY  /user-agent   → user_agent                                 │
    │     GET  /files/*path  → files.get       ← MATCH                    │
    │     POST /files/*path  → files.post                                 │
    │                                                                     │
    │   path_params = {"path": "report.pdf"}                              │
    │        │                                                            │
    │        ▼                                                            │
    │   files.get(request)                                                │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
MATCHING RULES
=============================================================================

1. First match wins. Register specific routes before general ones.

2. The target is matched RAW: no URL decoding, no trailing-slash
   normalisation, no query-string stripping. "/user-agent/" and
   "/user-agent?x=1" are both different from "/user-agent".

3. A wildcard captures everything after its prefix, slashes included:

       /echo/*text  +  /echo/a/b/c   →  {"text": "a/b/c"}
       /echo/*text  +  /echo/        →  {"text": ""}
       /echo/*text  +  /echo         →  no match

4. No route for the method + target → 404 Not Found. The server never
   answers 405; a DELETE on /files/x is simply a route that doesn't exist.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Callable, Optional, Dict, List
import re
import logging

from .request import HTTPRequest
from .response import HTTPResponse, not_found


logger = logging.getLogger(__name__)


# Handler: takes a request, returns a response
Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass
class Route:
    """
    A registered route.

        Route(
            path="/files/*path",    # Pattern as registered
            method="GET",           # None = any method
            handler=files.get,
            _pattern=<compiled>,    # ^/files/(?P<path>.*)$
        )
    """

    path: str
    method: Optional[str]
    handler: Handler

    # Internal: compiled regex pattern for matching
    _pattern: Optional[re.Pattern] = field(default=None, repr=False)


@dataclass
class RouteMatch:
    """A matched route plus the wildcard values it captured."""

    route: Route
    params: Dict[str, str]


class Router:
    """
    Ordered list of routes with a first-match dispatcher.

    Usage:
        router = Router()

        @router.route("/")
        def index(request):
            return ok()

        @router.get("/files/*path")
        def read(request):
            ...

        response = router.handle(request)
    """

    def __init__(self):
        self._routes: List[Route] = []

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        path: str,
        handler: Handler,
        method: Optional[str] = None,
    ) -> Route:
        """
        Register a route.

        Args:
            path: Exact path ("/user-agent") or wildcard pattern ("/echo/*text").
            handler: Function taking an HTTPRequest and returning an HTTPResponse.
            method: Method filter; None matches any method.

        Returns:
            The registered Route.
        """
        route = Route(
            path=path,
            method=method.upper() if method else None,
            handler=handler,
            _pattern=self._compile_pattern(path),
        )
        self._routes.append(route)
        return route

    def _compile_pattern(self, path: str) -> re.Pattern:
        """
        Compile a route pattern into an anchored regex.

        =====================================================================
        PATTERN COMPILATION
        =====================================================================

            "/"              → ^/$
            "/user-agent"    → ^/user\\-agent$
            "/echo/*text"    → ^/echo/(?P<text>.*)$

        A "*name" segment must be the last one; anything after it is
        ignored.

        =====================================================================
        """
        regex_parts = ["^"]

        for segment in path.split("/")[1:]:
            regex_parts.append("/")

            if segment.startswith("*"):
                param_name = segment[1:] or "wildcard"
                regex_parts.append(f"(?P<{param_name}>.*)")
                break  # Wildcard consumes everything, stop here

            regex_parts.append(re.escape(segment))

        regex_parts.append("$")
        return re.compile("".join(regex_parts), re.DOTALL)

    # =========================================================================
    # ROUTE MATCHING
    # =========================================================================

    def match(self, method: str, target: str) -> Optional[RouteMatch]:
        """
        Find the first route matching method and target.

        Returns:
            RouteMatch, or None when nothing matches.
        """
        for route in self._routes:
            if route.method and route.method != method:
                continue

            found = route._pattern.match(target)
            if found:
                return RouteMatch(route=route, params=found.groupdict())

        return None

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request to its handler.

        Wildcard captures are injected as request.path_params before the
        handler is called. Unmatched requests get 404 with an empty body.
        """
        found = self.match(request.method, request.target)

        if found is None:
            logger.debug(f"No route for {request.method} {request.target}")
            return not_found()

        request.path_params = found.params
        return found.route.handler(request)

    # =========================================================================
    # DECORATOR-STYLE ROUTE REGISTRATION
    # =========================================================================

    def route(self, path: str, method: Optional[str] = None) -> Callable[[Handler], Handler]:
        """
        Decorator form of add_route().

            @router.route("/echo/*text")
            def echo(request):
                ...
        """
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, method)
            return handler  # Return handler unchanged (allows stacking decorators)
        return decorator

    def get(self, path: str) -> Callable[[Handler], Handler]:
        """Register a GET route."""
        return self.route(path, "GET")

    def post(self, path: str) -> Callable[[Handler], Handler]:
        """Register a POST route."""
        return self.route(path, "POST")

    @property
    def routes(self) -> List[Route]:
        """Registered routes, in match order."""
        return list(self._routes)
