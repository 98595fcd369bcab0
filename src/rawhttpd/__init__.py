"""
=============================================================================
RAWHTTPD: A MINIMAL HTTP/1.1 SERVER ON RAW SOCKETS
=============================================================================

No http.server, no frameworks: the server accepts TCP connections, parses
request bytes by hand, dispatches to a handful of routes and writes the
response bytes itself.

=============================================================================
ROUTES
=============================================================================

    GET /                       200, empty body
    GET /echo/<text>            200, <text> as text/plain
    GET /user-agent             200, the User-Agent header as text/plain
    GET /files/<path>           200, file bytes (application/octet-stream)
                                404 if missing, 500 on I/O error
    POST /files/<path>          201, request body written to <path>

    Anything else               404

One request per connection: the server answers, then closes the socket.

=============================================================================
PACKAGE LAYOUT
=============================================================================

    rawhttpd/
    ├── __main__.py        CLI (python -m rawhttpd --directory DIR)
    ├── config.py          ServerConfig: defaults, env vars, validation
    ├── server.py          HTTPServer: wires everything together
    ├── access_log.py      One access log line per response
    ├── core/              Sockets and threads
    │   ├── socket_server.py   accept() loop, signals
    │   ├── connection.py      Buffered read, send, close
    │   └── workers.py         Thread per connection
    ├── http/              Protocol, no I/O
    │   ├── request.py         Bytes → HTTPRequest
    │   ├── response.py        HTTPResponse → bytes
    │   ├── router.py          Target → handler
    │   └── status_codes.py    Reason phrases
    └── handlers/          What each route does
        ├── basic.py           /, /echo, /user-agent
        └── files.py           /files/*

=============================================================================
QUICK START
=============================================================================

    from rawhttpd import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(directory="/tmp/files"))
    server.run()   # Ctrl+C to stop

    $ curl -i localhost:4221/echo/hello
    HTTP/1.1 200 OK
    Content-Type: text/plain
    Content-Length: 5

    hello

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "__version__"]
