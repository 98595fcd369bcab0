"""
=============================================================================
REQUEST HANDLERS
=============================================================================

Handlers turn an HTTPRequest into an HTTPResponse. The server wires them
to the router in this order:

    ANY  /             → index
    ANY  /echo/*text   → echo
    ANY  /user-agent   → user_agent
    GET  /files/*path  → FileHandler.get
    POST /files/*path  → FileHandler.post

=============================================================================
USAGE
=============================================================================

    from rawhttpd.handlers import FileHandler, FileService, echo

    files = FileHandler(FileService("/srv/files"))
    router.get("/files/*path")(files.get)
    router.route("/echo/*text")(echo)

=============================================================================
"""

from .basic import index, echo, user_agent
from .files import (
    FileHandler,
    FileService,
    FileServiceError,
    FileNotFound,
    FileIOError,
)

__all__ = [
    # Inline handlers
    "index",
    "echo",
    "user_agent",

    # File serving
    "FileHandler",
    "FileService",
    "FileServiceError",
    "FileNotFound",
    "FileIOError",
]
