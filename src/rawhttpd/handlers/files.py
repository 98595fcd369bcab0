"""
=============================================================================
FILE HANDLER
=============================================================================

Reads and writes files under the served directory for /files/*.

    GET  /files/<path>   → 200 + file bytes        (application/octet-stream)
                         → 404 if the file doesn't exist
                         → 500 + error message     (text/plain)

    POST /files/<path>   → 201, request body stored at <path>
                           (created or overwritten, never appended)
                         → 500 + error message     (text/plain)

=============================================================================
TWO LAYERS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                     │
    │   FileHandler          HTTP side: request in, response out          │
    │       │                maps exceptions to status codes              │
    │       ▼                                                             │
    │   FileService          Filesystem side: bytes in, bytes out         │
    │                        raises FileNotFound / FileIOError            │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

FileService knows nothing about HTTP, so it can be tested against a temp
directory without sockets or requests.

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

    GET /files/../../etc/passwd HTTP/1.1

The relative path is joined to the root and resolved (following ".." and
symlinks). If the result is not inside the root, the service behaves as
if the file did not exist: 404 for GET, 404 for POST. ".." that stays
inside the root ("sub/../a.txt") is fine.

    full_path = (root / user_input).resolve()
    full_path.relative_to(root)      # Raises ValueError if outside root

=============================================================================
"""

import logging
from pathlib import Path

from ..http.request import HTTPRequest
from ..http.response import (
    HTTPResponse, ResponseBuilder, HTTPStatus,
    created, not_found, internal_error,
)


logger = logging.getLogger(__name__)


class FileServiceError(Exception):
    """Base class for file service failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FileNotFound(FileServiceError):
    """The requested path does not exist (or lies outside the root)."""


class FileIOError(FileServiceError):
    """Reading or writing failed for any reason other than a missing file."""


class FileService:
    """
    Byte-level access to files below a root directory.

    Usage:
        service = FileService("/srv/files")
        service.write_file("notes.txt", b"hi")
        service.read_file("notes.txt")      # b"hi"
    """

    def __init__(self, root: str):
        """
        Args:
            root: Directory to serve. Resolved once, here, so later
                  traversal checks compare against an absolute path.
        """
        self.root = Path(root).resolve()

    def resolve(self, relative_path: str) -> Path:
        """
        Join relative_path to the root and check it stays inside.

        Raises:
            FileNotFound: If the resolved path escapes the root.
        """
        full_path = (self.root / relative_path).resolve()

        try:
            full_path.relative_to(self.root)
        except ValueError:
            logger.warning(f"Path traversal attempt: {relative_path!r}")
            raise FileNotFound(f"{relative_path} is outside the served directory")

        return full_path

    def read_file(self, relative_path: str) -> bytes:
        """
        Read a file's raw bytes.

        Raises:
            FileNotFound: The path doesn't exist.
            FileIOError: Anything else went wrong (directory, permissions...).
        """
        path = self.resolve(relative_path)

        if not path.exists():
            raise FileNotFound(f"{relative_path} does not exist")

        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            # Deleted between exists() and read_bytes()
            raise FileNotFound(str(e))
        except OSError as e:
            raise FileIOError(str(e))

    def write_file(self, relative_path: str, content: bytes) -> None:
        """
        Create or overwrite a file with content.

        Parent directories are NOT created: posting to "missing/dir/a.txt"
        is an I/O error.

        Raises:
            FileNotFound: The path escapes the root.
            FileIOError: The write failed.
        """
        path = self.resolve(relative_path)

        try:
            path.write_bytes(content)
        except OSError as e:
            raise FileIOError(str(e))


class FileHandler:
    """
    HTTP handlers for the /files/*path route.

    Register one method per HTTP verb:

        files = FileHandler(FileService(config.directory))
        router.get("/files/*path")(files.get)
        router.post("/files/*path")(files.post)
    """

    def __init__(self, service: FileService):
        self.service = service

    def get(self, request: HTTPRequest) -> HTTPResponse:
        """Serve the file named by the wildcard as application/octet-stream."""
        relative_path = request.path_params.get("path", "")

        try:
            content = self.service.read_file(relative_path)
        except FileNotFound:
            return not_found()
        except FileIOError as e:
            logger.error(f"Failed to read {relative_path!r}: {e.message}")
            return internal_error(e.message)

        return (ResponseBuilder()
            .status(HTTPStatus.OK)
            .octet_stream(content)
            .build())

    def post(self, request: HTTPRequest) -> HTTPResponse:
        """Store the request body at the wildcard path."""
        relative_path = request.path_params.get("path", "")

        try:
            self.service.write_file(relative_path, request.body)
        except FileNotFound:
            return not_found()
        except FileIOError as e:
            logger.error(f"Failed to write {relative_path!r}: {e.message}")
            return internal_error(e.message)

        logger.debug(f"Stored {len(request.body)} bytes at {relative_path!r}")
        return created()
