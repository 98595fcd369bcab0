"""
Unit tests for the file service and file handler.
"""

import logging
from pathlib import Path

import pytest

from rawhttpd.handlers.files import FileService, FileHandler, FileNotFound, FileIOError
from rawhttpd.http.request import HTTPRequest
from rawhttpd.http.status_codes import HTTPStatus


@pytest.fixture
def service(files_root: Path) -> FileService:
    return FileService(str(files_root))


class TestFileServiceRead:
    """Tests for FileService.read_file()."""

    def test_read_existing(self, service: FileService, files_root: Path):
        """Test reading raw bytes."""
        (files_root / "data.bin").write_bytes(b"\x00\x01hello\xff")

        assert service.read_file("data.bin") == b"\x00\x01hello\xff"

    def test_read_nested(self, service: FileService, files_root: Path):
        """Slashes in the relative path reach subdirectories."""
        (files_root / "sub").mkdir()
        (files_root / "sub" / "a.txt").write_bytes(b"nested")

        assert service.read_file("sub/a.txt") == b"nested"

    def test_read_missing(self, service: FileService):
        """A missing file raises FileNotFound."""
        with pytest.raises(FileNotFound):
            service.read_file("nope.txt")

    def test_read_directory(self, service: FileService, files_root: Path):
        """Reading a directory is an I/O error, not a missing file."""
        (files_root / "dir").mkdir()

        with pytest.raises(FileIOError) as exc_info:
            service.read_file("dir")

        assert exc_info.value.message

    def test_dotdot_inside_root_allowed(self, service: FileService, files_root: Path):
        """'..' that stays inside the root is fine."""
        (files_root / "sub").mkdir()
        (files_root / "a.txt").write_bytes(b"top")

        assert service.read_file("sub/../a.txt") == b"top"

    def test_traversal_refused(self, service: FileService, files_root: Path, caplog):
        """Paths escaping the root look like missing files and are logged."""
        (files_root.parent / "secret.txt").write_bytes(b"secret")

        with caplog.at_level(logging.WARNING, logger="rawhttpd.handlers.files"):
            with pytest.raises(FileNotFound):
                service.read_file("../secret.txt")

        assert "Path traversal attempt" in caplog.text

    def test_absolute_path_refused(self, service: FileService):
        """An absolute path replaces the root when joined; it is refused."""
        with pytest.raises(FileNotFound):
            service.read_file("/etc/passwd")


class TestFileServiceWrite:
    """Tests for FileService.write_file()."""

    def test_write_creates(self, service: FileService, files_root: Path):
        service.write_file("new.txt", b"content")

        assert (files_root / "new.txt").read_bytes() == b"content"

    def test_write_overwrites(self, service: FileService, files_root: Path):
        """Existing content is replaced, never appended to."""
        (files_root / "f.txt").write_bytes(b"a much longer original")

        service.write_file("f.txt", b"short")

        assert (files_root / "f.txt").read_bytes() == b"short"

    def test_write_empty(self, service: FileService, files_root: Path):
        service.write_file("empty.txt", b"")

        assert (files_root / "empty.txt").read_bytes() == b""

    def test_write_missing_parent(self, service: FileService):
        """Parent directories are not created."""
        with pytest.raises(FileIOError):
            service.write_file("missing/dir/a.txt", b"x")

    def test_write_traversal_refused(self, service: FileService, files_root: Path):
        with pytest.raises(FileNotFound):
            service.write_file("../escape.txt", b"x")

        assert not (files_root.parent / "escape.txt").exists()


class TestFileHandler:
    """Tests for FileHandler request/response mapping."""

    def make_request(self, method: str, path: str, body: bytes = b"") -> HTTPRequest:
        request = HTTPRequest(method=method, target=f"/files/{path}", body=body)
        request.path_params = {"path": path}
        return request

    def test_get_ok(self, service: FileService, files_root: Path):
        """GET returns the bytes as application/octet-stream."""
        (files_root / "a.txt").write_bytes(b"hello")
        handler = FileHandler(service)

        response = handler.get(self.make_request("GET", "a.txt"))

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: application/octet-stream\r\n"
            b"Content-Length: 5\r\n"
            b"\r\n"
            b"hello"
        )

    def test_get_missing(self, service: FileService):
        response = FileHandler(service).get(self.make_request("GET", "nope"))

        assert response.to_bytes() == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_get_io_error(self, service: FileService, files_root: Path):
        """I/O errors become 500 with the message as text/plain."""
        (files_root / "dir").mkdir()

        response = FileHandler(service).get(self.make_request("GET", "dir"))

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.headers["Content-Type"] == "text/plain"
        assert int(response.headers["Content-Length"]) == len(response.body)
        assert response.body

    def test_post_created(self, service: FileService, files_root: Path):
        response = FileHandler(service).post(self.make_request("POST", "up.txt", b"data"))

        assert response.to_bytes() == b"HTTP/1.1 201 Created\r\n\r\n"
        assert (files_root / "up.txt").read_bytes() == b"data"

    def test_post_io_error(self, service: FileService):
        response = FileHandler(service).post(self.make_request("POST", "no/such/dir.txt", b"x"))

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR

    def test_post_traversal(self, service: FileService):
        response = FileHandler(service).post(self.make_request("POST", "../x.txt", b"x"))

        assert response.status == HTTPStatus.NOT_FOUND
