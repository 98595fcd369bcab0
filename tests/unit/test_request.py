"""
Unit tests for HTTP request parsing.
"""

import pytest

from rawhttpd.http.request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    parse_request,
    find_header_end,
    declared_content_length,
)


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self, sample_get_request: bytes):
        """Test parsing a simple GET request."""
        parser = RequestParser()
        request = parser.parse(sample_get_request, ("127.0.0.1", 12345))

        assert request.method == "GET"
        assert request.target == "/user-agent"
        assert request.version == "HTTP/1.1"
        assert request.body == b""
        assert request.client_address == ("127.0.0.1", 12345)

    def test_parse_headers(self, sample_get_request: bytes):
        """Test that headers are parsed in arrival order."""
        request = parse_request(sample_get_request)

        assert request.headers == {
            "Host": "localhost:4221",
            "User-Agent": "pytest",
            "Accept": "*/*",
        }
        assert list(request.headers) == ["Host", "User-Agent", "Accept"]
        assert request.user_agent == "pytest"

    def test_parse_post_with_body(self, sample_post_request: bytes):
        """Test parsing POST request with a body."""
        request = parse_request(sample_post_request)

        assert request.method == "POST"
        assert request.target == "/files/notes.txt"
        assert request.body == b"hello file"

    def test_body_is_verbatim_bytes(self):
        """Body bytes are not decoded or altered."""
        body = b"\x00\xff\r\n\r\nbinary"
        request = parse_request(b"POST /files/x HTTP/1.1\r\n\r\n" + body)

        assert request.body == body

    def test_parse_no_headers(self):
        """A bare status line and terminator is a valid request."""
        request = parse_request(b"GET / HTTP/1.1\r\n\r\n")

        assert request.method == "GET"
        assert request.target == "/"
        assert request.headers == {}

    def test_target_is_kept_raw(self):
        """No decoding or normalisation of the target."""
        request = parse_request(b"GET /echo/a%20b/../c?x=1 HTTP/1.1\r\n\r\n")
        assert request.target == "/echo/a%20b/../c?x=1"

    def test_any_method_token_accepted(self):
        """Methods are not validated by the parser."""
        request = parse_request(b"BREW /pot HTTP/1.1\r\n\r\n")
        assert request.method == "BREW"

    @pytest.mark.parametrize("version", [b"FTP/1.0", b"HTTP/1.0", b"HTTP/2", b"http/1.1"])
    def test_unsupported_version(self, version: bytes):
        """Only exactly HTTP/1.1 is accepted."""
        with pytest.raises(HTTPParseError) as exc_info:
            parse_request(b"GET / " + version + b"\r\n\r\n")

        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize("status_line", [
        b"GET /",
        b"GET / HTTP/1.1 extra",
        b"GET  / HTTP/1.1",
        b"",
    ])
    def test_wrong_token_count(self, status_line: bytes):
        """The status line must be exactly three space-separated tokens."""
        with pytest.raises(HTTPParseError):
            parse_request(status_line + b"\r\n\r\n")

    def test_missing_status_line_terminator(self):
        """Test rejection when there is no CRLF at all."""
        with pytest.raises(HTTPParseError):
            parse_request(b"GET / HTTP/1.1")

    def test_missing_header_terminator(self):
        """Test rejection when headers never end."""
        with pytest.raises(HTTPParseError):
            parse_request(b"GET / HTTP/1.1\r\nHost: localhost\r\n")

    def test_duplicate_header_last_wins(self):
        """Later duplicates overwrite earlier ones."""
        request = parse_request(
            b"GET / HTTP/1.1\r\n"
            b"X-Dup: first\r\n"
            b"X-Other: o\r\n"
            b"X-Dup: second\r\n"
            b"\r\n"
        )

        assert request.headers["X-Dup"] == "second"
        assert len(request.headers) == 2

    def test_header_whitespace_trimmed(self):
        """Names and values are trimmed; values may contain colons."""
        request = parse_request(
            b"GET / HTTP/1.1\r\n"
            b"Host:localhost:4221\r\n"
            b"User-Agent:    spaced   \r\n"
            b"X-Empty:\r\n"
            b"\r\n"
        )

        assert request.headers["Host"] == "localhost:4221"
        assert request.headers["User-Agent"] == "spaced"
        assert request.headers["X-Empty"] == ""

    def test_header_line_without_colon_skipped(self):
        """Lines without a colon are ignored, not fatal."""
        request = parse_request(
            b"GET / HTTP/1.1\r\n"
            b"garbage\r\n"
            b"Host: localhost\r\n"
            b"\r\n"
        )

        assert request.headers == {"Host": "localhost"}

    def test_header_names_case_sensitive(self):
        """Header names are kept as sent."""
        request = parse_request(b"GET / HTTP/1.1\r\nuser-agent: lower\r\n\r\n")

        assert request.headers == {"user-agent": "lower"}
        assert request.user_agent == ""

    def test_invalid_utf8_replaced(self):
        """Undecodable header bytes don't abort parsing."""
        request = parse_request(b"GET / HTTP/1.1\r\nUser-Agent: a\xffb\r\n\r\n")
        assert request.user_agent == "a\ufffdb"


class TestHTTPRequest:
    """Tests for HTTPRequest dataclass."""

    def test_get_header_default(self):
        """Test get_header with default value."""
        request = HTTPRequest(method="GET", target="/", headers={"Host": "x"})

        assert request.get_header("Host") == "x"
        assert request.get_header("Missing") == ""
        assert request.get_header("Missing", "default") == "default"

    def test_user_agent_missing(self):
        """No User-Agent header means an empty string."""
        assert HTTPRequest(method="GET", target="/").user_agent == ""


class TestFramingHelpers:
    """Tests for the helpers the connection uses to find message boundaries."""

    def test_find_header_end(self):
        """Index of the first CRLF CRLF, -1 when absent."""
        assert find_header_end(b"GET / HTTP/1.1\r\n\r\nbody") == 14
        assert find_header_end(b"GET / HTTP/1.1\r\nHost: x\r\n") == -1

    def test_content_length(self):
        """Content-Length is found case-insensitively."""
        section = b"POST /files/a HTTP/1.1\r\ncontent-LENGTH: 12\r\nHost: x"
        assert declared_content_length(section) == 12

    @pytest.mark.parametrize("section", [
        b"GET / HTTP/1.1\r\nHost: x",
        b"POST / HTTP/1.1\r\nContent-Length: abc",
        b"POST / HTTP/1.1\r\nContent-Length: -5",
    ])
    def test_content_length_defaults_to_zero(self, section: bytes):
        """Missing, invalid or negative lengths count as no body."""
        assert declared_content_length(section) == 0

    def test_status_line_is_not_a_header(self):
        """A status line containing "content-length:" is not read as a header."""
        assert declared_content_length(b"GET /content-length:5 HTTP/1.1") == 0

    def test_duplicate_content_length_last_wins(self):
        """Framing agrees with HTTPRequest.headers on repeated Content-Length."""
        raw = b"POST /files/a HTTP/1.1\r\nContent-Length: 2\r\nContent-Length: 5\r\n\r\nhello"
        header_end = find_header_end(raw)

        assert declared_content_length(raw[:header_end]) == 5
        assert parse_request(raw).headers["Content-Length"] == "5"
