"""
Unit tests for the command-line entry point.
"""

from pathlib import Path

import pytest

from rawhttpd import __version__
from rawhttpd.__main__ import build_parser, config_from_args, main


class TestArguments:
    """Tests for argument parsing and config layering."""

    def test_defaults(self, monkeypatch):
        for name in ("HTTP_HOST", "HTTP_PORT", "HTTP_DIRECTORY", "HTTP_TIMEOUT",
                     "HTTP_LOG_LEVEL", "HTTP_LOG_FORMAT"):
            monkeypatch.delenv(name, raising=False)

        config = config_from_args(build_parser().parse_args([]))

        assert config.directory == "."
        assert config.host == "localhost"
        assert config.port == 4221

    def test_directory_flag(self, tmp_path: Path):
        args = build_parser().parse_args(["--directory", str(tmp_path)])

        assert config_from_args(args).directory == str(tmp_path)

    def test_short_flags(self, tmp_path: Path):
        args = build_parser().parse_args(["-d", str(tmp_path), "-p", "9000", "-H", "0.0.0.0", "-l", "DEBUG"])
        config = config_from_args(args)

        assert config.directory == str(tmp_path)
        assert config.port == 9000
        assert config.host == "0.0.0.0"
        assert config.log_level == "DEBUG"

    def test_flags_override_environment(self, monkeypatch):
        monkeypatch.setenv("HTTP_PORT", "9000")
        monkeypatch.setenv("HTTP_HOST", "0.0.0.0")

        config = config_from_args(build_parser().parse_args(["--port", "9100"]))

        assert config.port == 9100       # Flag wins
        assert config.host == "0.0.0.0"  # Environment fills the gap

    def test_log_format_choices(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--log-format", "xml"])


class TestMain:
    """Tests for main()."""

    def test_missing_directory_exits_1(self, tmp_path: Path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--directory", str(tmp_path / "missing")])

        assert exc_info.value.code == 1
        assert "Directory does not exist" in capsys.readouterr().err

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert f"rawhttpd {__version__}" in capsys.readouterr().out
