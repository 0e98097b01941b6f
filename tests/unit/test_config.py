"""
Unit tests for configuration and the command line.
"""

import logging

import pytest

from webworker.config import ServerConfig, parse_timeout
from webworker.__main__ import config_from_args, main


class TestServerConfig:
    """Tests for ServerConfig."""

    def test_defaults_validate(self):
        """Test that the defaults are a valid configuration."""
        ServerConfig().validate()

    def test_wire_defaults(self):
        """Test content type and connection policy defaults."""
        config = ServerConfig()
        assert config.content_type == "text/html"
        assert config.connection_policy == "close"

    @pytest.mark.parametrize("kwargs", [
        {"port": -1},
        {"port": 70000},
        {"backlog": 0},
        {"timeout": 0},
        {"max_request_size": 10},
        {"content_root": "/definitely/not/here"},
        {"log_level": "CHATTY"},
        {"connection_policy": "keep-alive"},
    ])
    def test_invalid_values(self, kwargs):
        """Test fail-fast validation."""
        with pytest.raises(ValueError):
            ServerConfig(**kwargs).validate()

    def test_no_timeout_allowed(self):
        """Test that timeout=None means no deadline."""
        ServerConfig(timeout=None).validate()

    def test_from_env(self, monkeypatch, tmp_path):
        """Test reading configuration from the environment."""
        monkeypatch.setenv("WEBWORKER_HOST", "0.0.0.0")
        monkeypatch.setenv("WEBWORKER_PORT", "3000")
        monkeypatch.setenv("WEBWORKER_TIMEOUT", "2.5")
        monkeypatch.setenv("WEBWORKER_ROOT", str(tmp_path))
        monkeypatch.setenv("WEBWORKER_LOG_LEVEL", "DEBUG")

        config = ServerConfig.from_env()

        assert config.host == "0.0.0.0"
        assert config.port == 3000
        assert config.timeout == 2.5
        assert config.content_root == str(tmp_path)
        assert config.level == logging.DEBUG

    @pytest.mark.parametrize("value", ["none", "None", "off", "0", ""])
    def test_from_env_no_timeout(self, monkeypatch, value):
        """Test that the environment can switch the deadline off."""
        monkeypatch.setenv("WEBWORKER_TIMEOUT", value)
        assert ServerConfig.from_env().timeout is None

    def test_from_env_bad_timeout(self, monkeypatch):
        """Test that a malformed timeout names the variable's value."""
        monkeypatch.setenv("WEBWORKER_TIMEOUT", "soon")
        with pytest.raises(ValueError, match="Invalid timeout: 'soon'"):
            ServerConfig.from_env()


class TestParseTimeout:
    """Tests for parse_timeout()."""

    @pytest.mark.parametrize("value,expected", [
        ("30", 30.0),
        ("2.5", 2.5),
        (" 7 ", 7.0),
        ("NONE", None),
        ("0.0", None),
    ])
    def test_values(self, value, expected):
        assert parse_timeout(value) == expected

    @pytest.mark.parametrize("value", ["-1", "abc", "nan", "inf"])
    def test_rejected(self, value):
        with pytest.raises(ValueError):
            parse_timeout(value)


class TestCommandLine:
    """Tests for the argparse entry point."""

    def test_defaults(self, monkeypatch):
        """Test that no flags gives the environment defaults."""
        monkeypatch.delenv("WEBWORKER_PORT", raising=False)
        config = config_from_args([])

        assert config.port == 8080
        assert config.confine_to_root is True

    def test_flags(self, tmp_path):
        """Test that flags map onto ServerConfig."""
        config = config_from_args([
            "--host", "0.0.0.0",
            "-p", "9000",
            "--root", str(tmp_path),
            "--timeout", "1.5",
            "--log-level", "debug",
            "--no-confine",
        ])

        assert config.host == "0.0.0.0"
        assert config.port == 9000
        assert config.content_root == str(tmp_path)
        assert config.timeout == 1.5
        assert config.log_level == "DEBUG"
        assert config.confine_to_root is False

    def test_flags_override_env(self, monkeypatch):
        """Test precedence of flags over environment."""
        monkeypatch.setenv("WEBWORKER_PORT", "3000")
        assert config_from_args([]).port == 3000
        assert config_from_args(["--port", "4000"]).port == 4000

    def test_timeout_none_flag(self):
        """Test that --timeout none disables the deadline."""
        assert config_from_args(["--timeout", "none"]).timeout is None
        assert config_from_args(["-t", "0"]).timeout is None

    def test_bad_timeout_flag(self, capsys):
        """Test that a malformed --timeout is a usage error."""
        with pytest.raises(SystemExit) as exc_info:
            config_from_args(["--timeout", "soon"])

        assert exc_info.value.code == 2
        assert "Invalid timeout" in capsys.readouterr().err

    def test_bad_timeout_env_exits_nonzero(self, monkeypatch, capsys):
        """Test that a malformed WEBWORKER_TIMEOUT exits with status 1."""
        monkeypatch.setenv("WEBWORKER_TIMEOUT", "soon")
        assert main([]) == 1
        assert "Invalid timeout" in capsys.readouterr().err

    def test_bad_root_exits_nonzero(self, capsys):
        """Test that invalid configuration exits with status 1."""
        assert main(["--root", "/definitely/not/here"]) == 1
        assert "Content root does not exist" in capsys.readouterr().err
