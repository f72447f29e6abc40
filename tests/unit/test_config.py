"""
Unit tests for ServerConfig validation.
"""

import pytest

from statichttpd.config import ServerConfig


class TestServerConfig:
    """Tests for ServerConfig."""

    def test_defaults(self):
        config = ServerConfig()

        assert config.host == "0.0.0.0"
        assert config.port == 8080
        assert config.document_root == "."
        assert config.read_timeout is None
        assert config.case_insensitive_headers is False
        config.validate()

    def test_port_zero_allowed(self):
        ServerConfig(port=0).validate()

    @pytest.mark.parametrize("kwargs", [
        {"port": -1},
        {"port": 65536},
        {"backlog": 0},
        {"buffer_size": 100},
        {"read_timeout": 0},
        {"read_timeout": -5.0},
        {"max_request_size": 1024, "buffer_size": 8192},
        {"server_name": ""},
        {"server_name": "Evil\r\nX-Injected: 1"},
        {"log_level": "LOUD"},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            ServerConfig(**kwargs).validate()

    def test_log_level_case_insensitive(self):
        ServerConfig(log_level="debug").validate()
