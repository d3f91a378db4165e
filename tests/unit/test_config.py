"""
Unit tests for server configuration.
"""

import pytest

from basket.config import ServerConfig


class TestServerConfig:

    def test_defaults(self):
        config = ServerConfig()

        assert config.host == "127.0.0.1"
        assert config.port == 8080
        assert config.backlog == 128
        assert config.log_level == "INFO"
        config.validate()

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("BASKET_HOST", "0.0.0.0")
        monkeypatch.setenv("BASKET_PORT", "3000")
        monkeypatch.setenv("BASKET_BACKLOG", "16")
        monkeypatch.setenv("BASKET_LOG_LEVEL", "DEBUG")

        config = ServerConfig.from_env()

        assert config == ServerConfig(host="0.0.0.0", port=3000, backlog=16, log_level="DEBUG")

    def test_from_env_defaults(self, monkeypatch):
        for name in ("BASKET_HOST", "BASKET_PORT", "BASKET_BACKLOG", "BASKET_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        assert ServerConfig.from_env() == ServerConfig()

    def test_from_env_bad_port(self, monkeypatch):
        monkeypatch.setenv("BASKET_PORT", "eighty")

        with pytest.raises(ValueError):
            ServerConfig.from_env()

    def test_port_zero_allowed(self):
        ServerConfig(port=0).validate()

    @pytest.mark.parametrize("kwargs", [
        {"port": -1},
        {"port": 65536},
        {"backlog": 0},
        {"log_level": "LOUD"},
    ])
    def test_validate_rejects(self, kwargs):
        with pytest.raises(ValueError):
            ServerConfig(**kwargs).validate()
