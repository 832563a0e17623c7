"""
Tests for environment-driven configuration.
"""

import pytest
from pydantic import ValidationError

from fetch_driver.core.config import DriverConfig
from fetch_driver.core.env_config import DriverSettings, load_from_env
from fetch_driver.core.logging import LogFormat, LogLevel


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isolate tests from FETCH_DRIVER_* variables of the host."""
    import os
    for key in list(os.environ):
        if key.startswith("FETCH_DRIVER_"):
            monkeypatch.delenv(key)


class TestDriverSettings:
    def test_defaults(self):
        settings = DriverSettings(_env_file=None)
        assert settings.base_url == ""
        assert settings.headers == {}
        assert settings.timeout is None
        assert settings.to_logging_settings() is None

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("FETCH_DRIVER_BASE_URL", "https://api.example.com")
        monkeypatch.setenv("FETCH_DRIVER_TIMEOUT", "2.5")
        monkeypatch.setenv("FETCH_DRIVER_HEADERS", '{"Accept": "application/json"}')
        monkeypatch.setenv("FETCH_DRIVER_VERIFY_SSL", "false")

        settings = DriverSettings(_env_file=None)

        assert settings.base_url == "https://api.example.com"
        assert settings.timeout == 2.5
        assert settings.headers == {"Accept": "application/json"}
        assert settings.verify_ssl is False

    @pytest.mark.parametrize("value", ["0", "-1", "inf"])
    def test_invalid_timeout(self, monkeypatch, value):
        monkeypatch.setenv("FETCH_DRIVER_TIMEOUT", value)
        with pytest.raises(ValidationError):
            DriverSettings(_env_file=None)

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("FETCH_DRIVER_TIMEOUT=7\nFETCH_DRIVER_LOG_ENABLE_CONSOLE=true\n", encoding="utf-8")

        settings = DriverSettings(_env_file=str(env_file))

        assert settings.timeout == 7
        assert settings.to_logging_settings().enable_console is True


class TestLoadFromEnv:
    def test_builds_driver_config(self, monkeypatch):
        monkeypatch.setenv("FETCH_DRIVER_BASE_URL", "https://api.example.com/")
        monkeypatch.setenv("FETCH_DRIVER_TIMEOUT", "3")

        config = load_from_env(env_file=None)

        assert isinstance(config, DriverConfig)
        assert config.base_url == "https://api.example.com"
        assert config.timeout == 3
        assert config.logging is None

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("FETCH_DRIVER_TIMEOUT", "3")

        config = load_from_env(env_file=None, timeout=10, headers={"X-Trace": "1"})

        assert config.timeout == 10
        assert dict(config.headers) == {"X-Trace": "1"}

    def test_logging_enabled(self, monkeypatch):
        monkeypatch.setenv("FETCH_DRIVER_LOG_ENABLE_CONSOLE", "true")
        monkeypatch.setenv("FETCH_DRIVER_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("FETCH_DRIVER_LOG_FORMAT", "json")

        config = load_from_env(env_file=None)

        assert config.logging is not None
        assert config.logging.level == LogLevel.DEBUG
        assert config.logging.format == LogFormat.JSON

    def test_empty_base_url_is_none(self):
        assert load_from_env(env_file=None).base_url is None
