"""
Tests for LoggingConfig.
"""

import pytest

from fetch_driver.core.logging.config import LogFormat, LoggingConfig, LogLevel


class TestLoggingConfig:
    def test_defaults(self):
        config = LoggingConfig()
        assert config.level == LogLevel.INFO
        assert config.format == LogFormat.TEXT
        assert config.enable_console is True
        assert config.enable_file is False

    def test_create_normalizes_case(self):
        config = LoggingConfig.create(level="debug", format="JSON")
        assert config.level == LogLevel.DEBUG
        assert config.format == LogFormat.JSON

    def test_file_path_required(self):
        with pytest.raises(ValueError, match="file_path"):
            LoggingConfig.create(enable_file=True)

    @pytest.mark.parametrize("kwargs", [{"max_bytes": 0}, {"backup_count": -1}])
    def test_invalid_rotation(self, kwargs):
        with pytest.raises(ValueError):
            LoggingConfig.create(**kwargs)

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            LoggingConfig.create(level="LOUD")

    def test_frozen(self):
        with pytest.raises(AttributeError):
            LoggingConfig().level = LogLevel.DEBUG
