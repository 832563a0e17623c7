"""
Configuration loader from environment variables and .env files.
"""

from typing import Optional

from ..config import DriverConfig
from ..logging.config import LoggingConfig
from .validator import DriverSettings


def load_from_env(env_file: Optional[str] = '.env', **overrides) -> DriverConfig:
    """
    Load DriverConfig from environment variables.

    Priority (highest to lowest):
    1. **overrides - explicit parameters
    2. Environment variables (FETCH_DRIVER_*)
    3. .env file
    4. Defaults

    Args:
        env_file: Path to the .env file (None disables it)
        **overrides: Explicit config overrides, named like DriverSettings fields

    Example:
        >>> config = load_from_env()
        >>> config = load_from_env(base_url="https://custom.api.com", timeout=5)
    """
    settings = DriverSettings(_env_file=env_file)

    logging_config = None
    logging_settings = settings.to_logging_settings()
    if logging_settings:
        logging_config = LoggingConfig.create(
            level=overrides.get('log_level', logging_settings.level),
            format=overrides.get('log_format', logging_settings.format),
            enable_console=overrides.get('log_enable_console', logging_settings.enable_console),
            enable_file=overrides.get('log_enable_file', logging_settings.enable_file),
            file_path=overrides.get('log_file_path', logging_settings.file_path),
            max_bytes=overrides.get('log_max_bytes', logging_settings.max_bytes),
            backup_count=overrides.get('log_backup_count', logging_settings.backup_count),
            enable_correlation_id=overrides.get('log_enable_correlation_id', logging_settings.enable_correlation_id),
        )

    return DriverConfig.create(
        base_url=overrides.get('base_url', settings.base_url) or None,
        headers=overrides.get('headers', settings.headers),
        timeout=overrides.get('timeout', settings.timeout),
        follow_redirects=overrides.get('follow_redirects', settings.follow_redirects),
        verify_ssl=overrides.get('verify_ssl', settings.verify_ssl),
        logging=logging_config,
    )
