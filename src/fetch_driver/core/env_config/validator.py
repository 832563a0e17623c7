"""
Pydantic validators for environment configuration.
"""

import math
from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseModel):
    """Logging configuration from environment."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    format: Literal["json", "text", "colored"] = Field(default="text")
    enable_console: bool = Field(default=False)
    enable_file: bool = Field(default=False)
    file_path: Optional[str] = None
    max_bytes: int = Field(default=10 * 1024 * 1024, gt=0, description="10MB")
    backup_count: int = Field(default=5, ge=0)
    enable_correlation_id: bool = Field(default=True)

    @field_validator('file_path')
    @classmethod
    def validate_file_path(cls, v: Optional[str], info) -> Optional[str]:
        """file_path is required when enable_file=True."""
        if info.data.get('enable_file') and not v:
            raise ValueError("file_path is required when enable_file=True")
        return v


class DriverSettings(BaseSettings):
    """
    Driver configuration from environment variables.

    Reads from:
    1. Environment variables (FETCH_DRIVER_*)
    2. .env file
    3. Defaults

    Example .env file:
        FETCH_DRIVER_BASE_URL=https://api.example.com
        FETCH_DRIVER_TIMEOUT=10
        FETCH_DRIVER_HEADERS={"Accept": "application/json"}
        FETCH_DRIVER_LOG_ENABLE_CONSOLE=true
        FETCH_DRIVER_LOG_LEVEL=DEBUG

    Usage:
        >>> settings = DriverSettings()
        >>> settings.timeout
        10.0
    """

    model_config = SettingsConfigDict(
        env_prefix='FETCH_DRIVER_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    base_url: str = Field(default="", description="Base URL for relative targets")
    headers: Dict[str, str] = Field(default_factory=dict, description="Default request headers (JSON object)")
    timeout: Optional[float] = Field(default=None, gt=0, description="Default request timeout in seconds")
    follow_redirects: bool = Field(default=True)
    verify_ssl: bool = Field(default=True)

    # Logging (disabled unless console or file output is enabled)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_format: Literal["json", "text", "colored"] = Field(default="text")
    log_enable_console: bool = Field(default=False)
    log_enable_file: bool = Field(default=False)
    log_file_path: Optional[str] = None
    log_max_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    log_backup_count: int = Field(default=5, ge=0)
    log_enable_correlation_id: bool = Field(default=True)

    @field_validator('timeout')
    @classmethod
    def validate_timeout(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not math.isfinite(v):
            raise ValueError("timeout must be finite")
        return v

    def to_logging_settings(self) -> Optional[LoggingSettings]:
        """Convert to LoggingSettings if any log output is enabled."""
        if not self.log_enable_file and not self.log_enable_console:
            return None

        return LoggingSettings(
            level=self.log_level,
            format=self.log_format,
            enable_console=self.log_enable_console,
            enable_file=self.log_enable_file,
            file_path=self.log_file_path,
            max_bytes=self.log_max_bytes,
            backup_count=self.log_backup_count,
            enable_correlation_id=self.log_enable_correlation_id,
        )
