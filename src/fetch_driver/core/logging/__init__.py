"""
Logging system for Fetch Driver.

Example:
    >>> from fetch_driver.core.logging import LoggingConfig
    >>> from fetch_driver import Driver, DriverConfig
    >>>
    >>> config = DriverConfig.create(logging=LoggingConfig.create(level="DEBUG", format="json"))
    >>> driver = Driver(config=config)  # every phase of every request is logged
"""

from .config import LoggingConfig, LogLevel, LogFormat
from .logger import DriverLogger, get_logger
from .formatters import JSONFormatter, TextFormatter, ColoredFormatter, get_formatter
from .filters import (
    CorrelationIdFilter,
    ExtraFieldsFilter,
    set_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    clear_correlation_id,
)
from .handlers import create_console_handler, create_file_handler

__all__ = [
    # Config
    "LoggingConfig",
    "LogLevel",
    "LogFormat",
    # Logger
    "DriverLogger",
    "get_logger",
    # Formatters
    "JSONFormatter",
    "TextFormatter",
    "ColoredFormatter",
    "get_formatter",
    # Filters
    "CorrelationIdFilter",
    "ExtraFieldsFilter",
    "set_correlation_id",
    "get_correlation_id",
    "reset_correlation_id",
    "clear_correlation_id",
    # Handlers
    "create_console_handler",
    "create_file_handler",
]
