"""
Driver logger: a thin wrapper over `logging.Logger` with structured extras.
"""

import logging
from typing import Any, List, Optional

from .config import LoggingConfig, LogLevel
from .formatters import get_formatter
from .filters import CorrelationIdFilter, ExtraFieldsFilter
from .handlers import create_console_handler, create_file_handler
from ...utils.sanitizer import mask_sensitive_data


class DriverLogger:
    """
    Logger used by the driver to report request phases.

    Keyword arguments passed to the log methods become record attributes
    (after masking secrets such as Authorization headers or api_key query
    parameters).

    Without a config the wrapped logger is left exactly as the application
    configured it; with a config, handlers built from it are added next to
    any existing ones.

    Example:
        >>> logger = DriverLogger(LoggingConfig.create(level="DEBUG", format="json"))
        >>> logger.debug("fetch", method="GET", api="https://api.com/users")
    """

    def __init__(self, config: Optional[LoggingConfig] = None, name: str = "fetch_driver"):
        self.config = config
        self.name = name
        self._closed = False
        self._logger = logging.getLogger(name)
        self._saved_state = (self._logger.level, self._logger.propagate)
        self._handlers: List[logging.Handler] = []

        if config is None:
            return

        level = self._get_level(config.level)
        self._logger.setLevel(level)
        self._logger.propagate = False

        filters = []
        if config.enable_correlation_id:
            filters.append(CorrelationIdFilter())
        if config.extra_fields:
            filters.append(ExtraFieldsFilter(config.extra_fields))

        formatter = get_formatter(config.format.value)

        if config.enable_console:
            self._add_handler(create_console_handler(level, formatter, filters))

        if config.enable_file and config.file_path:
            self._add_handler(create_file_handler(
                file_path=config.file_path,
                level=level,
                formatter=formatter,
                max_bytes=config.max_bytes,
                backup_count=config.backup_count,
                filters=filters,
            ))

    def _add_handler(self, handler: logging.Handler) -> None:
        self._handlers.append(handler)
        self._logger.addHandler(handler)

    @staticmethod
    def _get_level(level: LogLevel) -> int:
        return getattr(logging, level.value)

    def is_enabled_for(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)

    def _log(self, level: int, message: str, kwargs: Any, exc_info: bool = False) -> None:
        if not self._logger.isEnabledFor(level):
            return
        self._logger.log(level, message, extra=mask_sensitive_data(kwargs), exc_info=exc_info)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log at ERROR with the active exception's traceback."""
        self._log(logging.ERROR, message, kwargs, exc_info=True)

    def close(self) -> None:
        """
        Flush and detach the handlers this instance added, restore the
        logger level and propagation. Idempotent.

        A logger built without a config owns no handlers and is left alone.
        """
        if self._closed:
            return
        self._closed = True

        if self.config is None:
            return

        for handler in self._handlers:
            handler.flush()
            handler.close()
            self._logger.removeHandler(handler)
        self._handlers.clear()

        level, propagate = self._saved_state
        self._logger.setLevel(level)
        self._logger.propagate = propagate

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def get_logger(name: str = "fetch_driver", config: Optional[LoggingConfig] = None) -> DriverLogger:
    """
    Build a DriverLogger for `name`.

    Example:
        >>> logger = get_logger("fetch_driver.driver")
    """
    return DriverLogger(config, name=name)
