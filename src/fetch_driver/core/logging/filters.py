"""
Log filters that tag records with request context.

The correlation id lives in a ContextVar rather than thread-local storage:
every asyncio task gets its own copy, so concurrent requests driven on one
event loop never see each other's id.
"""

import logging
from contextvars import ContextVar, Token
from typing import Any, Dict, Optional


_correlation_id: ContextVar[Optional[str]] = ContextVar("fetch_driver_correlation_id", default=None)


def set_correlation_id(correlation_id: Optional[str]) -> Token:
    """
    Set correlation ID for the current task.

    Returns:
        Token that can be passed to reset_correlation_id()

    Example:
        >>> token = set_correlation_id("req-12345")
        >>> get_correlation_id()
        'req-12345'
    """
    return _correlation_id.set(correlation_id)


def get_correlation_id() -> Optional[str]:
    """Get correlation ID for the current task (None if not set)."""
    return _correlation_id.get()


def reset_correlation_id(token: Token) -> None:
    """Restore the correlation ID that was active before set_correlation_id()."""
    _correlation_id.reset(token)


def clear_correlation_id() -> None:
    """Clear correlation ID for the current task."""
    _correlation_id.set(None)


class CorrelationIdFilter(logging.Filter):
    """
    Adds `correlation_id` to every record emitted while a request is driven.

    Example:
        >>> handler.addFilter(CorrelationIdFilter())
        >>> set_correlation_id("req-12345")
        >>> logger.info("fetch")  # record.correlation_id == "req-12345"
    """

    def filter(self, record: logging.LogRecord) -> bool:
        correlation_id = get_correlation_id()
        if correlation_id:
            record.correlation_id = correlation_id
        return True


class ExtraFieldsFilter(logging.Filter):
    """
    Adds static fields (service, environment, version...) to every record.

    Fields already present on the record are left untouched.
    """

    def __init__(self, extra_fields: Dict[str, Any]):
        super().__init__()
        self.extra_fields = extra_fields

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.extra_fields.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
