"""
Environment configuration for Fetch Driver.

Example:
    >>> from fetch_driver.core.env_config import load_from_env
    >>>
    >>> config = load_from_env()
    >>> driver = Driver(config=config)
"""

from .loader import load_from_env
from .validator import DriverSettings, LoggingSettings

__all__ = [
    "load_from_env",
    "DriverSettings",
    "LoggingSettings",
]
