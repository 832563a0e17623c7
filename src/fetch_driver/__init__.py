"""Fetch Driver - middleware-composable async request driver on top of httpx."""

import logging
from importlib.metadata import version, PackageNotFoundError

from .core.driver import Driver, DriveFunc, DriveOptions, METHODS, over
from .core.compose import compose, create_middleware
from .core.config import DriverConfig
from .core.context import (
    AbortController,
    AbortSignal,
    ContextSnapshot,
    DriveContext,
    DriveRequest,
    DriveResponse,
    json_stringify,
)
from .core.exceptions import DriverException, MiddlewareError, AbortError
from .core.fetch import Fetcher
from .core.hooks import DriveHooks
from .core.match import is_match, find_matching
from .core.parser import parser, ReceiverEvent
from .core.logging import LoggingConfig
from .core.env_config import load_from_env, DriverSettings
from .utils.shared import FormData, to_search_params
from .utils.tocurl import to_curl, generate

# Set up logging - add NullHandler to prevent "No handler found" warnings
# Users can configure logging themselves using logging.getLogger('fetch_driver')
logging.getLogger('fetch_driver').addHandler(logging.NullHandler())

try:
    __version__ = version("fetch-driver")
except PackageNotFoundError:
    # Package is not installed (development mode)
    __version__ = "0.0.0-dev"

__license__ = "MIT"

__all__ = [
    # Driver
    "Driver",
    "DriveFunc",
    "DriveOptions",
    "DriveHooks",
    "METHODS",
    "over",

    # Pipeline
    "compose",
    "create_middleware",
    "is_match",
    "find_matching",

    # Context
    "DriveContext",
    "DriveRequest",
    "DriveResponse",
    "ContextSnapshot",
    "AbortController",
    "AbortSignal",
    "json_stringify",

    # Fetch & parse
    "Fetcher",
    "parser",
    "ReceiverEvent",

    # Config
    "DriverConfig",
    "LoggingConfig",
    "DriverSettings",
    "load_from_env",

    # Exceptions
    "DriverException",
    "MiddlewareError",
    "AbortError",

    # Utils
    "FormData",
    "to_search_params",
    "to_curl",
    "generate",
]
