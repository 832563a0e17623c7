"""Core Fetch Driver модули."""

from .compose import compose, create_middleware, Middleware, Next, Pipeline
from .config import DriverConfig
from .context import (
    AbortController,
    AbortSignal,
    ContextSnapshot,
    DriveContext,
    DriveRequest,
    DriveResponse,
    json_stringify,
)
from .driver import Driver, DriveFunc, DriveOptions, METHODS, over
from .exceptions import AbortError, DriverException, MiddlewareError
from .fetch import Fetcher, data_uri_response
from .hooks import DriveHooks
from .match import find_matching, is_match
from .parser import ReceiverEvent, is_raw_text_body, parser

__all__ = [
    # Composition
    "compose",
    "create_middleware",
    "Middleware",
    "Next",
    "Pipeline",
    # Config
    "DriverConfig",
    # Context
    "AbortController",
    "AbortSignal",
    "ContextSnapshot",
    "DriveContext",
    "DriveRequest",
    "DriveResponse",
    "json_stringify",
    # Driver
    "Driver",
    "DriveFunc",
    "DriveOptions",
    "DriveHooks",
    "METHODS",
    "over",
    # Fetch
    "Fetcher",
    "data_uri_response",
    # Matching
    "is_match",
    "find_matching",
    # Parser
    "parser",
    "ReceiverEvent",
    "is_raw_text_body",
    # Exceptions
    "DriverException",
    "MiddlewareError",
    "AbortError",
]
