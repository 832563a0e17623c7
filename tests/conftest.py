"""
Pytest configuration and fixtures for fetch-driver tests.
"""

import asyncio
import json

import httpx
import pytest
import pytest_asyncio

from fetch_driver import Driver
from fetch_driver.core.logging.config import LoggingConfig


@pytest.fixture
def base_url():
    """Base URL for testing."""
    return "https://echo.test"


def echo_handler(request: httpx.Request) -> httpx.Response:
    """
    Echo server: GET returns the query args, other methods return the
    JSON body (or raw text) that was sent.
    """
    if request.method == "GET":
        return httpx.Response(200, json={"args": dict(request.url.params), "path": request.url.path})

    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        return httpx.Response(200, json=json.loads(request.content))
    return httpx.Response(200, text=request.content.decode("utf-8"))


@pytest.fixture
def echo_client():
    """httpx.AsyncClient answered in-process by the echo handler."""
    return httpx.AsyncClient(transport=httpx.MockTransport(echo_handler))


@pytest_asyncio.fixture
async def driver(echo_client):
    """Driver wired to the echo client."""
    driver = Driver(client=echo_client)
    yield driver
    await driver.close()
    await echo_client.aclose()


@pytest.fixture
def slow_client():
    """Client whose transport answers only after a second."""

    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(1)
        return httpx.Response(200, text="late")

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def logging_config():
    """
    LoggingConfig fixture for testing.

    Example:
        def test_with_logging(logging_config):
            config = DriverConfig.create(logging=logging_config)
            driver = Driver(config=config)
    """
    return LoggingConfig.create(
        level="DEBUG",
        enable_console=True,
        enable_file=False
    )
