"""
Tests for DriveContext: init, abort scheduling, header decoding, cloning.
"""

import asyncio
import json

import httpx
import pytest

from fetch_driver.core.context import (
    AbortController,
    AbortSignal,
    DriveContext,
    json_stringify,
)
from fetch_driver.core.exceptions import AbortError
from fetch_driver.utils.shared import FormData


class TestContextConstruction:
    """Target parsing never raises."""

    def test_absolute_target(self):
        ctx = DriveContext("https://api.example.com/users/1?expand=true")
        assert ctx.url is not None
        assert ctx.url.host == "api.example.com"
        assert ctx.path == "/users/1"

    def test_relative_target_keeps_raw_path(self):
        ctx = DriveContext("/api/users")
        assert ctx.url is None
        assert ctx.path == "/api/users"

    def test_unparseable_target(self):
        ctx = DriveContext("not a url")
        assert ctx.url is None
        assert ctx.path == "not a url"

    def test_headers_seeded(self):
        ctx = DriveContext("/api", headers={"X-Trace": "1"})
        assert ctx.req.headers["x-trace"] == "1"

    def test_id_generated_or_supplied(self):
        assert len(DriveContext("/api").id) == 32
        assert DriveContext("/api", id="req-1").id == "req-1"

    def test_options_kept(self):
        ctx = DriveContext("/api", follow_redirects=False)
        assert ctx.req.options == {"follow_redirects": False}


class TestContextInit:
    """Query merge, body materialization, method inference."""

    def test_search_params_appended(self):
        ctx = DriveContext("/api", httpx.QueryParams({"a": "1", "b": "2"}))
        ctx.init()
        assert ctx.api == "/api?a=1&b=2"
        assert ctx.req.method == "GET"
        assert ctx.req.body is None

    def test_search_params_merge_with_existing_query(self):
        ctx = DriveContext("/api?c=3", httpx.QueryParams({"a": "1"}))
        ctx.init()
        assert ctx.api == "/api?a=1&c=3"

    def test_json_payload(self):
        ctx = DriveContext("/api", {"key": "value"})
        ctx.init()
        assert ctx.req.method == "POST"
        assert ctx.req.body == '{"key":"value"}'
        assert ctx.req.headers["Content-Type"] == "application/json"

    def test_json_payload_keeps_existing_content_type(self):
        ctx = DriveContext("/api", [1, 2], headers={"Content-Type": "application/vnd.api+json"})
        ctx.init()
        assert ctx.req.body == "[1,2]"
        assert ctx.req.headers["Content-Type"] == "application/vnd.api+json"

    def test_no_payload(self):
        ctx = DriveContext("/api")
        ctx.init()
        assert ctx.req.method == "GET"
        assert ctx.req.body is None
        assert "Content-Type" not in ctx.req.headers

    @pytest.mark.parametrize("payload", [b"\x00\x01", bytearray(b"abc"), FormData([("a", "1")])])
    def test_raw_payload_passes_through(self, payload):
        ctx = DriveContext("/api", payload)
        ctx.init()
        assert ctx.req.body is payload
        assert ctx.req.method == "POST"
        assert "Content-Type" not in ctx.req.headers

    def test_explicit_method_kept(self):
        ctx = DriveContext("/api", {"a": 1}, method="PUT")
        ctx.init()
        assert ctx.req.method == "PUT"

    def test_caller_body_not_replaced(self):
        ctx = DriveContext("/api", {"a": 1}, body="raw")
        ctx.init()
        assert ctx.req.body == "raw"

    def test_custom_stringify(self):
        ctx = DriveContext("/api", {"a": 1}, stringify=lambda data: json.dumps(data, indent=2))
        ctx.init()
        assert ctx.req.body == '{\n  "a": 1\n}'

    def test_default_stringify_is_compact(self):
        assert json_stringify({"a": [1, 2], "b": "ü"}) == '{"a":[1,2],"b":"ü"}'


class TestInitAbort:
    """Timeout scheduling."""

    @pytest.mark.asyncio
    async def test_finite_timeout_aborts(self):
        ctx = DriveContext("/api")
        ctx.init_abort(0.01)

        assert ctx.req.signal is not None
        assert ctx.req.signal.aborted is False

        await asyncio.sleep(0.05)
        assert ctx.req.signal.aborted is True
        assert ctx.req.signal.reason == "timeout"

    @pytest.mark.asyncio
    async def test_cancel_abort_disarms_timer(self):
        ctx = DriveContext("/api")
        ctx.init_abort(0.01)
        ctx.cancel_abort()

        await asyncio.sleep(0.05)
        assert ctx.req.signal.aborted is False

    def test_cancel_abort_without_timer(self):
        ctx = DriveContext("/api")
        ctx.cancel_abort()
        assert ctx.req.signal is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("timeout", [None, float("inf"), float("nan"), "10", True])
    async def test_non_finite_timeout_is_noop(self, timeout):
        ctx = DriveContext("/api")
        ctx.init_abort(timeout)
        assert ctx.req.signal is None


class TestAbortSignal:
    @pytest.mark.asyncio
    async def test_race_returns_result(self):
        signal = AbortController().signal

        async def work():
            return 42

        assert await signal.race(work()) == 42

    @pytest.mark.asyncio
    async def test_race_cancels_on_abort(self):
        controller = AbortController()
        cancelled = asyncio.Event()

        async def work():
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        asyncio.get_running_loop().call_later(0.01, controller.abort, "timeout")

        with pytest.raises(AbortError) as exc_info:
            await controller.signal.race(work(), "https://api.example.com")

        assert exc_info.value.reason == "timeout"
        assert exc_info.value.url == "https://api.example.com"
        await asyncio.sleep(0.01)
        assert cancelled.is_set()

    def test_throw_if_aborted(self):
        controller = AbortController()
        controller.signal.throw_if_aborted()

        controller.abort()
        with pytest.raises(AbortError, match="aborted"):
            controller.signal.throw_if_aborted()

    def test_abort_keeps_first_reason(self):
        controller = AbortController()
        controller.abort("first")
        controller.abort("second")
        assert controller.signal.reason == "first"

    def test_signal_starts_clear(self):
        signal = AbortSignal()
        assert signal.aborted is False
        assert signal.reason is None


class TestDecodeHeader:
    """Response type and charset come from Content-Type."""

    def test_json_with_charset(self):
        ctx = DriveContext("/api")
        ctx.decode_header(httpx.Response(200, headers={"Content-Type": "application/json; charset=utf-8"}))
        assert ctx.res.type == "json"
        assert ctx.res.charset == "utf-8"

    def test_html(self):
        ctx = DriveContext("/api")
        ctx.decode_header(httpx.Response(200, headers={"Content-Type": "text/html; charset=ISO-8859-1"}))
        assert ctx.res.type == "html"
        assert ctx.res.charset == "ISO-8859-1"

    def test_missing_header_defaults_to_text(self):
        ctx = DriveContext("/api")
        ctx.decode_header(httpx.Response(204))
        assert ctx.res.type == "txt"
        assert ctx.res.charset is None

    def test_type_is_sticky(self):
        ctx = DriveContext("/api")
        ctx.res.type = "html"
        ctx.decode_header(httpx.Response(200, headers={"Content-Type": "application/json"}))
        assert ctx.res.type == "html"

    def test_unknown_type(self):
        ctx = DriveContext("/api")
        ctx.decode_header(httpx.Response(200, headers={"Content-Type": "application/x-nothing-known"}))
        assert ctx.res.type is None


class TestClone:
    """Snapshots are detached from the live context."""

    def test_headers_are_fresh(self):
        ctx = DriveContext("https://api.example.com/users", headers={"X-A": "1"})
        snapshot = ctx.clone()

        snapshot.req.headers["X-B"] = "2"

        assert "X-B" not in ctx.req.headers
        assert snapshot.path == "/users"
        assert snapshot.id == ctx.id

    def test_data_is_deep_copied(self):
        data = {"items": [1, 2]}
        ctx = DriveContext("/api", data)
        snapshot = ctx.clone()

        snapshot.data["items"].append(3)

        assert data == {"items": [1, 2]}

    def test_snapshot_is_frozen(self):
        snapshot = DriveContext("/api").clone()
        with pytest.raises(AttributeError):
            snapshot.api = "/other"
