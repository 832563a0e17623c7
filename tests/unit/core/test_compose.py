"""
Tests for onion-style middleware composition.
"""

import pytest

from fetch_driver.core.compose import compose, create_middleware
from fetch_driver.core.exceptions import MiddlewareError


def recording(calls, name):
    async def middleware(ctx, next):
        calls.append(f"{name}:in")
        await next()
        calls.append(f"{name}:out")
    return middleware


class TestComposeOrder:
    """Middleware run in registration order around the final step."""

    @pytest.mark.asyncio
    async def test_runs_each_middleware_once_in_order(self):
        calls = []

        async def final():
            calls.append("final")

        pipeline = compose([recording(calls, "a"), recording(calls, "b"), recording(calls, "c")])
        await pipeline({}, final)

        assert calls == ["a:in", "b:in", "c:in", "final", "c:out", "b:out", "a:out"]

    @pytest.mark.asyncio
    async def test_empty_chain_runs_final_step(self):
        calls = []

        async def final():
            calls.append("final")

        await compose([])({}, final)

        assert calls == ["final"]

    @pytest.mark.asyncio
    async def test_context_is_shared(self):
        async def set_value(ctx, next):
            ctx["value"] = 1
            await next()

        async def final():
            pass

        ctx = {}
        await compose([set_value])(ctx, final)
        assert ctx == {"value": 1}

    @pytest.mark.asyncio
    async def test_pipeline_is_reusable(self):
        """Each run gets its own next() bookkeeping."""
        calls = []

        async def final():
            calls.append("final")

        pipeline = compose([recording(calls, "a")])
        await pipeline({}, final)
        await pipeline({}, final)

        assert calls.count("final") == 2


class TestComposeShortCircuit:
    """A middleware that never calls next() stops the chain."""

    @pytest.mark.asyncio
    async def test_skips_rest_of_chain(self):
        calls = []

        async def stop(ctx, next):
            calls.append("stop")

        async def final():
            calls.append("final")

        await compose([recording(calls, "a"), stop, recording(calls, "b")])({}, final)

        assert calls == ["a:in", "stop", "a:out"]


class TestComposeErrors:
    """next() misuse and error propagation."""

    @pytest.mark.asyncio
    async def test_next_called_twice_raises(self):
        async def twice(ctx, next):
            await next()
            await next()

        async def final():
            pass

        with pytest.raises(MiddlewareError, match="next\\(\\) called multiple times"):
            await compose([twice])({}, final)

    @pytest.mark.asyncio
    async def test_final_step_error_reaches_outer_middleware(self):
        caught = []

        async def guard(ctx, next):
            try:
                await next()
            except ValueError as e:
                caught.append(str(e))

        async def final():
            raise ValueError("boom")

        await compose([guard, recording([], "inner")])({}, final)

        assert caught == ["boom"]

    @pytest.mark.asyncio
    async def test_uncaught_error_propagates(self):
        async def final():
            raise RuntimeError("network down")

        with pytest.raises(RuntimeError, match="network down"):
            await compose([recording([], "a")])({}, final)


class TestCreateMiddleware:
    def test_returns_same_function(self):
        async def mw(ctx, next):
            await next()

        assert create_middleware(mw) is mw
