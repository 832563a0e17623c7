"""
Onion-style middleware composition.

Each middleware receives the context and a `next` coroutine function that
runs the rest of the chain. Code before `await next()` runs on the way in,
code after it on the way out; exceptions raised further in propagate out
through every `await next()`, so an outer middleware can catch them.
"""

from typing import Awaitable, Callable, Sequence, TypeVar

from .exceptions import MiddlewareError

C = TypeVar("C")

Next = Callable[[], Awaitable[None]]
Middleware = Callable[[C, Next], Awaitable[None]]
Pipeline = Callable[[C, Callable[[], Awaitable[None]]], Awaitable[None]]


def compose(middlewares: Sequence[Middleware]) -> Pipeline:
    """
    Build one pipeline out of `middlewares` (run in list order).

    The returned coroutine function takes the context and the terminal
    step. The terminal step only runs once every middleware has called
    `next()`; a middleware that never calls it short-circuits the rest.

    Raises (from the pipeline):
        MiddlewareError: a middleware called next() more than once

    Example:
        >>> async def timing(ctx, next):
        ...     start = time.monotonic()
        ...     await next()
        ...     ctx.elapsed = time.monotonic() - start
        >>> pipeline = compose([timing])
        >>> await pipeline(ctx, send)
    """
    chain = list(middlewares)

    async def pipeline(context, final: Callable[[], Awaitable[None]]) -> None:
        last_index = -1

        async def dispatch(index: int) -> None:
            nonlocal last_index
            if index <= last_index:
                raise MiddlewareError("next() called multiple times")
            last_index = index

            if index == len(chain):
                await final()
                return

            middleware = chain[index]
            await middleware(context, lambda: dispatch(index + 1))

        await dispatch(0)

    return pipeline


def create_middleware(middleware: Middleware) -> Middleware:
    """
    Identity helper for declaring a middleware with its type spelled out.

    Example:
        >>> @create_middleware
        ... async def auth(ctx, next):
        ...     ctx.req.headers["Authorization"] = f"Bearer {token}"
        ...     await next()
    """
    return middleware
