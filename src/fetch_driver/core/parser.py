"""
Response body materialization.

The default parser picks a decoding from the response headers, or, when
a progress receiver is given for a sized 2xx response, re-wraps the byte
stream up front, reporting progress per chunk, and hands the buffered
bytes back as a fresh response.
"""

from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable, List, Optional, TYPE_CHECKING

import httpx

from ..utils.shared import is_finite

if TYPE_CHECKING:
    from .context import DriveContext

RAW_TEXT_TYPES = frozenset({"txt", "css", "xml", "html", "plain", "richtext", "javascript"})


def is_raw_text_body(type: Optional[str]) -> bool:
    """True for response type tags decoded as text."""
    return type in RAW_TEXT_TYPES


@dataclass(frozen=True)
class ReceiverEvent:
    """
    Progress report for one received chunk.

    Attributes:
        size: Declared Content-Length
        value: The chunk just read (None on the final, empty read)
        reader: Iterator over the original response stream
        context: Context of the request being received
        percentage: 100 * bytes received so far / size (not clamped)
        done: Reached 100% or the stream ended
    """
    size: int
    value: Optional[bytes]
    reader: AsyncIterator[bytes]
    context: "DriveContext"
    percentage: float
    done: bool


Receiver = Callable[[ReceiverEvent], Any]
BodyParser = Callable[..., Awaitable[None]]


def _content_length(response: httpx.Response) -> Optional[int]:
    value = response.headers.get("Content-Length")
    if value is None:
        return None
    try:
        size = int(value)
    except ValueError:
        return None
    return size if is_finite(size) else None


async def read_body(response: httpx.Response, context: "DriveContext") -> bytes:
    """Load the whole body, giving up when the request signal fires."""
    signal = context.req.signal
    if signal is None:
        return await response.aread()
    return await signal.race(response.aread(), context.api)


async def _next_chunk(reader: AsyncIterator[bytes]) -> Optional[bytes]:
    try:
        return await reader.__anext__()
    except StopAsyncIteration:
        return None


async def _pump(
    response: httpx.Response,
    size: int,
    context: "DriveContext",
    receiver: Receiver,
) -> bytes:
    """Drain `response` chunk by chunk, reporting progress after each one."""
    signal = context.req.signal
    # responses built from bytes (data: URIs, mocks) are already loaded
    reader = response.aiter_bytes() if response.is_stream_consumed else response.aiter_raw()
    chunks: List[bytes] = []
    received = 0

    try:
        while True:
            if signal is not None:
                chunk = await signal.race(_next_chunk(reader), context.api)
            else:
                chunk = await _next_chunk(reader)

            if chunk is None:
                # stream ended short of Content-Length: still report completion
                if received < size:
                    receiver(ReceiverEvent(
                        size=size,
                        value=None,
                        reader=reader,
                        context=context,
                        percentage=100 * received / size,
                        done=True,
                    ))
                break

            chunks.append(chunk)
            received += len(chunk)
            percentage = 100 * received / size
            receiver(ReceiverEvent(
                size=size,
                value=chunk,
                reader=reader,
                context=context,
                percentage=percentage,
                done=percentage >= 100,
            ))
    finally:
        await response.aclose()

    return b"".join(chunks)


def parser() -> BodyParser:
    """
    Build the default body parser.

    The returned coroutine function fills `context.res` from `response`:
    status and headers always; then either a progress-reporting stream in
    `res.raw` (body left unset) or a decoded `res.body`:

    - Content-Disposition: attachment -> bytes
    - json -> parsed JSON
    - no type or a raw-text type -> str
    - anything else -> body stays None

    Example:
        >>> parse = parser()
        >>> await parse(response, ctx, receiver=lambda event: print(event.percentage))
    """

    async def parse(
        response: httpx.Response,
        context: "DriveContext",
        *,
        receiver: Optional[Receiver] = None,
    ) -> None:
        res = context.res
        res.status = response.status_code
        res.headers = response.headers

        if response.is_success and receiver is not None:
            size = _content_length(response)
            if size is not None and size > 0:
                content = await _pump(response, size, context, receiver)
                res.raw = httpx.Response(
                    status_code=response.status_code,
                    headers=response.headers,
                    content=content,
                )
                return

        disposition = response.headers.get("Content-Disposition") or ""

        if "attachment" in disposition:
            res.body = await read_body(response, context)
            return

        if res.type == "json":
            await read_body(response, context)
            res.body = response.json()
            return

        if not res.type or is_raw_text_body(res.type):
            await read_body(response, context)
            res.body = response.text
            return

    return parse
