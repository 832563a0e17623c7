"""Per-request state shared by middleware, hooks, the fetcher and the parser."""

import asyncio
import copy
import json
import uuid
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, TypeVar

import httpx

from .exceptions import AbortError
from ..utils.shared import (
    is_finite,
    is_json_payload,
    is_non_empty_string,
    is_non_raw_body,
    is_search_params,
    is_stream,
    merge_search,
    mime_extension,
    parse_charset,
)

T = TypeVar("T")
R = TypeVar("R")

Stringify = Callable[[Any], str]

# Compact separators so bodies match what browsers and JS clients send
json_stringify: Stringify = partial(json.dumps, separators=(",", ":"), ensure_ascii=False)

DEFAULT_RESPONSE_TYPE = "txt"


class AbortSignal:
    """Read side of an AbortController; awaited by the fetcher and the stream pump."""

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    @property
    def aborted(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()

    def throw_if_aborted(self, url: Optional[str] = None) -> None:
        if self.aborted:
            raise AbortError(self.reason, url)

    async def race(self, awaitable: Awaitable[R], url: Optional[str] = None) -> R:
        """
        Await `awaitable` unless the signal fires first.

        Raises:
            AbortError: the signal fired before `awaitable` finished
        """
        self.throw_if_aborted(url)

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        aborted = False
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not task.done():
                aborted = True
                task.cancel()

        if aborted:
            raise AbortError(self.reason, url)
        return task.result()

    def __deepcopy__(self, memo):
        return self


class AbortController:
    """
    Cancels an in-flight request.

    Example:
        >>> controller = AbortController()
        >>> ctx.req.signal = controller.signal
        >>> controller.abort("user cancelled")
    """

    def __init__(self):
        self.signal = AbortSignal()

    def abort(self, reason: str = "aborted") -> None:
        if not self.signal.aborted:
            self.signal.reason = reason
            self.signal._event.set()


@dataclass
class DriveRequest:
    """Everything the fetcher needs besides the target URI."""

    headers: httpx.Headers = field(default_factory=httpx.Headers)
    method: Optional[str] = None
    body: Any = None
    signal: Optional[AbortSignal] = None
    # passthrough httpx options: follow_redirects, cookies, extensions, auth...
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class DriveResponse(Generic[T]):
    """Response facets, filled in phase by phase."""

    type: Optional[str] = None
    charset: Optional[str] = None
    raw: Optional[httpx.Response] = None
    headers: Optional[httpx.Headers] = None
    status: Optional[int] = None
    body: Optional[T] = None


@dataclass(frozen=True)
class ContextSnapshot:
    """Detached copy of a context handed to predicate patterns."""

    id: str
    api: str
    url: Optional[httpx.URL]
    path: str
    req: DriveRequest
    res: DriveResponse
    data: Any


def _parse_url(api: str) -> Optional[httpx.URL]:
    try:
        url = httpx.URL(api)
    except (httpx.InvalidURL, TypeError, ValueError):
        return None
    return url if url.is_absolute_url else None


def _detach(value: Any) -> Any:
    """Deep-copy plain data; streams cannot be copied and stay shared."""
    if is_stream(value):
        return value
    return copy.deepcopy(value)


class DriveContext(Generic[T]):
    """
    Mutable state of one request/response cycle.

    Created by the driver per call and never reused. Phases mutate it in a
    fixed order (init, init_abort, fetch, decode_header, parse); middleware
    and hooks may read or change anything in between.

    `init()` must run once per context; calling it again re-merges query
    params onto an already merged target.

    Example:
        >>> ctx = DriveContext("https://api.example.com/users", {"name": "ann"})
        >>> ctx.init()
        >>> ctx.req.method, ctx.req.body
        ('POST', '{"name":"ann"}')
    """

    def __init__(
        self,
        api: str,
        data: Any = None,
        *,
        id: Optional[str] = None,
        headers: Any = None,
        method: Optional[str] = None,
        body: Any = None,
        signal: Optional[AbortSignal] = None,
        stringify: Stringify = json_stringify,
        **options: Any,
    ):
        self.id = id or self.random_id()
        self.api = api
        self.url = _parse_url(api)
        self.path = self.url.path if self.url is not None else api
        self.data = data
        self.stringify = stringify
        self.req = DriveRequest(
            headers=httpx.Headers(headers),
            method=method,
            body=body,
            signal=signal,
            options=options,
        )
        self.res: DriveResponse[T] = DriveResponse()
        self._abort_timer: Optional[asyncio.TimerHandle] = None

    @staticmethod
    def random_id() -> str:
        return uuid.uuid4().hex

    # ==================== init ====================

    def _init_api(self) -> None:
        if is_search_params(self.data):
            self.api = merge_search(self.api, self.data)

    def _init_body(self) -> None:
        if self.req.body is not None:
            return

        data = self.data
        if is_non_raw_body(data):
            self.req.body = data
        elif is_json_payload(data):
            self.req.body = self.stringify(data)
            if "Content-Type" not in self.req.headers:
                self.req.headers["Content-Type"] = "application/json"

    def _init_method(self) -> None:
        if not self.req.method:
            self.req.method = "GET" if self.req.body is None else "POST"

    def init(self) -> None:
        """Merge query params, materialize the body, infer the method."""
        self._init_api()
        self._init_body()
        self._init_method()

    def init_abort(self, timeout: Optional[float] = None) -> None:
        """
        Abort the request `timeout` seconds from now.

        Non-numeric or infinite timeouts leave the request without a signal.
        """
        if not is_finite(timeout):
            return

        controller = AbortController()
        self.req.signal = controller.signal
        self._abort_timer = asyncio.get_running_loop().call_later(timeout, controller.abort, "timeout")

    def cancel_abort(self) -> None:
        """Disarm the timeout once the response is settled; the signal keeps its state."""
        if self._abort_timer is not None:
            self._abort_timer.cancel()
            self._abort_timer = None

    # ==================== response ====================

    def decode_header(self, response: httpx.Response) -> None:
        """Derive `res.type` and `res.charset` from the Content-Type header."""
        content_type = response.headers.get("Content-Type")

        if not is_non_empty_string(content_type):
            if self.res.type is None:
                self.res.type = DEFAULT_RESPONSE_TYPE
            return

        fields = content_type.split(";")

        for token in fields:
            extension = mime_extension(token)
            if extension is not None and self.res.type is None:
                self.res.type = extension

        charset = parse_charset(fields)
        if charset is not None:
            self.res.charset = charset

    def clone(self) -> ContextSnapshot:
        """Independent copy for read-only inspection (fresh header container)."""
        req = DriveRequest(
            headers=httpx.Headers(self.req.headers),
            method=self.req.method,
            body=_detach(self.req.body),
            signal=self.req.signal,
            options={key: _detach(value) for key, value in self.req.options.items()},
        )
        res = DriveResponse(
            type=self.res.type,
            charset=self.res.charset,
            raw=self.res.raw,
            headers=httpx.Headers(self.res.headers) if self.res.headers is not None else None,
            status=self.res.status,
            body=_detach(self.res.body),
        )
        return ContextSnapshot(
            id=self.id,
            api=self.api,
            url=self.url,
            path=self.path,
            req=req,
            res=res,
            data=_detach(self.data),
        )

    def __repr__(self) -> str:
        return f"DriveContext(id={self.id!r}, api={self.api!r}, method={self.req.method!r})"
