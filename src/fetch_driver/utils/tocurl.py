# src/fetch_driver/utils/tocurl.py
"""
Генерация curl-команды из описания запроса.

Удобно для отладки: хук before_fetch может напечатать команду, которой
запрос воспроизводится из терминала.

Example:
    >>> async def print_curl(ctx):
    ...     print(to_curl(ctx.api, ctx.req))
    >>> driver = Driver(hooks=DriveHooks(before_fetch=print_curl))
"""

import base64
from types import SimpleNamespace
from typing import Any, Optional, Union

import httpx

from .shared import FormData, compact, is_bytes_like
from ..core.context import DriveRequest, json_stringify

CURL_METHODS = frozenset({"GET", "PUT", "POST", "HEAD", "TRACE", "PATCH", "DELETE", "CONNECT", "OPTIONS"})


def _method(request: Optional[DriveRequest] = None) -> str:
    """`-X METHOD`; неизвестный или пустой метод даёт `-X GET`."""
    method = ((request.method if request else None) or "").upper()
    if method in CURL_METHODS:
        return f"-X {method}"
    return "-X GET"


def _header(request: Optional[DriveRequest] = None) -> Optional[str]:
    """
    `-H "name: value"` для каждого заголовка, кроме content-length.

    Имена в нижнем регистре (как их хранит httpx.Headers); `\\` и `"` в
    значениях экранируются.
    """
    if request is None or request.headers is None:
        return None

    headers = httpx.Headers(request.headers)
    parts = []
    for name, value in headers.multi_items():
        if name == "content-length":
            continue
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        parts.append(f'-H "{name}: {escaped}"')
    return " ".join(parts)


def _data_url(value: bytes, content_type: Optional[str]) -> str:
    encoded = base64.b64encode(value).decode("ascii")
    return f"data:{content_type or 'application/octet-stream'};base64,{encoded}"


def _escape(body: Any) -> Optional[str]:
    if isinstance(body, str):
        return body.replace("'", "'\\''")
    if is_bytes_like(body):
        return base64.b64encode(bytes(body)).decode("ascii")
    if isinstance(body, (dict, list, tuple)):
        return _escape(json_stringify(body))
    # streams cannot be rendered without consuming them
    return None


def _body(request: Optional[DriveRequest] = None) -> Optional[str]:
    """
    `-F "k=v"` для FormData (бинарные части как data: URL в base64),
    иначе `--data-binary '...'`.
    """
    body = request.body if request else None

    if isinstance(body, FormData):
        parts = []
        for f in body.fields():
            value = _data_url(f.value, f.content_type) if f.is_file else f.value
            parts.append(f'-F "{f.name}={value}"')
        return " ".join(parts)

    data = _escape(body)
    if data is not None:
        return f"--data-binary '{data}'"
    return None


def _compress(request: Optional[DriveRequest] = None) -> str:
    if request is not None and "accept-encoding" in httpx.Headers(request.headers):
        return " --compressed"
    return ""


generate = SimpleNamespace(method=_method, header=_header, body=_body, compress=_compress)


def to_curl(uri: Union[str, httpx.URL], request: Optional[DriveRequest] = None) -> str:
    """
    Собрать curl-команду.

    Example:
        >>> to_curl("https://google.com/", DriveRequest(method="POST"))
        'curl "https://google.com/" -X POST'
    """
    parts = compact([
        "curl",
        f'"{uri}"',
        generate.method(request),
        generate.header(request),
        generate.body(request),
        generate.compress(request).strip(),
    ])
    return " ".join(parts).strip()
