"""
Helpers shared by the context, the parser and the curl generator.

Includes:
- body-kind predicates (what passes through untouched vs. gets JSON-encoded)
- FormData, an ordered multipart payload
- query-string and Content-Type helpers
"""

import io
import math
import mimetypes
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, TypeVar, Union

import httpx

T = TypeVar("T")

FormValue = Union[str, bytes]


@dataclass
class FormField:
    name: str
    value: FormValue
    filename: Optional[str] = None
    content_type: Optional[str] = None

    @property
    def is_file(self) -> bool:
        return isinstance(self.value, bytes)


class FormData:
    """
    Ordered multipart/form-data payload.

    Text fields and binary parts keep their insertion order; repeated names
    are allowed.

    Example:
        >>> form = FormData()
        >>> form.append("username", "john_doe")
        >>> form.append("avatar", b"...", filename="avatar.png", content_type="image/png")
    """

    def __init__(self, fields: Optional[Iterable[Tuple[str, FormValue]]] = None):
        self._fields: List[FormField] = []
        for name, value in fields or ():
            self.append(name, value)

    def append(self, name: str, value: FormValue, filename: Optional[str] = None,
               content_type: Optional[str] = None) -> None:
        if isinstance(value, (bytearray, memoryview)):
            value = bytes(value)
        if isinstance(value, bytes) and filename is None:
            filename = name
        self._fields.append(FormField(name, value, filename, content_type))

    def fields(self) -> List[FormField]:
        return list(self._fields)

    def __iter__(self) -> Iterator[Tuple[str, FormValue]]:
        return ((f.name, f.value) for f in self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def to_httpx(self) -> Tuple[Dict[str, Any], List[Tuple[str, Tuple[str, bytes, str]]]]:
        """Split into the `data=` / `files=` arguments httpx expects."""
        data: Dict[str, Any] = {}
        files = []
        for f in self._fields:
            if f.is_file:
                files.append((f.name, (f.filename, f.value, f.content_type or "application/octet-stream")))
            elif f.name in data:
                previous = data[f.name]
                data[f.name] = (previous if isinstance(previous, list) else [previous]) + [f.value]
            else:
                data[f.name] = f.value
        return data, files

    def __repr__(self) -> str:
        return f"FormData({[(f.name, f.value) for f in self._fields]!r})"


# ==================== Predicates ====================

def is_finite(source: Any) -> bool:
    """True for int/float values that are not NaN or +-inf (bools excluded)."""
    if isinstance(source, bool) or not isinstance(source, (int, float)):
        return False
    return math.isfinite(source)


def is_non_empty_string(source: Any) -> bool:
    return isinstance(source, str) and source.strip() != ""


def is_search_params(source: Any) -> bool:
    return isinstance(source, httpx.QueryParams)


def is_bytes_like(source: Any) -> bool:
    return isinstance(source, (bytes, bytearray, memoryview))


def is_stream(source: Any) -> bool:
    """File objects and (async) iterators of bytes."""
    if isinstance(source, io.IOBase):
        return True
    if hasattr(source, "__aiter__"):
        return True
    return isinstance(source, Iterator) and not isinstance(source, (str, bytes))


def is_non_raw_body(source: Any) -> bool:
    """
    Payloads sent as-is, without JSON encoding.

    Mirrors the body kinds a fetch primitive accepts natively: binary
    buffers, streams and multipart form data.
    """
    return is_bytes_like(source) or isinstance(source, FormData) or is_stream(source)


def is_json_payload(source: Any) -> bool:
    return isinstance(source, (dict, list, tuple))


# ==================== Query strings ====================

def to_search_params(init: Any) -> Optional[httpx.QueryParams]:
    """
    Build query params from QueryParams, a query string, a list of
    "key=value" strings or a mapping (None values dropped).

    Returns None for unsupported or empty input.

    Example:
        >>> str(to_search_params({"q1": "v1", "q2": 2, "q3": None}))
        'q1=v1&q2=2'
    """
    if isinstance(init, httpx.QueryParams):
        return init
    if isinstance(init, str):
        return httpx.QueryParams(init) if init else None
    if isinstance(init, (list, tuple)) and init and all(isinstance(e, str) for e in init):
        return httpx.QueryParams("&".join(e.strip() for e in init if "=" in e))
    if isinstance(init, dict) and init:
        return httpx.QueryParams({k: str(v) for k, v in init.items() if v is not None})
    return None


def merge_search(api: str, params: httpx.QueryParams) -> str:
    """
    Merge `params` onto the query string already embedded in `api`.

    New params come first, then the existing ones; a fragment-free target
    is assumed.

    Example:
        >>> merge_search("/api?c=3", httpx.QueryParams({"a": "1"}))
        '/api?a=1&c=3'
    """
    path, _, search = api.partition("?")
    merged = httpx.QueryParams(f"{params}&{search}")
    return f"{path}?{merged}"


# ==================== Content-Type ====================

# Preferred extension per MIME type; the stdlib table has several
# extensions for common text types and its first pick varies by platform.
_PREFERRED_EXTENSIONS = {
    "application/json": "json",
    "text/plain": "txt",
    "text/html": "html",
    "text/css": "css",
    "text/xml": "xml",
    "application/xml": "xml",
    "text/javascript": "js",
    "application/javascript": "js",
    "text/richtext": "rtx",
    "image/svg+xml": "svg",
    "application/octet-stream": "bin",
}


def mime_extension(token: str) -> Optional[str]:
    """
    Map one Content-Type token to a file extension (without the dot).

    Parameter tokens (`charset=utf-8`) and unknown types give None.

    Example:
        >>> mime_extension("application/json")
        'json'
        >>> mime_extension(" charset=utf-8") is None
        True
    """
    mime = token.strip().lower()
    if "/" not in mime or "=" in mime:
        return None
    if mime in _PREFERRED_EXTENSIONS:
        return _PREFERRED_EXTENSIONS[mime]
    extension = mimetypes.guess_extension(mime, strict=False)
    return extension.lstrip(".") if extension else None


def parse_charset(fields: Sequence[str]) -> Optional[str]:
    """
    Read the `charset=` parameter out of split Content-Type tokens.

    Example:
        >>> parse_charset(["application/json", " charset=utf-8"])
        'utf-8'
    """
    params = to_search_params([f for f in fields if "=" in f])
    if params is None:
        return None
    return params.get("charset")


# ==================== Misc ====================

def compact(source: Iterable[Optional[T]]) -> List[T]:
    """Drop falsy values (None, False, 0, "") from a sequence."""
    return [item for item in source if item]


def src2name(src: str) -> str:
    """
    Last path segment of a URL, query string removed.

    Example:
        >>> src2name("https://cdn.example.com/files/report.pdf?token=abc")
        'report.pdf'
    """
    path = src.split("?", 1)[0]
    return path.rsplit("/", 1)[-1]
