# src/fetch_driver/core/fetch.py
"""
Fetch-примитив драйвера поверх httpx.AsyncClient.

Отправляет DriveRequest и возвращает потоковый httpx.Response (тело ещё
не прочитано: его читает парсер). Поддерживает AbortSignal и локальные
data: URI (RFC 2397) без сетевого запроса.
"""

import base64
from typing import Any, Dict, Optional
from urllib.parse import unquote_to_bytes

import httpx

from .config import DriverConfig
from .context import DriveRequest
from ..utils.shared import FormData, is_bytes_like, is_stream

# Опции, которые httpx принимает в send(), а не в build_request()
SEND_OPTIONS = frozenset({"follow_redirects", "auth"})

DEFAULT_DATA_URI_TYPE = "text/plain;charset=US-ASCII"


def data_uri_response(api: str) -> httpx.Response:
    """
    Построить ответ из data: URI.

    Example:
        >>> response = data_uri_response("data:,Hello%20World!")
        >>> response.headers["Content-Type"]
        'text/plain;charset=US-ASCII'

    Raises:
        httpx.InvalidURL: URI без запятой-разделителя
    """
    header, sep, payload = api[len("data:"):].partition(",")
    if not sep:
        raise httpx.InvalidURL(f"Malformed data URI: {api[:40]}")

    params = [p.strip() for p in header.split(";")]
    is_base64 = params[-1].lower() == "base64"
    if is_base64:
        params = params[:-1]

    mime = ";".join(params)
    if not mime:
        mime = DEFAULT_DATA_URI_TYPE
    elif mime.startswith(";"):
        mime = "text/plain" + mime

    content = unquote_to_bytes(payload)
    if is_base64:
        content = base64.b64decode(content)

    return httpx.Response(200, headers={"Content-Type": mime}, content=content)


class Fetcher:
    """
    Отправляет запросы через лениво создаваемый httpx.AsyncClient.

    Example:
        >>> async with Fetcher(DriverConfig(base_url="https://api.example.com")) as fetch:
        ...     response = await fetch("/users", DriveRequest(method="GET"))
        ...     await response.aread()

    Args:
        config: Конфигурация (base_url, заголовки, SSL, редиректы)
        client: Готовый httpx.AsyncClient; закрывать его остаётся вызывающему
    """

    def __init__(
        self,
        config: Optional[DriverConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._config = config or DriverConfig()
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Получить или создать httpx клиент."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url or "",
                headers=dict(self._config.headers),
                verify=self._config.verify_ssl,
                follow_redirects=self._config.follow_redirects,
                timeout=None,
            )
        return self._client

    async def __aenter__(self) -> "Fetcher":
        await self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Закрыть клиент (только если он создан здесь)."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _build_request(self, client: httpx.AsyncClient, api: str, req: DriveRequest) -> httpx.Request:
        kwargs: Dict[str, Any] = {
            key: value for key, value in req.options.items() if key not in SEND_OPTIONS
        }

        body = req.body
        if isinstance(body, FormData):
            data, files = body.to_httpx()
            kwargs["data"] = data
            if files:
                kwargs["files"] = files
        elif isinstance(body, str):
            kwargs["content"] = body.encode("utf-8")
        elif is_bytes_like(body):
            kwargs["content"] = bytes(body)
        elif is_stream(body):
            kwargs["content"] = body

        return client.build_request(req.method or "GET", api, headers=req.headers, **kwargs)

    async def __call__(self, api: str, req: DriveRequest) -> httpx.Response:
        """
        Выполнить запрос.

        Returns:
            httpx.Response с непрочитанным телом

        Raises:
            AbortError: Сигнал сработал до получения заголовков ответа
            httpx.HTTPError: Сетевые ошибки httpx, без обёртки
        """
        if req.signal is not None:
            req.signal.throw_if_aborted(api)

        if api.startswith("data:"):
            return data_uri_response(api)

        client = await self._get_client()
        request = self._build_request(client, api, req)
        send_options = {key: req.options[key] for key in SEND_OPTIONS if key in req.options}

        send = client.send(request, stream=True, **send_options)
        if req.signal is None:
            return await send
        return await req.signal.race(send, api)
