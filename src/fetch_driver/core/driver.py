# src/fetch_driver/core/driver.py
"""
Driver: выбор middleware по шаблону пути, хуки жизненного цикла и
собственно запрос (init -> fetch -> parse).

Example:
    >>> driver = Driver()
    >>> driver.use("/api/*", auth_middleware)
    >>> user = await driver.drive.get("https://example.com/api/users/1")
    >>> ctx = await driver.request(DriveOptions(api="https://example.com/api/users", data={"name": "ann"}))
    >>> ctx.res.status
    201
"""

import time
from dataclasses import dataclass, field, fields, replace
from functools import partial
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, Tuple, TypeVar, Union

import httpx

from .compose import Middleware, compose
from .config import DriverConfig
from .context import ContextSnapshot, DriveContext, Stringify, json_stringify
from .fetch import Fetcher
from .hooks import run_hook
from .logging import DriverLogger, reset_correlation_id, set_correlation_id
from .match import is_match
from .parser import BodyParser, Receiver, parser as default_parser, read_body
from ..utils.sanitizer import mask_headers

T = TypeVar("T")

METHODS = ("GET", "PUT", "POST", "HEAD", "TRACE", "PATCH", "DELETE", "CONNECT", "OPTIONS")

Pattern = Union[str, Callable[[ContextSnapshot], bool]]
UseMiddleware = Tuple[Pattern, Middleware]


@dataclass
class DriveOptions(Generic[T]):
    """
    Полное описание одного вызова.

    Args:
        api: Целевой URI (абсолютный, относительный к base_url или data:)
        data: Полезная нагрузка: dict/list (-> JSON), httpx.QueryParams
              (-> query string), bytes, поток или FormData (как есть)
        headers: Заголовки запроса
        method: HTTP метод (по умолчанию выводится из наличия тела)
        timeout: Таймаут в секундах (float, не миллисекунды); по истечении
                 запрос прерывается с AbortError
        use: Дополнительные middleware только для этого вызова
        receiver: Колбэк прогресса загрузки тела
        parse: Собственный парсер тела вместо парсера драйвера
        stringify: JSON сериализатор для dict/list
        options: Прочие опции httpx (follow_redirects, cookies, extensions, auth)
    """
    api: str
    data: Any = None
    headers: Any = None
    method: Optional[str] = None
    timeout: Optional[float] = None
    use: Sequence[Middleware] = ()
    receiver: Optional[Receiver] = None
    parse: Optional[BodyParser] = None
    stringify: Stringify = json_stringify
    options: Dict[str, Any] = field(default_factory=dict)


_OPTION_FIELDS = frozenset(f.name for f in fields(DriveOptions))


def over(first: Union[str, DriveOptions], data: Any = None, **init: Any) -> DriveOptions:
    """
    Привести аргументы drive() к DriveOptions.

    Либо готовый DriveOptions, либо (api, data, **init); ключи init, которых
    нет в DriveOptions, уходят в options и передаются httpx.
    """
    if isinstance(first, DriveOptions):
        return first

    known = {key: value for key, value in init.items() if key in _OPTION_FIELDS}
    passthrough = {key: value for key, value in init.items() if key not in _OPTION_FIELDS}
    if passthrough:
        known["options"] = {**known.get("options", {}), **passthrough}
    return DriveOptions(api=first, data=data, **known)


class DriveFunc:
    """
    `driver.drive`: вызов возвращает только декодированное тело ответа.

    Методы-сокращения (`drive.get`, `drive.post`, ...) берутся из
    фиксированной таблицы, построенной один раз на драйвер.

    Example:
        >>> body = await driver.drive("https://httpbin.org/get")
        >>> body = await driver.drive.post("https://httpbin.org/post", {"a": 1})
    """

    def __init__(self, driver: "Driver"):
        self._driver = driver
        self._shortcuts = {method.lower(): partial(self._call_with_method, method) for method in METHODS}

    async def __call__(self, first: Union[str, DriveOptions], data: Any = None, **init: Any) -> Any:
        context = await self._driver.request(over(first, data, **init))
        return context.res.body

    async def _call_with_method(self, method: str, first: Union[str, DriveOptions],
                                data: Any = None, **init: Any) -> Any:
        options = replace(over(first, data, **init), method=method)
        context = await self._driver.request(options)
        return context.res.body

    def __getattr__(self, name: str):
        shortcuts = self.__dict__.get("_shortcuts", {})
        if name in shortcuts:
            return shortcuts[name]
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")


class Driver:
    """
    Драйвер запросов с middleware в стиле "луковицы".

    Middleware регистрируются парами (шаблон, функция). Шаблон: glob по
    пути запроса ("*", "/api/*", "!/health") или предикат над снимком
    контекста. Для каждого вызова выбираются подходящие middleware, к ним
    добавляются middleware вызова (`use=`), и цепочка оборачивает
    терминальный шаг:

        before_init -> init -> after_init -> init_abort -> before_fetch ->
        fetch -> res.raw -> after_fetch -> decode_header -> before_parse ->
        parse -> after_parse

    Ошибки не оборачиваются: исключение из fetch, парсера или middleware
    доходит до вызывающего кода, если его не перехватил middleware вокруг
    `await next()`.

    Args:
        use: Список пар (шаблон, middleware)
        hooks: Объект с необязательными хуками (см. DriveHooks)
        random_id: Генератор id контекста
        parser: Фабрика парсера тела (по умолчанию parser())
        config: DriverConfig (base_url, заголовки, таймаут, логирование)
        fetcher: Собственный fetch-примитив `(api, DriveRequest) -> httpx.Response`
        client: Готовый httpx.AsyncClient для fetch-примитива по умолчанию
    """

    def __init__(
        self,
        use: Optional[Sequence[UseMiddleware]] = None,
        *,
        hooks: Any = None,
        random_id: Optional[Callable[[], str]] = None,
        parser: Optional[Callable[[], BodyParser]] = None,
        config: Optional[DriverConfig] = None,
        fetcher: Optional[Callable[..., Any]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._config = config or DriverConfig()
        self.hooks = hooks
        self.middlewares: List[UseMiddleware] = list(use or [])
        self._parser = parser or default_parser
        self._random_id = random_id or DriveContext.random_id
        self._fetch = fetcher or Fetcher(self._config, client)
        logger_name = "fetch_driver.driver"
        if self._config.logging is not None:
            # own handlers per configured driver
            logger_name = f"{logger_name}.{id(self):x}"
        self._logger = DriverLogger(self._config.logging, name=logger_name)

        self.drive = DriveFunc(self)

    async def __aenter__(self) -> "Driver":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Закрыть httpx клиент и обработчики логов."""
        close = getattr(self._fetch, "close", None)
        if close is not None:
            await close()
        self._logger.close()

    def use(self, pattern: Pattern, middleware: Middleware) -> "Driver":
        """
        Зарегистрировать middleware для шаблона. Возвращает драйвер (chainable).

        Example:
            >>> driver.use("*", logging_mw).use("/api/*", auth_mw)
        """
        self.middlewares.append((pattern, middleware))
        return self

    @staticmethod
    def _applies(pattern: Pattern, context: DriveContext) -> bool:
        if isinstance(pattern, str):
            return is_match(context.path, pattern)
        return bool(pattern(context.clone()))

    async def request(self, options: DriveOptions[T]) -> DriveContext[T]:
        """
        Выполнить запрос и вернуть заполненный контекст.

        Raises:
            MiddlewareError: middleware вызвал next() дважды
            AbortError: сработал таймаут
            httpx.HTTPError: сетевая ошибка (без обёртки)
        """
        timeout = options.timeout if options.timeout is not None else self._config.timeout

        context: DriveContext[T] = DriveContext(
            options.api,
            options.data,
            id=self._random_id(),
            headers=options.headers,
            method=options.method,
            stringify=options.stringify,
            **options.options,
        )

        matched = [
            middleware
            for pattern, middleware in list(self.middlewares)
            if self._applies(pattern, context)
        ]
        matched.extend(options.use)

        parse = options.parse or self._parser()
        receiver = options.receiver

        async def terminal() -> None:
            await run_hook(self.hooks, "before_init", context)
            context.init()
            await run_hook(self.hooks, "after_init", context)

            context.init_abort(timeout)

            await run_hook(self.hooks, "before_fetch", context)
            self._logger.debug(
                "fetch",
                method=context.req.method,
                api=context.api,
                headers=mask_headers(context.req.headers),
            )
            response = await self._fetch(context.api, context.req)
            try:
                context.res.raw = response
                await run_hook(self.hooks, "after_fetch", context)

                context.decode_header(response)

                await run_hook(self.hooks, "before_parse", context)
                if receiver is None:
                    await parse(response, context)
                else:
                    await parse(response, context, receiver=receiver)
                await run_hook(self.hooks, "after_parse", context)

                if not response.is_closed:
                    # body the parser did not decode stays readable via res.raw
                    await read_body(response, context)
            finally:
                await response.aclose()

        token = set_correlation_id(context.id)
        start = time.monotonic()
        try:
            await compose(matched)(context, terminal)
        except Exception as e:
            self._logger.debug(
                "request failed",
                api=context.api,
                error=f"{type(e).__name__}: {e}",
                duration_ms=round((time.monotonic() - start) * 1000, 2),
            )
            raise
        else:
            self._logger.debug(
                "request completed",
                api=context.api,
                status=context.res.status,
                content_type=context.res.type,
                middleware_count=len(matched),
                duration_ms=round((time.monotonic() - start) * 1000, 2),
            )
        finally:
            context.cancel_abort()
            reset_correlation_id(token)

        return context

    @property
    def config(self) -> DriverConfig:
        return self._config
