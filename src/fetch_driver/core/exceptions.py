"""
Иерархия исключений Fetch Driver.

Драйвер не оборачивает сетевые ошибки: исключения httpx, ошибки
сериализации и декодирования пробрасываются вызывающему коду как есть.
Здесь определены только ошибки, которые порождает сам драйвер.
"""

from typing import Optional


class DriverException(Exception):
    """Базовое исключение Fetch Driver."""

    def __init__(self, message: str, **kwargs):
        self.message = message
        super().__init__(message)


class MiddlewareError(DriverException):
    """
    Нарушение контракта middleware.

    Пример: повторный вызов next() внутри одного middleware.
    """
    pass


class AbortError(DriverException):
    """
    Запрос прерван через AbortSignal.

    Args:
        reason: Причина прерывания (например, "timeout")
        url: URL запроса
    """

    def __init__(self, reason: Optional[str] = None, url: Optional[str] = None):
        self.reason = reason or "aborted"
        self.url = url

        msg = f"The operation was aborted ({self.reason})"
        if url:
            msg += f" (url: {url})"

        super().__init__(msg)
