"""
Система конфигурации для Fetch Driver.

Конфиг immutable (frozen dataclass): один экземпляр может безопасно
разделяться между конкурентными запросами.
"""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .logging import LoggingConfig


def _freeze_dict(d: Optional[Dict[str, str]]) -> Mapping[str, str]:
    """
    Convert dict to immutable MappingProxyType.

    Example:
        >>> frozen = _freeze_dict({"X-API-Key": "secret"})
        >>> frozen["X-New"] = "value"  # Raises TypeError
    """
    if d is None:
        return MappingProxyType({})
    return MappingProxyType(dict(d))


@dataclass(frozen=True)
class DriverConfig:
    """
    Главная конфигурация Driver.

    Args:
        base_url: Базовый URL для относительных целей (передаётся в httpx)
        headers: Заголовки по умолчанию (добавляются к каждому запросу,
                 если запрос не задаёт их сам)
        timeout: Таймаут запроса по умолчанию (сек). None = без таймаута
        follow_redirects: Следовать редиректам (передаётся в httpx)
        verify_ssl: Проверять SSL сертификаты
        logging: Конфигурация логирования (None = только NullHandler)

    Examples:
        >>> DriverConfig(timeout=10)
        >>> DriverConfig.create(headers={"Accept": "application/json"})
    """
    base_url: Optional[str] = None
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    timeout: Optional[float] = None
    follow_redirects: bool = True
    verify_ssl: bool = True
    logging: Optional['LoggingConfig'] = None

    def __post_init__(self):
        """Валидация и заморозка."""
        if isinstance(self.headers, dict):
            object.__setattr__(self, 'headers', _freeze_dict(self.headers))

        if self.base_url:
            normalized = self.base_url.rstrip('/')
            if normalized != self.base_url:
                object.__setattr__(self, 'base_url', normalized)

        if self.timeout is not None:
            if not math.isfinite(self.timeout) or self.timeout <= 0:
                raise ValueError("timeout must be a positive finite number")

    @classmethod
    def create(
        cls,
        base_url: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        follow_redirects: bool = True,
        verify_ssl: bool = True,
        logging: Optional['LoggingConfig'] = None,
    ) -> "DriverConfig":
        """
        Создать конфиг из простых значений.

        Example:
            >>> config = DriverConfig.create(timeout=5, headers={"X-Trace": "1"})
        """
        return cls(
            base_url=base_url,
            headers=_freeze_dict(headers),
            timeout=timeout,
            follow_redirects=follow_redirects,
            verify_ssl=verify_ssl,
            logging=logging,
        )
