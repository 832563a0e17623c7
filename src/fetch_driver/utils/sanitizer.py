# src/fetch_driver/utils/sanitizer.py
"""
Маскирование чувствительных данных перед записью в лог.

Драйвер логирует URL, заголовки и сводку тела запроса; пароли, токены
и API ключи не должны попадать в лог в открытом виде.
"""

import re
from typing import Any, Dict, Mapping


DEFAULT_MASK = "***REDACTED***"

# Чувствительные ключи (case-insensitive, частичное совпадение)
SENSITIVE_KEYS = {
    'password', 'passwd', 'pwd',
    'token', 'access_token', 'refresh_token', 'jwt',
    'secret', 'client_secret',
    'api_key', 'apikey', 'api-key', 'private_key',
    'authorization', 'auth',
    'cookie', 'session', 'csrf',
    'credentials',
}

SENSITIVE_PATTERNS = [
    (re.compile(r'(Bearer\s+)([A-Za-z0-9\-._~+/]+=*)', re.IGNORECASE), r'\1' + DEFAULT_MASK),
    (re.compile(r'(Basic\s+)([A-Za-z0-9+/]+=*)', re.IGNORECASE), r'\1' + DEFAULT_MASK),
    (re.compile(r'(api[_-]?key[=:]\s*)([^\s&,;]+)', re.IGNORECASE), r'\1' + DEFAULT_MASK),
    (re.compile(r'((?:access_|refresh_)?token[=:]\s*)([^\s&,;]+)', re.IGNORECASE), r'\1' + DEFAULT_MASK),
    (re.compile(r'(password[=:]\s*)([^\s&,;]+)', re.IGNORECASE), r'\1' + DEFAULT_MASK),
    # user:password@host
    (re.compile(r'(://[^:/@\s]+:)([^@/\s]+)(@)'), r'\1' + DEFAULT_MASK + r'\3'),
]


def mask_sensitive_data(data: Any, mask: str = DEFAULT_MASK) -> Any:
    """
    Рекурсивно маскирует чувствительные данные в словарях, списках, строках.

    Examples:
        >>> mask_sensitive_data({"Authorization": "Bearer abc", "Accept": "*/*"})
        {'Authorization': '***REDACTED***', 'Accept': '*/*'}

        >>> mask_sensitive_data("https://api.example.com?api_key=secret123&page=1")
        'https://api.example.com?api_key=***REDACTED***&page=1'
    """
    if data is None or isinstance(data, (bool, int, float)):
        return data

    if isinstance(data, str):
        return _mask_string(data, mask)

    if isinstance(data, Mapping):
        return _mask_mapping(data, mask)

    if isinstance(data, (list, tuple)):
        return type(data)(mask_sensitive_data(item, mask) for item in data)

    # Прочие объекты (bytes, потоки, httpx объекты) не трогаем
    return data


def mask_headers(headers: Mapping[str, str], mask: str = DEFAULT_MASK) -> Dict[str, str]:
    """
    Маскирует заголовки HTTP (принимает dict или httpx.Headers).

    Example:
        >>> mask_headers({"Authorization": "Bearer token123", "User-Agent": "MyApp/1.0"})
        {'Authorization': '***REDACTED***', 'User-Agent': 'MyApp/1.0'}
    """
    return _mask_mapping(dict(headers.items()), mask)


def _mask_mapping(data: Mapping[Any, Any], mask: str) -> Dict[Any, Any]:
    result = {}
    for key, value in data.items():
        if _is_sensitive_key(str(key).lower()):
            result[key] = mask
        else:
            result[key] = mask_sensitive_data(value, mask)
    return result


def _mask_string(text: str, mask: str) -> str:
    result = text
    for pattern, replacement in SENSITIVE_PATTERNS:
        if mask != DEFAULT_MASK:
            replacement = replacement.replace(DEFAULT_MASK, mask)
        result = pattern.sub(replacement, result)
    return result


def _is_sensitive_key(key: str) -> bool:
    if key in SENSITIVE_KEYS:
        return True
    return any(sensitive_key in key for sensitive_key in SENSITIVE_KEYS)
