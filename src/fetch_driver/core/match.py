"""Path pattern matching for middleware selection."""

from fnmatch import fnmatchcase
from typing import Iterable, Optional


def is_match(path: str, pattern: str) -> bool:
    """
    Check `path` against a glob `pattern`.

    `"*"` matches everything, a leading `!` negates the rest of the pattern.
    Matching is case-sensitive and `*` also matches `/`.

    Examples:
        >>> is_match("/users/42", "/users/*")
        True
        >>> is_match("/users/42", "!/users/*")
        False
    """
    if pattern == "*":
        return True
    if pattern.startswith("!"):
        return not fnmatchcase(path, pattern[1:])
    return fnmatchcase(path, pattern)


def find_matching(path: str, patterns: Iterable[str]) -> Optional[str]:
    """
    Most specific (longest) pattern matching `path`; earlier wins on ties.

    Example:
        >>> find_matching("/api/users", ["*", "/api/*", "/api/users"])
        '/api/users'
    """
    for pattern in sorted(patterns, key=len, reverse=True):
        if is_match(path, pattern):
            return pattern
    return None
