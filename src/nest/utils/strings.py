"""String helpers."""

from __future__ import annotations

import re

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


def camel_to_kebab(name: str) -> str:
    """Convert a camelCase (or snake_case) identifier to kebab-case.

    Examples:
        >>> camel_to_kebab("userSettings")
        'user-settings'
        >>> camel_to_kebab("HTTPCache")
        'http-cache'
        >>> camel_to_kebab("recent_files")
        'recent-files'
    """
    result = _ACRONYM_BOUNDARY.sub(r"\1-\2", name)
    result = _WORD_BOUNDARY.sub(r"\1-\2", result)
    return result.replace("_", "-").lower()
