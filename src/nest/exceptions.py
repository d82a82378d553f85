"""
Custom exception hierarchy for nest.

All exceptions inherit from NestError, which carries optional structured
context for logging. Most of the public surface reports failure through
boolean results; these exceptions cover the cases where silently continuing
would lose data.
"""

from __future__ import annotations

from typing import Any


class NestError(Exception):
    """Base exception for all nest errors.

    Attributes:
        message: Human-readable error message.
        context: Optional structured context for logging/debugging.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class ConfigurationError(NestError):
    """Raised when settings cannot be turned into a usable configuration.

    Examples:
        - Storage directory cannot be created
        - Hash algorithm not available on this interpreter
    """

    pass


class CacheFileError(NestError):
    """Raised when a cache file exists but cannot be read or parsed.

    Context should include:
        - file: Path of the cache file
        - reason: What went wrong
    """

    pass


class CacheWriteError(NestError):
    """Raised when a cache file cannot be written to disk.

    Context should include:
        - file: Path of the cache file
        - name: Cache name
    """

    pass


class ValueFormatError(NestError):
    """Raised when a structured value cannot be encoded for storage."""

    pass
