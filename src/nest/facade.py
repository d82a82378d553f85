"""
Name-based access to caches.

A method-style name such as ``userSettings`` resolves to the cache named
``user-settings``. With a key the call reads that key; with a key and a value
it updates the key. Unknown keys give NOT_FOUND, which is falsy but distinct
from every value a cache can hold.
"""

from __future__ import annotations

from typing import Any

from nest.cache.nest import Nest, context
from nest.cache.registry import CacheRegistry
from nest.config import NestConfig
from nest.utils.strings import camel_to_kebab


class _NotFound:
    """Marker for a key the cache does not hold."""

    _instance: _NotFound | None = None

    def __new__(cls) -> _NotFound:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND = _NotFound()
_UNSET: Any = object()


class Facade:
    """Dispatches method-style names to caches.

    ``config`` and ``registry`` default to the process-wide ones, looked up on
    every call so that resetting them takes effect immediately.
    """

    def __init__(
        self,
        config: NestConfig | None = None,
        registry: CacheRegistry | None = None,
    ) -> None:
        self.config = config
        self.registry = registry

    def resolve(self, method_name: str) -> Nest:
        """Return the cache addressed by ``method_name``, creating it if needed."""
        return context(camel_to_kebab(method_name), config=self.config, registry=self.registry)

    def call(self, method_name: str, *args: Any) -> Any:
        """Dispatch ``method_name(key?, value?)``.

        Returns:
            The Nest when no key is given or after an update, the decoded value
            for a read, or NOT_FOUND when the key is not cached.

        Raises:
            TypeError: If more than two arguments are given.
        """
        if len(args) > 2:
            raise TypeError(f"{method_name}() takes at most 2 arguments ({len(args)} given)")

        key = args[0] if args else _UNSET
        value = args[1] if len(args) > 1 else _UNSET
        return self._dispatch(method_name, key, value)

    def _dispatch(self, method_name: str, key: Any, value: Any) -> Any:
        cache = self.resolve(method_name)
        if key is _UNSET:
            return cache
        if not cache.has(key):
            return NOT_FOUND
        if value is _UNSET:
            return cache.get(key)
        return cache.set(key, value)


def dispatch(
    method_name: str,
    key: Any = _UNSET,
    value: Any = _UNSET,
    *,
    config: NestConfig | None = None,
    registry: CacheRegistry | None = None,
) -> Any:
    """Dispatch a method-style name through a Facade."""
    return Facade(config, registry)._dispatch(method_name, key, value)
