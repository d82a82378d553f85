"""
OrderedStore: dict-backed KeyValueMap.

Python dicts keep insertion order, so a plain dict is enough to give the
deterministic key order the cache file format relies on.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

import orjson

from nest.cache.base import KeyValueMap


class OrderedStore(KeyValueMap):
    """In-memory ordered key-value store."""

    def __init__(self, items: Mapping[str, Any] | Iterable[tuple[str, Any]] | None = None) -> None:
        self._data: dict[str, Any] = {}
        if items is not None:
            pairs = items.items() if isinstance(items, Mapping) else items
            for key, value in pairs:
                self.add(key, value)

    def add(self, key: str, value: Any) -> bool:
        if key in self._data:
            return False
        self._data[key] = value
        return True

    def set(self, key: str, value: Any) -> bool:
        if key not in self._data:
            return False
        self._data[key] = value
        return True

    def remove(self, key: str) -> bool:
        if key not in self._data:
            return False
        del self._data[key]
        return True

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def has(self, key: str) -> bool:
        return key in self._data

    def keys(self) -> list[str]:
        return list(self._data)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)

    def to_json(self) -> str:
        return orjson.dumps(self._data).decode("utf-8")

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"OrderedStore({len(self._data)} keys)"
