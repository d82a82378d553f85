"""
Base interface for the key-value map a cache keeps in memory.

KeyValueMap is the contract the Nest cache relies on:
- add/set/remove report whether they changed anything
- keys() keeps insertion order so snapshots serialize deterministically
- to_dict()/to_json() return full snapshots
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterator


class KeyValueMap(ABC):
    """Abstract ordered mapping from string keys to values."""

    @abstractmethod
    def add(self, key: str, value: Any) -> bool:
        """Insert a key that is not present yet. Existing keys are left untouched."""
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> bool:
        """Overwrite the value of an existing key."""
        ...

    @abstractmethod
    def remove(self, key: str) -> bool:
        """Delete a key."""
        ...

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for a key, or ``default`` when absent."""
        ...

    @abstractmethod
    def has(self, key: str) -> bool:
        """Check if a key exists."""
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        """Return keys in insertion order."""
        ...

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        """Return a snapshot of the whole mapping."""
        ...

    @abstractmethod
    def to_json(self) -> str:
        """Return the snapshot as JSON text."""
        ...

    def __len__(self) -> int:
        return len(self.keys())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())
