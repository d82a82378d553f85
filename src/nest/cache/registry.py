"""
Registry of live cache instances.

Maps a cache hash to the canonical in-memory Nest for that hash, so that a
process holds at most one authoritative copy per cache name. The registry is
an ordinary object: tests create their own, production code shares the one
returned by get_registry().
"""

from __future__ import annotations

import threading
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Iterator

from nest.logging import get_logger

if TYPE_CHECKING:
    from nest.cache.nest import Nest

logger = get_logger(__name__)


def _same_directory(a: Path | None, b: Path | None) -> bool:
    if a is None or b is None:
        return a is b
    return a.resolve() == b.resolve()


class CacheRegistry:
    """Hash-keyed registry of canonical cache instances.

    Lookup-or-insert sequences must hold ``lock``; it is re-entrant so a
    caller can hold it while constructing a Nest that registers itself.
    """

    def __init__(self) -> None:
        self._instances: dict[str, Nest] = {}
        self.lock = threading.RLock()

    def get(self, cache_hash: str) -> Nest | None:
        return self._instances.get(cache_hash)

    def register(self, instance: Nest) -> Nest:
        """Register an instance unless its hash is already taken.

        Returns:
            The canonical instance for the hash (the existing one if present).
        """
        with self.lock:
            return self._instances.setdefault(instance.get_hash(), instance)

    def evict(self, cache_hash: str, directory: Path | None = None) -> Nest | None:
        """Remove the instance registered under a hash.

        Args:
            cache_hash: Hash to evict.
            directory: When given, only evict if the instance lives there.

        Returns:
            The evicted instance, or None.
        """
        with self.lock:
            instance = self._instances.get(cache_hash)
            if instance is None:
                return None
            if directory is not None and not _same_directory(instance.get_path(), directory):
                return None
            del self._instances[cache_hash]

        logger.debug("Cache evicted from registry", hash=cache_hash, name=instance.get_name())
        return instance

    def evict_directory(self, directory: Path) -> int:
        """Evict every instance whose storage path is ``directory``."""
        with self.lock:
            hashes = [
                cache_hash
                for cache_hash, instance in self._instances.items()
                if _same_directory(instance.get_path(), directory)
            ]
            for cache_hash in hashes:
                del self._instances[cache_hash]
        return len(hashes)

    def clear(self) -> None:
        with self.lock:
            self._instances.clear()

    def hashes(self) -> list[str]:
        return list(self._instances)

    def __contains__(self, cache_hash: object) -> bool:
        return cache_hash in self._instances

    def __len__(self) -> int:
        return len(self._instances)

    def __iter__(self) -> Iterator[Nest]:
        return iter(list(self._instances.values()))


@lru_cache
def get_registry() -> CacheRegistry:
    """Get the process-wide registry."""
    return CacheRegistry()


def clear_registry() -> None:
    """Forget every instance in the process-wide registry."""
    get_registry().clear()
