"""
Nest: a named, file-backed key-value cache.

A Nest is identified by its name, stored under the hash of that name, and
persisted as a single JSON file. Keys are hashed before they reach the store
or the file, so the original key text is never persisted. Mutations are
counted and only ``write()`` touches the disk.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

from nest.cache.base import KeyValueMap
from nest.cache.codec import format_value, parse_value, same_value
from nest.cache.registry import CacheRegistry, get_registry
from nest.cache.storage import (
    cache_file_path,
    read_cache_file,
    remove_cache_file,
    remove_cache_files,
    write_cache_file,
)
from nest.cache.store import OrderedStore
from nest.config import NestConfig, get_config
from nest.exceptions import CacheFileError, CacheWriteError, ConfigurationError
from nest.hashing import digest, is_supported
from nest.logging import get_logger, log_context

logger = get_logger(__name__)

_MISSING = object()


class Nest:
    """A named cache backed by one file in a storage directory.

    Construction loads the cache: from the registered instance if one exists
    for the same hash, otherwise from disk (a missing or corrupt file gives an
    empty cache), in which case this instance becomes the registered one.
    """

    def __init__(
        self,
        name: str,
        path: Path | str | None = None,
        algorithm: str | None = None,
        *,
        config: NestConfig | None = None,
        registry: CacheRegistry | None = None,
    ) -> None:
        """Create or load a cache.

        Args:
            name: Logical cache name.
            path: Storage directory; defaults to the configured storage path.
            algorithm: Hash algorithm for the name and keys; defaults to the
                configured algorithm at construction time.
            config: Configuration to read defaults from.
            registry: Registry to deduplicate against.

        Raises:
            ConfigurationError: If ``algorithm`` is not supported.
        """
        self._config = config if config is not None else get_config()
        self._registry = registry if registry is not None else get_registry()

        if algorithm is not None and not is_supported(algorithm):
            raise ConfigurationError("Unsupported hash algorithm", {"algorithm": algorithm})

        self._name = name
        self._algorithm = algorithm or self._config.get_hash_algorithm()
        self._hash = digest(name, self._algorithm)
        self._path = Path(path) if path is not None else self._config.get_storage_path()
        self._store: KeyValueMap = OrderedStore()
        self._changes = 0
        self._write_lock = threading.Lock()

        self._load()

    def _load(self) -> None:
        with log_context(cache=self._name, operation="load"), self._registry.lock:
            canonical = self._registry.get(self._hash)
            if canonical is None:
                data = self._read()
                self._registry.register(self)
                source = "file" if data else "empty"
            else:
                data = canonical.to_dict()
                source = "registry"

            for key, value in data.items():
                self._store.add(key, value)

        logger.debug("Cache loaded", name=self._name, hash=self._hash, source=source, entries=len(self._store))

    def _read(self) -> dict[str, Any]:
        file = self.get_file()
        if file is None:
            return {}
        try:
            return read_cache_file(file)
        except CacheFileError as e:
            logger.warning("Ignoring unreadable cache file", file=str(file), error=str(e))
            return {}

    def _key(self, key: str) -> str:
        return digest(key, self._algorithm)

    def _touch(self) -> None:
        self._changes += 1

    def add(self, key: str, value: Any) -> Nest:
        """Add a key that is not cached yet. Existing keys are left untouched."""
        hashed = self._key(key)
        if not self._store.has(hashed):
            self._store.add(hashed, format_value(value))
            self._touch()
        return self

    def set(self, key: str, value: Any) -> Nest:
        """Update an existing key. Missing keys and unchanged values are ignored."""
        hashed = self._key(key)
        if self._store.has(hashed) and not same_value(self._store.get(hashed), value):
            self._store.set(hashed, format_value(value))
            self._touch()
        return self

    def remove(self, key: str) -> Nest:
        hashed = self._key(key)
        if self._store.remove(hashed):
            self._touch()
        return self

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value, decoding structured values.

        Args:
            key: Cache key.
            default: Returned when the key is not cached.
        """
        raw = self._store.get(self._key(key), _MISSING)
        if raw is _MISSING:
            return default
        return parse_value(raw)

    def has(self, key: str) -> bool:
        return self._store.has(self._key(key))

    def write(self) -> Nest:
        """Persist the cache if it has pending changes.

        The change counter is not reset, so every later call rewrites the file.

        Raises:
            CacheWriteError: If there is no storage path or the file cannot be written.
        """
        if not self.is_changed():
            return self

        file = self.get_file()
        if file is None:
            raise CacheWriteError("No storage path configured", {"name": self._name})

        with self._write_lock, log_context(cache=self._name, operation="write"):
            write_cache_file(file, self._store.to_dict(), self._config.file_mode)
            logger.debug("Cache written", file=str(file), entries=len(self._store), changes=self._changes)

        return self

    def get_name(self) -> str:
        return self._name

    def get_hash(self) -> str:
        return self._hash

    def get_path(self) -> Path | None:
        return self._path

    def get_algorithm(self) -> str:
        return self._algorithm

    def get_file(self) -> Path | None:
        """Return the backing file path, or None without a storage path."""
        if self._path is None:
            return None
        return cache_file_path(self._path, self._hash)

    def count(self) -> int:
        return len(self._store.keys())

    def to_dict(self) -> dict[str, Any]:
        """Snapshot of the raw store (hashed keys, formatted values)."""
        return self._store.to_dict()

    def to_json(self) -> str:
        return self._store.to_json()

    def is_changed(self) -> bool:
        return self._changes > 0

    def changed(self) -> int:
        """Number of applied mutations since the cache was loaded."""
        return self._changes

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def __repr__(self) -> str:
        return f"Nest(name={self._name!r}, hash={self._hash!r}, entries={self.count()}, changes={self._changes})"


def _defaults(
    config: NestConfig | None, registry: CacheRegistry | None
) -> tuple[NestConfig, CacheRegistry]:
    return (
        config if config is not None else get_config(),
        registry if registry is not None else get_registry(),
    )


def exists(
    name: str,
    *,
    config: NestConfig | None = None,
    registry: CacheRegistry | None = None,
) -> bool:
    """Check whether a cache for ``name`` is registered (default algorithm)."""
    config, registry = _defaults(config, registry)
    return digest(name, config.get_hash_algorithm()) in registry


def context(
    name: str,
    *,
    config: NestConfig | None = None,
    registry: CacheRegistry | None = None,
) -> Nest:
    """Return the registered cache for ``name`` or load a new one at the default path."""
    config, registry = _defaults(config, registry)
    with registry.lock:
        instance = registry.get(digest(name, config.get_hash_algorithm()))
        if instance is not None:
            return instance
        return Nest(name, config.get_storage_path(), config=config, registry=registry)


def destroy(
    name: str,
    path: Path | str | None = None,
    algorithm: str | None = None,
    *,
    config: NestConfig | None = None,
    registry: CacheRegistry | None = None,
) -> bool:
    """Delete the file of a cache and evict it from the registry.

    Returns:
        True if a file was deleted.
    """
    config, registry = _defaults(config, registry)
    directory = Path(path) if path is not None else config.get_storage_path()
    algorithm = algorithm or config.get_hash_algorithm()
    if directory is None or not is_supported(algorithm):
        return False

    cache_hash = digest(name, algorithm)
    with log_context(cache=name, operation="destroy"):
        removed = remove_cache_file(cache_file_path(directory, cache_hash))
        registry.evict(cache_hash, directory)
        logger.debug("Cache destroyed", hash=cache_hash, removed=removed)
    return removed


def destroy_all(
    path: Path | str | None = None,
    *,
    config: NestConfig | None = None,
    registry: CacheRegistry | None = None,
) -> bool:
    """Delete every cache file in a directory and evict caches stored there.

    Returns:
        True if the directory exists.
    """
    config, registry = _defaults(config, registry)
    directory = Path(path) if path is not None else config.get_storage_path()
    if directory is None:
        return False

    with log_context(operation="destroy_all"):
        existed = remove_cache_files(directory)
        if existed:
            evicted = registry.evict_directory(directory)
            logger.debug("Registry entries evicted", directory=str(directory), evicted=evicted)
    return existed
