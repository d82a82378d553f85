"""
nest: a lightweight, file-backed key-value cache.

Each cache has a human-readable name, is addressed by a hash of that name,
and is stored as one JSON file in a configurable directory.
"""

__version__ = "1.0.0"

from nest.cache import (  # noqa: E402
    CacheRegistry,
    Nest,
    clear_registry,
    destroy,
    destroy_all,
    exists,
    get_registry,
)
from nest.config import (  # noqa: E402
    NestConfig,
    get_config,
    get_hash_algorithm,
    get_storage_path,
    reset_config,
    set_hash_algorithm,
    set_storage_path,
)
from nest.facade import NOT_FOUND, Facade, dispatch  # noqa: E402


def version() -> str:
    """Return the nest version."""
    return __version__


__all__ = [
    "__version__",
    "version",
    "Nest",
    "CacheRegistry",
    "get_registry",
    "clear_registry",
    "exists",
    "destroy",
    "destroy_all",
    "NestConfig",
    "get_config",
    "reset_config",
    "set_storage_path",
    "get_storage_path",
    "set_hash_algorithm",
    "get_hash_algorithm",
    "Facade",
    "dispatch",
    "NOT_FOUND",
]
