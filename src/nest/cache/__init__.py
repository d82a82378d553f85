"""
Cache package.

- base.py: KeyValueMap, the in-memory map contract
- store.py: OrderedStore, the dict-backed implementation
- codec.py: formatting of structured values
- storage.py: cache file I/O
- registry.py: CacheRegistry of canonical instances
- nest.py: the Nest cache and the destroy/exists helpers
"""

from nest.cache.base import KeyValueMap
from nest.cache.nest import Nest, context, destroy, destroy_all, exists
from nest.cache.registry import CacheRegistry, clear_registry, get_registry
from nest.cache.store import OrderedStore

__all__ = [
    "KeyValueMap",
    "OrderedStore",
    "CacheRegistry",
    "get_registry",
    "clear_registry",
    "Nest",
    "context",
    "exists",
    "destroy",
    "destroy_all",
]
