"""Digest helpers used for cache names and cache keys."""

from __future__ import annotations

import hashlib
from functools import lru_cache

DEFAULT_HASH_ALGORITHM = "md5"


@lru_cache
def supported_algorithms() -> frozenset[str]:
    """Return the hashlib algorithms that produce a fixed-length hex digest.

    ``hashlib.algorithms_available`` can list names the linked OpenSSL refuses
    to construct, so each one is tried once. The variable-length ``shake_*``
    family is excluded because ``hexdigest()`` needs a length argument.
    """
    names: set[str] = set()
    for name in hashlib.algorithms_available:
        if name.lower().startswith("shake_"):
            continue
        try:
            hashlib.new(name)
        except ValueError:
            continue
        names.add(name)
    return frozenset(names)


def is_supported(algorithm: str) -> bool:
    """Check whether ``algorithm`` can be used for cache hashing."""
    return algorithm in supported_algorithms()


def digest(text: str, algorithm: str = DEFAULT_HASH_ALGORITHM) -> str:
    """Hex digest of ``text`` (UTF-8) under ``algorithm``.

    Raises:
        ValueError: If the algorithm is unknown to hashlib.
    """
    return hashlib.new(algorithm, text.encode("utf-8")).hexdigest()
