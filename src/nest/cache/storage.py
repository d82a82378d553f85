"""
Cache file I/O.

Each cache lives in ``<directory>/<hash>.json``: one JSON object mapping hashed
keys to formatted values. Files are recreated on every write (old file
removed first) and chmod'ed to the configured mode afterwards.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import orjson

from nest.exceptions import CacheFileError, CacheWriteError
from nest.logging import get_logger

logger = get_logger(__name__)

CACHE_FILE_EXTENSION = "json"


def cache_file_path(directory: Path | str, cache_hash: str) -> Path:
    """Return the file path for a cache hash inside ``directory``."""
    return Path(directory) / f"{cache_hash}.{CACHE_FILE_EXTENSION}"


def is_cache_file(path: Path) -> bool:
    """Check whether ``path`` is a regular file with the cache extension."""
    return path.suffix.lower() == f".{CACHE_FILE_EXTENSION}" and path.is_file()


def read_cache_file(file: Path) -> dict[str, Any]:
    """Read the raw key/value mapping stored in a cache file.

    A missing or unreadable file yields an empty mapping.

    Raises:
        CacheFileError: If the file exists but does not hold a JSON object.
    """
    if not file.is_file() or not os.access(file, os.R_OK):
        return {}

    try:
        with open(file, "rb") as f:
            data = orjson.loads(f.read())
    except OSError as e:
        logger.warning("Cache file could not be opened", file=str(file), error=str(e))
        return {}
    except orjson.JSONDecodeError as e:
        raise CacheFileError("Cache file is not valid JSON", {"file": str(file), "reason": str(e)}) from e

    if not isinstance(data, dict):
        raise CacheFileError(
            "Cache file does not contain an object",
            {"file": str(file), "reason": type(data).__name__},
        )
    return data


def write_cache_file(file: Path, data: dict[str, Any], mode: int) -> None:
    """Replace a cache file with ``data``.

    Raises:
        CacheWriteError: If the file cannot be removed, written or chmod'ed.
    """
    try:
        payload = orjson.dumps(data, option=orjson.OPT_INDENT_2)
    except orjson.JSONEncodeError as e:
        raise CacheWriteError("Cache data is not serializable", {"file": str(file), "error": str(e)}) from e

    try:
        if file.exists() and os.access(file, os.W_OK):
            file.unlink()
        with open(file, "wb") as f:
            f.write(payload)
        os.chmod(file, mode)
    except OSError as e:
        raise CacheWriteError("Cannot write cache file", {"file": str(file), "error": str(e)}) from e


def remove_cache_file(file: Path) -> bool:
    """Delete a single cache file.

    Returns:
        True if the file existed, was writable, and was deleted.
    """
    if not file.is_file() or not os.access(file, os.W_OK):
        return False

    try:
        file.unlink()
    except OSError as e:
        logger.warning("Cache file could not be deleted", file=str(file), error=str(e))
        return False
    return True


def remove_cache_files(directory: Path) -> bool:
    """Delete every cache file directly under ``directory`` (not recursive).

    Returns:
        True if the directory exists, False otherwise.
    """
    if not directory.is_dir():
        return False

    removed = 0
    for entry in directory.iterdir():
        if is_cache_file(entry) and remove_cache_file(entry):
            removed += 1

    logger.debug("Cache files removed", directory=str(directory), removed=removed)
    return True


def list_cache_files(directory: Path) -> list[Path]:
    """Return the cache files directly under ``directory``, sorted by name."""
    if not directory.is_dir():
        return []
    return sorted(entry for entry in directory.iterdir() if is_cache_file(entry))
