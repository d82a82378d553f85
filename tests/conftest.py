"""
Pytest configuration and fixtures for nest tests.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator
from unittest.mock import patch

import pytest

from nest.cache.registry import CacheRegistry, clear_registry
from nest.config import NestConfig, clear_settings_cache, get_config, reset_config


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test outputs."""
    return tmp_path


@pytest.fixture
def storage_dir(temp_dir: Path) -> Path:
    """Provide an existing, empty cache storage directory."""
    path = temp_dir / "storage"
    path.mkdir()
    return path


@pytest.fixture
def config(storage_dir: Path) -> NestConfig:
    """Provide an isolated configuration pointing at storage_dir."""
    return NestConfig(storage_path=storage_dir)


@pytest.fixture
def registry() -> CacheRegistry:
    """Provide an empty registry, independent of the process-wide one."""
    return CacheRegistry()


@pytest.fixture
def mock_env_vars(temp_dir: Path) -> Generator[dict[str, str], None, None]:
    """Provide environment variables for Settings.

    Storage goes to a directory under temp_dir that does not exist yet.
    """
    env_vars = {
        "NEST_STORAGE_PATH": str(temp_dir / "env-storage"),
        "NEST_HASH_ALGORITHM": "md5",
        "NEST_FILE_MODE": "777",
        "LOG_LEVEL": "DEBUG",
    }

    with patch.dict(os.environ, env_vars, clear=False):
        clear_settings_cache()
        reset_config()
        yield env_vars


@pytest.fixture
def default_config(mock_env_vars: dict[str, str]) -> NestConfig:
    """Provide the process-wide configuration built from mock_env_vars."""
    return get_config()


@pytest.fixture(autouse=True)
def reset_process_state() -> Generator[None, None, None]:
    """Reset cached settings, configuration and registry around each test."""
    clear_settings_cache()
    reset_config()
    clear_registry()
    yield
    clear_settings_cache()
    reset_config()
    clear_registry()
