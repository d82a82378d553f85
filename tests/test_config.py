"""
Tests for configuration module.
"""

from __future__ import annotations

import hashlib
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from nest.cache.nest import Nest, context
from nest.cache.registry import CacheRegistry
from nest.config import (
    NestConfig,
    Settings,
    get_config,
    get_hash_algorithm,
    get_settings,
    get_storage_path,
    reset_config,
    set_hash_algorithm,
    set_storage_path,
)
from nest.exceptions import ConfigurationError


class TestSettings:
    """Tests for environment settings."""

    def test_settings_loads_from_env(self, mock_env_vars: dict[str, str]) -> None:
        """Test that settings correctly loads from environment variables."""
        settings = get_settings()

        assert settings.NEST_STORAGE_PATH == Path(mock_env_vars["NEST_STORAGE_PATH"])
        assert settings.NEST_HASH_ALGORITHM == "md5"
        assert settings.NEST_FILE_MODE == 0o777
        assert settings.LOG_LEVEL == "DEBUG"

    def test_defaults(self) -> None:
        """Test defaults when nothing is configured."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.NEST_STORAGE_PATH == Path(".nest")
        assert settings.NEST_HASH_ALGORITHM == "md5"
        assert settings.NEST_FILE_MODE == 0o777
        assert settings.LOG_FILE is None

    def test_invalid_hash_algorithm_rejected(self) -> None:
        """Test that an unknown algorithm fails validation."""
        with patch.dict(os.environ, {"NEST_HASH_ALGORITHM": "not-a-real-algo"}):
            with pytest.raises(ValidationError) as exc_info:
                Settings(_env_file=None)

        assert "hash algorithm" in str(exc_info.value).lower()

    def test_file_mode_parsed_as_octal(self) -> None:
        """Test that string file modes are octal."""
        with patch.dict(os.environ, {"NEST_FILE_MODE": "0o644"}):
            assert Settings(_env_file=None).NEST_FILE_MODE == 0o644
        with patch.dict(os.environ, {"NEST_FILE_MODE": "600"}):
            assert Settings(_env_file=None).NEST_FILE_MODE == 0o600

    def test_invalid_file_mode_rejected(self) -> None:
        """Test that non-octal file modes fail validation."""
        with patch.dict(os.environ, {"NEST_FILE_MODE": "rwx"}):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)

    def test_ensure_directories(self, temp_dir: Path) -> None:
        """Test that the storage directory is created."""
        target = temp_dir / "a" / "b"
        settings = Settings(_env_file=None, NEST_STORAGE_PATH=target)
        settings.ensure_directories()

        assert target.is_dir()

    def test_display(self, mock_env_vars: dict[str, str]) -> None:
        """Test display values."""
        display = get_settings().display()

        assert display["NEST_FILE_MODE"] == "0o777"
        assert display["LOG_FILE"] is None


class TestNestConfig:
    """Tests for the process-wide configuration object."""

    def test_set_storage_path_existing_directory(
        self, config: NestConfig, temp_dir: Path
    ) -> None:
        """Test that an existing directory becomes the default path."""
        other = temp_dir / "cachetest"
        other.mkdir()

        assert config.set_storage_path(other) is True
        assert config.get_storage_path() == other

    def test_set_storage_path_missing_directory_keeps_previous(
        self, config: NestConfig, storage_dir: Path
    ) -> None:
        """Test that a missing path is rejected and the old path remains."""
        assert config.set_storage_path("/does/not/exist") is False
        assert config.get_storage_path() == storage_dir

    def test_set_hash_algorithm(self, config: NestConfig) -> None:
        """Test switching to sha256."""
        assert config.set_hash_algorithm("sha256") is True
        assert config.get_hash_algorithm() == "sha256"

    def test_set_hash_algorithm_invalid_keeps_previous(self, config: NestConfig) -> None:
        """Test that an unknown algorithm is rejected."""
        assert config.set_hash_algorithm("not-a-real-algo") is False
        assert config.get_hash_algorithm() == "md5"

    def test_setters_apply_to_new_caches(
        self, config: NestConfig, registry: CacheRegistry, temp_dir: Path
    ) -> None:
        """Test that caches created after the setters use the new defaults."""
        other = temp_dir / "cachetest"
        other.mkdir()

        assert config.set_storage_path(other) is True
        assert config.set_hash_algorithm("sha256") is True
        cache = Nest("x", config=config, registry=registry)

        assert cache.get_path() == other
        assert cache.get_hash() == hashlib.sha256(b"x").hexdigest()
        assert cache.get_file() == other / f"{hashlib.sha256(b'x').hexdigest()}.json"

    def test_setters_apply_to_context_lookups(
        self, config: NestConfig, registry: CacheRegistry, temp_dir: Path
    ) -> None:
        """Test that name-based lookups follow the new defaults."""
        before = context("x", config=config, registry=registry)
        other = temp_dir / "cachetest"
        other.mkdir()

        config.set_storage_path(other)
        config.set_hash_algorithm("sha256")
        after = context("x", config=config, registry=registry)

        assert after is not before
        assert after.get_path() == other
        assert after.get_hash() == hashlib.sha256(b"x").hexdigest()
        assert before.get_hash() == hashlib.md5(b"x").hexdigest()

    def test_constructor_rejects_missing_path(self, temp_dir: Path) -> None:
        """Test that construction fails for a path that doesn't exist."""
        with pytest.raises(ConfigurationError):
            NestConfig(storage_path=temp_dir / "missing")

    def test_constructor_rejects_bad_algorithm(self) -> None:
        """Test that construction fails for an unknown algorithm."""
        with pytest.raises(ConfigurationError):
            NestConfig(hash_algorithm="not-a-real-algo")

    def test_no_storage_path_by_default(self) -> None:
        """Test that a bare config has no storage path."""
        assert NestConfig().get_storage_path() is None

    def test_from_settings_creates_directory(self, mock_env_vars: dict[str, str]) -> None:
        """Test that the configured directory is created."""
        config = NestConfig.from_settings(get_settings())

        assert config.get_storage_path() == Path(mock_env_vars["NEST_STORAGE_PATH"])
        assert config.get_storage_path().is_dir()
        assert config.file_mode == 0o777

    def test_from_settings_unwritable_location(self, temp_dir: Path) -> None:
        """Test that a directory that cannot be created raises ConfigurationError."""
        blocker = temp_dir / "blocker"
        blocker.write_text("not a directory")
        settings = Settings(_env_file=None, NEST_STORAGE_PATH=blocker / "storage")

        with pytest.raises(ConfigurationError):
            NestConfig.from_settings(settings)


class TestProcessWideConfig:
    """Tests for the module-level configuration helpers."""

    def test_get_config_is_cached(self, mock_env_vars: dict[str, str]) -> None:
        """Test that get_config returns a singleton until reset."""
        first = get_config()
        assert get_config() is first

        reset_config()
        assert get_config() is not first

    def test_module_helpers(self, default_config: NestConfig, temp_dir: Path) -> None:
        """Test the setters/getters that act on the default config."""
        target = temp_dir / "cachetest"
        target.mkdir()

        assert set_storage_path(target) is True
        assert get_storage_path() == target
        assert set_storage_path(temp_dir / "nope") is False
        assert get_storage_path() == target

        assert set_hash_algorithm("sha256") is True
        assert get_hash_algorithm() == "sha256"
        assert set_hash_algorithm("not-a-real-algo") is False
        assert get_hash_algorithm() == "sha256"
