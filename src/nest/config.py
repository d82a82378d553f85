"""
Configuration management.

Two layers:
- Settings: environment/.env driven startup values (pydantic-settings).
- NestConfig: the process-wide defaults (storage path, hash algorithm) that
  caches consult at construction time. Setters validate and report failure
  with ``False`` instead of raising, leaving the previous value in effect.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from nest.exceptions import ConfigurationError
from nest.hashing import DEFAULT_HASH_ALGORITHM, is_supported
from nest.logging import get_logger

logger = get_logger(__name__)

DEFAULT_FILE_MODE = 0o777


class Settings(BaseSettings):
    """Settings loaded from environment variables.

    Optional:
        NEST_STORAGE_PATH: Default directory for cache files
        NEST_HASH_ALGORITHM: Default hashlib algorithm for names and keys
        NEST_FILE_MODE: Permission bits applied to written cache files (octal)
        LOG_LEVEL: Logging level
        LOG_FILE: Optional JSON Lines log file
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    NEST_STORAGE_PATH: Path = Field(
        default=Path(".nest"), description="Default cache storage directory"
    )
    NEST_HASH_ALGORITHM: str = Field(
        default=DEFAULT_HASH_ALGORITHM,
        description="Default hash algorithm for cache names and keys",
    )
    NEST_FILE_MODE: int = Field(
        default=DEFAULT_FILE_MODE,
        ge=0,
        le=0o7777,
        description="Permission bits for written cache files",
    )

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    LOG_FILE: Path | None = Field(default=None, description="JSON Lines log file")

    @field_validator("NEST_HASH_ALGORITHM")
    @classmethod
    def validate_hash_algorithm(cls, v: str) -> str:
        """Reject algorithms hashlib cannot provide."""
        if not is_supported(v):
            raise ValueError(f"Unsupported hash algorithm: {v}")
        return v

    @field_validator("NEST_FILE_MODE", mode="before")
    @classmethod
    def parse_file_mode(cls, v: Any) -> Any:
        """Read string modes as octal ("777", "0o644")."""
        if isinstance(v, str):
            try:
                return int(v.strip(), 8)
            except ValueError as e:
                raise ValueError(f"File mode must be octal, got {v!r}") from e
        return v

    def ensure_directories(self) -> None:
        """Create the storage directory if it doesn't exist."""
        self.NEST_STORAGE_PATH.mkdir(parents=True, exist_ok=True)

    def display(self) -> dict[str, str | None]:
        """Return settings as display strings."""
        return {
            "NEST_STORAGE_PATH": str(self.NEST_STORAGE_PATH),
            "NEST_HASH_ALGORITHM": self.NEST_HASH_ALGORITHM,
            "NEST_FILE_MODE": oct(self.NEST_FILE_MODE),
            "LOG_LEVEL": self.LOG_LEVEL,
            "LOG_FILE": str(self.LOG_FILE) if self.LOG_FILE else None,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Raises:
        ValidationError: If settings are invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()


class NestConfig:
    """Process-wide cache defaults.

    Holds the storage directory used when a cache is created without an
    explicit path, the hash algorithm used when none is given, and the file
    mode applied after each write.
    """

    def __init__(
        self,
        storage_path: Path | str | None = None,
        hash_algorithm: str = DEFAULT_HASH_ALGORITHM,
        file_mode: int = DEFAULT_FILE_MODE,
    ) -> None:
        """Initialize the configuration.

        Args:
            storage_path: Existing directory for cache files.
            hash_algorithm: Supported hashlib algorithm name.
            file_mode: Permission bits applied to written cache files.

        Raises:
            ConfigurationError: If the path is missing or the algorithm unsupported.
        """
        self._storage_path: Path | None = None
        self._hash_algorithm = DEFAULT_HASH_ALGORITHM
        self.file_mode = file_mode

        if storage_path is not None and not self.set_storage_path(storage_path):
            raise ConfigurationError(
                "Storage path does not exist", {"path": str(storage_path)}
            )
        if not self.set_hash_algorithm(hash_algorithm):
            raise ConfigurationError(
                "Unsupported hash algorithm", {"algorithm": hash_algorithm}
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> NestConfig:
        """Build a configuration from settings, creating the storage directory.

        Raises:
            ConfigurationError: If the storage directory cannot be created.
        """
        try:
            settings.ensure_directories()
        except OSError as e:
            raise ConfigurationError(
                "Cannot create storage directory",
                {"path": str(settings.NEST_STORAGE_PATH), "error": str(e)},
            ) from e

        return cls(
            storage_path=settings.NEST_STORAGE_PATH,
            hash_algorithm=settings.NEST_HASH_ALGORITHM,
            file_mode=settings.NEST_FILE_MODE,
        )

    def set_storage_path(self, path: Path | str) -> bool:
        """Set the default storage directory.

        Returns:
            True if the path exists and was applied, False otherwise.
        """
        candidate = Path(path)
        if not candidate.exists():
            logger.warning("Storage path does not exist", path=str(candidate))
            return False

        self._storage_path = candidate
        return True

    def get_storage_path(self) -> Path | None:
        return self._storage_path

    def set_hash_algorithm(self, algorithm: str) -> bool:
        """Set the default hash algorithm.

        Returns:
            True if the algorithm is supported and was applied, False otherwise.
        """
        if not is_supported(algorithm):
            logger.warning("Unsupported hash algorithm", algorithm=algorithm)
            return False

        self._hash_algorithm = algorithm
        return True

    def get_hash_algorithm(self) -> str:
        return self._hash_algorithm

    def __repr__(self) -> str:
        return (
            f"NestConfig(storage_path={self._storage_path!r}, "
            f"hash_algorithm={self._hash_algorithm!r}, file_mode={oct(self.file_mode)})"
        )


@lru_cache
def get_config() -> NestConfig:
    """Get the process-wide configuration, built from settings on first use."""
    return NestConfig.from_settings(get_settings())


def reset_config() -> None:
    """Drop the process-wide configuration (useful for testing)."""
    get_config.cache_clear()


def set_storage_path(path: Path | str) -> bool:
    """Set the default storage directory of the process-wide configuration."""
    return get_config().set_storage_path(path)


def get_storage_path() -> Path | None:
    """Return the default storage directory of the process-wide configuration."""
    return get_config().get_storage_path()


def set_hash_algorithm(algorithm: str) -> bool:
    """Set the default hash algorithm of the process-wide configuration."""
    return get_config().set_hash_algorithm(algorithm)


def get_hash_algorithm() -> str:
    """Return the default hash algorithm of the process-wide configuration."""
    return get_config().get_hash_algorithm()
