"""
Tests for name-based cache access.
"""

from __future__ import annotations

import pytest

from nest.cache.nest import Nest
from nest.cache.registry import CacheRegistry
from nest.config import NestConfig
from nest.facade import NOT_FOUND, Facade, dispatch


@pytest.fixture
def facade(config: NestConfig, registry: CacheRegistry) -> Facade:
    """Create a facade bound to the isolated config and registry."""
    return Facade(config, registry)


class TestFacade:
    """Tests for Facade.call()."""

    def test_name_without_key_returns_cache(self, facade: Facade) -> None:
        """Test that the camelCase name maps to a kebab-case cache."""
        cache = facade.call("userSettings")

        assert isinstance(cache, Nest)
        assert cache.get_name() == "user-settings"

    def test_same_name_returns_same_cache(self, facade: Facade) -> None:
        """Test that repeated calls reuse the registered instance."""
        assert facade.call("userSettings") is facade.call("userSettings")

    def test_get_existing_key(self, facade: Facade) -> None:
        """Test reading a cached value."""
        facade.call("userSettings").add("recent", ["a", "b"])

        assert facade.call("userSettings", "recent") == ["a", "b"]

    def test_set_existing_key_returns_cache(self, facade: Facade) -> None:
        """Test updating a cached value."""
        cache = facade.call("userSettings").add("theme", "dark")

        result = facade.call("userSettings", "theme", "light")

        assert result is cache
        assert cache.get("theme") == "light"
        assert cache.changed() == 2

    def test_missing_key_returns_not_found(self, facade: Facade) -> None:
        """Test the not-found marker."""
        result = facade.call("userSettings", "missing")

        assert result is NOT_FOUND
        assert not result

    def test_missing_key_with_value_does_not_insert(self, facade: Facade) -> None:
        """Test that the facade never adds keys."""
        assert facade.call("userSettings", "missing", "v") is NOT_FOUND
        assert not facade.call("userSettings").has("missing")

    def test_stored_false_distinct_from_not_found(self, facade: Facade) -> None:
        """Test that a stored False is returned as False."""
        facade.call("flags").add("enabled", False)

        result = facade.call("flags", "enabled")

        assert result is False
        assert result is not NOT_FOUND

    def test_set_none_value(self, facade: Facade) -> None:
        """Test that None is a value, not a missing argument."""
        cache = facade.call("flags").add("enabled", True)

        assert facade.call("flags", "enabled", None) is cache
        assert cache.get("enabled") is None

    def test_too_many_arguments(self, facade: Facade) -> None:
        """Test the argument limit."""
        with pytest.raises(TypeError):
            facade.call("flags", "a", "b", "c")

    def test_loads_written_cache(self, config: NestConfig) -> None:
        """Test that the facade reads caches written by another registry."""
        writer = Nest("user-settings", config=config, registry=CacheRegistry())
        writer.add("theme", "dark").write()

        facade = Facade(config, CacheRegistry())

        assert facade.call("userSettings", "theme") == "dark"


class TestDispatch:
    """Tests for dispatch()."""

    def test_dispatch(self, config: NestConfig, registry: CacheRegistry) -> None:
        """Test the function form with explicit config and registry."""
        cache = dispatch("recentFiles", config=config, registry=registry)
        cache.add("last", "a.txt")

        assert dispatch("recentFiles", "last", config=config, registry=registry) == "a.txt"
        assert dispatch("recentFiles", "nope", config=config, registry=registry) is NOT_FOUND

    def test_dispatch_process_wide(self, default_config: NestConfig) -> None:
        """Test dispatch with the process-wide configuration."""
        cache = dispatch("sharedCache")

        assert cache.get_path() == default_config.get_storage_path()
        assert dispatch("sharedCache") is cache

    def test_not_found_singleton(self) -> None:
        """Test the marker's identity and repr."""
        assert type(NOT_FOUND)() is NOT_FOUND
        assert repr(NOT_FOUND) == "NOT_FOUND"
