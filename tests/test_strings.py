"""
Tests for string helpers.
"""

from __future__ import annotations

import pytest

from nest.utils.strings import camel_to_kebab


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("settings", "settings"),
        ("userSettings", "user-settings"),
        ("UserSettings", "user-settings"),
        ("HTTPCache", "http-cache"),
        ("recentFilesV2", "recent-files-v2"),
        ("recent_files", "recent-files"),
        ("already-kebab", "already-kebab"),
    ],
)
def test_camel_to_kebab(name: str, expected: str) -> None:
    """Test camelCase and snake_case conversion to kebab-case."""
    assert camel_to_kebab(name) == expected
