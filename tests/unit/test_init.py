r"""Unit tests for package initialization and metadata."""

from __future__ import annotations

import keystonenet


def test_package_version_is_string() -> None:
    """Test that __version__ is a non-empty string."""
    assert isinstance(keystonenet.__version__, str)
    assert "." in keystonenet.__version__


def test_all_exports_defined() -> None:
    """Test that all items in __all__ are defined in the module."""
    for name in keystonenet.__all__:
        assert hasattr(keystonenet, name), f"{name} is in __all__ but not defined in module"
