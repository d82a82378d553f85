"""Utility modules for nest."""

from nest.utils.strings import camel_to_kebab

__all__ = ["camel_to_kebab"]
