"""Geodata provider implementations."""

# Providers register themselves on import
from . import memory  # noqa: F401
from . import postgis  # noqa: F401

__all__ = ["memory", "postgis"]
