"""Geodata providers for Vote Finder.

A provider answers the spatial questions a search needs: which district
contains a point, the nearest voting place of a kind, and all places within
a distance.
"""

from .base import GeodataProvider, check_order_by
from .registry import GeodataProviderRegistry

__all__ = [
    "GeodataProvider",
    "GeodataProviderRegistry",
    "check_order_by",
]
