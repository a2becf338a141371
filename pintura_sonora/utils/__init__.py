"""
Utils Module - Small value types shared across the package.
"""

from .coords import Point, clamp

__all__ = [
    'Point',
    'clamp',
]
