"""
Mapping Module - Painting packs and zone lookup.

This module provides:
- Zone roles, zones and painting packs with JSON persistence (painting_pack.py)
- First-match zone lookup (zones.py)
"""

from .painting_pack import (
    ZoneRole,
    Zone,
    PaintingPack,
    OBRA_BOSS,
    load_painting_pack,
    save_painting_pack,
)
from .zones import find_zone

__all__ = [
    'ZoneRole',
    'Zone',
    'PaintingPack',
    'OBRA_BOSS',
    'load_painting_pack',
    'save_painting_pack',
    'find_zone',
]
