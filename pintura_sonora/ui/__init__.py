"""
UI Module - Overlay rendering and camera setup.

This module provides:
- Camera setup and configuration
- Overlay rendering (reticle, painting outline, calibration taps, status text)
"""

from .display import (
    reference_outline,
    draw_outline,
    draw_calibration_taps,
    draw_lock_overlay,
    setup_camera,
)

__all__ = [
    'reference_outline',
    'draw_outline',
    'draw_calibration_taps',
    'draw_lock_overlay',
    'setup_camera',
]
