"""
Core Module - Trigger timing and utilities.

This module contains fundamental building blocks of the application loop:
- Zone trigger cooldown/repeat logic (trigger.py)
- Utility functions (utils.py)
"""

from .trigger import TriggerState, TriggerController, decide_trigger
from .utils import now_ms, select_camera_port, load_reference_image, frame_to_normalized

__all__ = [
    # Trigger
    'TriggerState',
    'TriggerController',
    'decide_trigger',
    # Utilities
    'now_ms',
    'select_camera_port',
    'load_reference_image',
    'frame_to_normalized',
]
