"""
Audio Module - Sample playback for zone roles.

This module provides:
- Role to sample dispatch and playback (audio.py)
- Background audio worker thread (worker.py)
"""

from .audio import ROLE_SOUNDS, RoleSoundPlayer, select_audio_backend
from .worker import AudioCommand, AudioWorker

__all__ = [
    'ROLE_SOUNDS',
    'RoleSoundPlayer',
    'select_audio_backend',
    'AudioCommand',
    'AudioWorker',
]
