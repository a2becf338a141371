"""
Audio playback for zone roles.

Each zone role maps to one or more named samples (pad, epiano, click) of the
painting pack. Playback uses pyglet when it can be initialized and falls back
to pygame, which works on headless systems without X11.
"""

import logging
import os
from typing import Dict, Mapping, Optional, Tuple

from pintura_sonora.config import AudioConfig
from pintura_sonora.mapping.painting_pack import ZoneRole

logger = logging.getLogger(__name__)


ROLE_SOUNDS: Dict[ZoneRole, Tuple[str, ...]] = {
    ZoneRole.PAD: ("pad",),
    ZoneRole.EPIANO: ("epiano",),
    ZoneRole.PATTERN_MELODY: ("epiano",),
    ZoneRole.PERC: ("click",),
    ZoneRole.PATTERN_RHYTHM: ("click",),
    ZoneRole.ACCENT: ("click", "epiano"),
    ZoneRole.MACRO: ("pad",),
}
""" Samples played for each zone role """


def select_audio_backend() -> Optional[str]:
    """
    Pick the first audio backend that initializes.

    Returns:
        str or None: 'pyglet', 'pygame' or None when no backend is available
    """
    try:
        import pyglet.media  # noqa: F401
        logger.info("Audio backend: pyglet")
        return "pyglet"
    except Exception as e:
        logger.warning(f"Failed to initialize pyglet: {e}")

    try:
        import pygame
        pygame.mixer.pre_init(frequency=22050, size=-16, channels=2, buffer=512)
        pygame.mixer.init()
        logger.info("Audio backend: pygame (headless compatible)")
        return "pygame"
    except Exception as e:
        logger.error(f"Failed to initialize pygame: {e}")

    logger.error("No audio backend available! Audio will not work.")
    return None


class RoleSoundPlayer:
    """
    Plays the samples associated with a zone role.

    Missing sample files are skipped with a warning, so a pack without sounds
    still runs silently.
    """

    def __init__(self, sounds: Mapping[str, str], volume: float = AudioConfig.MASTER_VOLUME,
                 backend: Optional[str] = "auto") -> None:
        """
        Initialize the player.

        Args:
            sounds (dict): Sample file path per sound name
            volume (float): Playback volume between 0.0 and 1.0
            backend (str): 'pyglet', 'pygame', None for silent, or 'auto' to probe
        """
        self.backend = select_audio_backend() if backend == "auto" else backend
        self.volume = volume
        self.sound_files = {}
        self.players = []

        if self.backend is None:
            logger.warning("No audio backend - role sounds disabled")
            return

        for name, path in sounds.items():
            if not os.path.exists(path):
                logger.warning(f"Audio file not found: {path}")
                continue
            self.sound_files[name] = self._load(path)

        logger.info(f"Initialized role sound player ({self.backend}) with {len(self.sound_files)} samples")

    def _load(self, path):
        if self.backend == "pyglet":
            import pyglet.media
            return pyglet.media.load(path, streaming=False)

        import pygame
        sound = pygame.mixer.Sound(path)
        sound.set_volume(self.volume)
        return sound

    def set_volume(self, volume: float) -> None:
        """
        Set the playback volume.

        Args:
            volume (float): Volume level between 0.0 and 1.0
        """
        if not 0 <= volume <= 1:
            logger.warning(f"Invalid volume {volume}, must be between 0.0 and 1.0")
            return

        self.volume = volume
        if self.backend == "pygame":
            for sound in self.sound_files.values():
                sound.set_volume(volume)
        logger.debug(f"Set volume to {volume}")

    def play_sound(self, name: str) -> bool:
        """
        Play a named sample.

        Returns:
            bool: True if the sample was started
        """
        sound = self.sound_files.get(name)
        if sound is None:
            return False

        if self.backend == "pyglet":
            player = sound.play()
            player.volume = self.volume
            # Keep only players that are still running
            self.players = [p for p in self.players if p.playing]
            self.players.append(player)
        else:
            sound.play()

        logger.debug(f"Playing sample {name}")
        return True

    def play_role(self, role: ZoneRole) -> Tuple[str, ...]:
        """
        Play every sample mapped to a zone role.

        Returns:
            tuple: Names of the samples that were started
        """
        return tuple(name for name in ROLE_SOUNDS[ZoneRole(role)] if self.play_sound(name))

    def stop_all(self) -> None:
        """Stop all currently playing samples."""
        if self.backend == "pyglet":
            for player in self.players:
                if player.playing:
                    player.pause()
                player.delete()
            self.players = []
        elif self.backend == "pygame":
            import pygame
            pygame.mixer.stop()
        logger.debug("Stopped all role sounds")
