"""
Tests for role sound dispatch and the audio worker.
"""

import threading

from pintura_sonora.audio.audio import ROLE_SOUNDS, RoleSoundPlayer
from pintura_sonora.audio.worker import AudioCommand, AudioWorker
from pintura_sonora.mapping.painting_pack import ZoneRole


class RecordingPlayer:
    """Stand-in player recording what the worker asks for."""

    def __init__(self):
        self.roles = []
        self.volumes = []
        self.stopped = 0

    def play_role(self, role):
        self.roles.append(role)

    def set_volume(self, volume):
        self.volumes.append(volume)

    def stop_all(self):
        self.stopped += 1


def test_every_role_has_sounds():
    assert set(ROLE_SOUNDS) == set(ZoneRole)
    assert ROLE_SOUNDS[ZoneRole.ACCENT] == ("click", "epiano")
    assert ROLE_SOUNDS[ZoneRole.PATTERN_MELODY] == ROLE_SOUNDS[ZoneRole.EPIANO]
    assert ROLE_SOUNDS[ZoneRole.PATTERN_RHYTHM] == ROLE_SOUNDS[ZoneRole.PERC]


def test_silent_player_plays_nothing():
    player = RoleSoundPlayer({"pad": "missing.wav"}, backend=None)

    assert player.sound_files == {}
    assert player.play_role(ZoneRole.PAD) == ()
    assert player.play_role("accent") == ()
    player.stop_all()


def test_worker_executes_commands_in_order():
    player = RecordingPlayer()
    stop_event = threading.Event()
    worker = AudioWorker(player, stop_event)
    worker.start()

    assert worker.play_role(ZoneRole.PAD)
    assert worker.enqueue_command(AudioCommand('set_volume', volume=0.5))
    assert worker.play_role(ZoneRole.ACCENT)
    worker.command_queue.join()
    worker.stop()

    assert player.roles == [ZoneRole.PAD, ZoneRole.ACCENT]
    assert player.volumes == [0.5]
    assert player.stopped == 1
    assert not worker.is_alive()


def test_worker_drops_commands_when_queue_is_full():
    worker = AudioWorker(RecordingPlayer(), threading.Event(), queue_maxsize=1)

    assert worker.play_role(ZoneRole.PAD)
    assert not worker.play_role(ZoneRole.PERC)
