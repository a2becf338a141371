"""
Tests for the command line and the per-frame pipeline.
"""

import cv2 as cv
import numpy as np
import pytest

from pintura_sonora.app import handle_keyboard_input, initialize_system, make_mouse_callback, process_frame
from pintura_sonora.args_parser import get_args
from pintura_sonora.config import LockConfig, TriggerConfig
from pintura_sonora.core.trigger import TriggerController
from pintura_sonora.mapping.painting_pack import PaintingPack, Zone, ZoneRole, save_painting_pack
from pintura_sonora.utils.coords import Point
from pintura_sonora.vision.calibration import ManualCalibration

PACK = PaintingPack("test", "Test", "ref.jpg", (Zone("middle", 0.5, 0.5, 0.1, ZoneRole.EPIANO),))


def test_default_arguments():
    args = get_args([])

    assert args.pack is None
    assert args.camera is None
    assert not args.manual
    assert args.features == "orb"
    assert args.analysis_width == LockConfig.ANALYSIS_WIDTH
    assert args.vision_rate == LockConfig.VISION_INTERVAL_MS
    assert args.cooldown == TriggerConfig.COOLDOWN_MS
    assert args.repeat == TriggerConfig.REPEAT_MS


def test_unknown_feature_backend_is_rejected():
    with pytest.raises(SystemExit):
        get_args(["--features", "surf"])


@pytest.fixture
def manual_components():
    fired = []
    return {
        'pack': PACK,
        'engine': None,
        'calibration': ManualCalibration(),
        'trigger': TriggerController(fired.append),
        'fired': fired,
    }


def test_uncalibrated_frame_fires_nothing(manual_components):
    frame = np.zeros((480, 640, 3), dtype=np.uint8)

    result, zone = process_frame(frame, manual_components, 0)

    assert not result.locked
    assert zone is None
    assert manual_components['fired'] == []


def test_calibrated_frame_fires_zone_under_reticle(manual_components):
    on_mouse = make_mouse_callback(manual_components['calibration'], {'shape': (480, 640, 3)})
    for x, y in [(64, 48), (576, 48), (576, 432), (64, 432)]:
        on_mouse(cv.EVENT_LBUTTONDOWN, x, y, 0, None)
    frame = np.zeros((480, 640, 3), dtype=np.uint8)

    result, zone = process_frame(frame, manual_components, 0)

    assert manual_components['calibration'].is_complete
    assert result.locked
    assert result.point.x == pytest.approx(0.5)
    assert zone.id == "middle"
    assert manual_components['fired'] == [ZoneRole.EPIANO]
    assert frame.any()


def test_mouse_callback_ignores_other_events():
    calibration = ManualCalibration()
    on_mouse = make_mouse_callback(calibration, {'shape': (480, 640, 3)})

    on_mouse(cv.EVENT_MOUSEMOVE, 10, 10, 0, None)
    on_mouse(cv.EVENT_LBUTTONDOWN, 320, 240, 0, None)

    assert calibration.taps == (Point(0.5, 0.5),)


# ==================== Initialization ====================

def test_builtin_pack_without_image_falls_back_to_manual(tmp_path, monkeypatch, caplog):
    monkeypatch.chdir(tmp_path)

    components = initialize_system(get_args(["--no-audio", "--camera", "0"]))

    assert components['engine'] is None
    assert isinstance(components['calibration'], ManualCalibration)
    assert "falling back to manual calibration" in caplog.text


def test_pack_with_image_uses_auto_lock(tmp_path):
    cv.imwrite(str(tmp_path / "ref.png"), np.full((120, 160, 3), 90, dtype=np.uint8))
    save_painting_pack(PaintingPack("p", "P", "ref.png", PACK.zones), str(tmp_path / "pack.json"))

    components = initialize_system(get_args(["--pack", str(tmp_path / "pack.json"), "--no-audio", "--camera", "0"]))

    assert components['calibration'] is None
    assert components['engine'].is_initialized
    assert (components['engine'].reference.width, components['engine'].reference.height) == (160, 120)


def test_pack_with_missing_image_fails(tmp_path):
    save_painting_pack(PaintingPack("p", "P", "missing.png", PACK.zones), str(tmp_path / "pack.json"))

    with pytest.raises(FileNotFoundError):
        initialize_system(get_args(["--pack", str(tmp_path / "pack.json"), "--no-audio", "--camera", "0"]))


# ==================== Keyboard ====================

class RecordingWorker:
    """Stand-in audio worker keeping the queued commands."""

    def __init__(self):
        self.commands = []

    def enqueue_command(self, command):
        self.commands.append((command.command_type, command.params))
        return True


@pytest.fixture
def key_components(manual_components):
    manual_components['audio_worker'] = RecordingWorker()
    manual_components['volume'] = 0.85
    return manual_components


def test_quit_keys_stop_the_loop(key_components):
    assert not handle_keyboard_input(ord('q'), key_components)
    assert not handle_keyboard_input(27, key_components)
    assert handle_keyboard_input(255, key_components)
    assert key_components['audio_worker'].commands == []


def test_volume_keys_queue_clamped_volume(key_components):
    handle_keyboard_input(ord('+'), key_components)
    handle_keyboard_input(ord('+'), key_components)
    handle_keyboard_input(ord('-'), key_components)

    assert key_components['audio_worker'].commands == [
        ('set_volume', {'volume': 0.95}),
        ('set_volume', {'volume': 1.0}),
        ('set_volume', {'volume': 0.9}),
    ]


def test_reset_key_clears_calibration_and_stops_audio(key_components):
    calibration = key_components['calibration']
    calibration.add_tap(Point(0.1, 0.1))
    key_components['trigger'].update(PACK.zones[0], 0)

    assert handle_keyboard_input(ord('r'), key_components)

    assert calibration.taps == ()
    assert key_components['trigger'].state.last_zone_id is None
    assert key_components['audio_worker'].commands == [('stop_all', {})]
