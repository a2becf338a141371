"""
Tests for manual 4-point calibration.
"""

import pytest

from pintura_sonora.utils.coords import Point
from pintura_sonora.vision.autolock import LockResult
from pintura_sonora.vision.calibration import CalibrationError, ManualCalibration

CENTERED_TAPS = [Point(0.1, 0.1), Point(0.9, 0.1), Point(0.9, 0.9), Point(0.1, 0.9)]


def calibrated(taps=CENTERED_TAPS):
    calibration = ManualCalibration()
    for tap in taps:
        calibration.add_tap(tap)
    return calibration


def test_frame_center_maps_to_painting_center():
    calibration = calibrated()

    assert calibration.is_complete
    center = calibration.map_point(Point(0.5, 0.5))
    assert center.x == pytest.approx(0.5)
    assert center.y == pytest.approx(0.5)


def test_taps_map_back_to_reference_corners():
    taps = [Point(0.2, 0.15), Point(0.85, 0.1), Point(0.8, 0.9), Point(0.25, 0.8)]
    calibration = calibrated(taps)

    for tap, corner in zip(taps, [Point(0, 0), Point(1, 0), Point(1, 1), Point(0, 1)]):
        mapped = calibration.map_point(tap)
        assert mapped.x == pytest.approx(corner.x, abs=1e-9)
        assert mapped.y == pytest.approx(corner.y, abs=1e-9)


def test_incomplete_calibration_is_unlocked():
    calibration = ManualCalibration()
    calibration.add_tap(Point(0.1, 0.1))

    assert calibration.taps == (Point(0.1, 0.1),)
    assert calibration.homography is None
    assert calibration.map_point(Point(0.5, 0.5)) is None
    assert calibration.locate() == LockResult.unlocked()


def test_locate_matches_lock_engine_contract():
    result = calibrated().locate()

    assert result.locked
    assert result.point.x == pytest.approx(0.5)
    assert result.point.y == pytest.approx(0.5)
    assert (result.inliers, result.matches) == (0, 0)


def test_locate_clamps_outside_painting():
    result = calibrated().locate(Point(0.0, 0.5))

    assert result.locked
    assert result.x == 0.0
    assert result.y == pytest.approx(0.5)


def test_degenerate_fourth_tap_is_rejected():
    calibration = ManualCalibration()
    for tap in [Point(0.125, 0.125), Point(0.5, 0.125), Point(0.875, 0.125)]:
        calibration.add_tap(tap)

    with pytest.raises(CalibrationError):
        calibration.add_tap(Point(0.25, 0.125))

    assert len(calibration.taps) == 3
    assert not calibration.is_complete


def test_fifth_tap_requires_reset():
    calibration = calibrated()

    with pytest.raises(CalibrationError):
        calibration.add_tap(Point(0.5, 0.5))

    calibration.reset()
    assert calibration.taps == ()
    assert calibration.homography is None
