"""
Tests for the plane-to-plane homography math.
"""

import logging
import math

import numpy as np
import pytest

from pintura_sonora.geometry.homography import (
    NotInvertibleError,
    SingularSystemError,
    apply_homography,
    invert_homography,
    normalize_homography,
    solve_from_four_points,
)
from pintura_sonora.utils.coords import Point

UNIT_SQUARE = [Point(0, 0), Point(1, 0), Point(1, 1), Point(0, 1)]
QUAD = [Point(0.1, 0.2), Point(0.9, 0.1), Point(0.8, 0.95), Point(0.15, 0.85)]


def assert_point_close(p, q, tol=1e-9):
    assert p.x == pytest.approx(q.x, abs=tol)
    assert p.y == pytest.approx(q.y, abs=tol)


def test_four_point_solve_interpolates_every_pair():
    h = solve_from_four_points(UNIT_SQUARE, QUAD)

    assert h.shape == (3, 3)
    assert h[2, 2] == 1.0
    for src, dst in zip(UNIT_SQUARE, QUAD):
        assert_point_close(apply_homography(h, src), dst)


def test_four_point_solve_with_pixel_scale_points():
    src = [Point(12, 7), Point(310, 25), Point(290, 230), Point(5, 210)]
    dst = [Point(0, 0), Point(400, 0), Point(400, 300), Point(0, 300)]

    h = solve_from_four_points(src, dst)

    for p, q in zip(src, dst):
        assert_point_close(apply_homography(h, p), q, tol=1e-6)


def test_double_inverse_is_identity():
    h = solve_from_four_points(UNIT_SQUARE, QUAD)

    np.testing.assert_allclose(invert_homography(invert_homography(h)), h, atol=1e-9)


def test_apply_inverse_round_trip():
    h = solve_from_four_points(UNIT_SQUARE, QUAD)
    h_inv = invert_homography(h)

    for p in (Point(0.5, 0.5), Point(0.25, 0.75), Point(-0.3, 1.2)):
        assert_point_close(apply_homography(h_inv, apply_homography(h, p)), p)


def test_collinear_source_points_are_singular():
    src = [Point(0, 0), Point(1, 0), Point(2, 0), Point(0, 1)]

    with pytest.raises(SingularSystemError):
        solve_from_four_points(src, UNIT_SQUARE)


def test_duplicated_source_points_are_singular():
    src = [Point(0, 0), Point(0, 0), Point(1, 1), Point(0, 1)]

    with pytest.raises(SingularSystemError):
        solve_from_four_points(src, UNIT_SQUARE)


def test_solve_requires_exactly_four_points():
    with pytest.raises(ValueError):
        solve_from_four_points(UNIT_SQUARE[:3], QUAD[:3])


def test_point_at_infinity_is_not_finite():
    h = np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [1.0, 0.0, 0.0]])

    mapped = apply_homography(h, Point(0.0, 5.0))

    assert not mapped.is_finite()
    assert math.isnan(mapped.x)


def test_rank_deficient_matrix_is_not_invertible():
    h = np.array([[1.0, 2.0, 3.0], [2.0, 4.0, 6.0], [0.0, 0.0, 1.0]])

    with pytest.raises(NotInvertibleError):
        invert_homography(h)


def test_failures_are_logged_before_raising(caplog):
    caplog.set_level(logging.DEBUG, logger="pintura_sonora.geometry.homography")

    with pytest.raises(SingularSystemError):
        solve_from_four_points([Point(0, 0)] * 4, UNIT_SQUARE)
    with pytest.raises(NotInvertibleError):
        invert_homography(np.zeros((3, 3)))

    messages = [r.getMessage() for r in caplog.records]
    assert any("Pivot" in m for m in messages)
    assert any("det=0" in m for m in messages)


def test_homography_errors_are_value_errors():
    with pytest.raises(ValueError):
        invert_homography(np.zeros((3, 3)))


def test_normalize_scales_bottom_right_to_one():
    h = np.array([[2.0, 0.0, 4.0], [0.0, 2.0, 6.0], [0.0, 0.0, 2.0]])

    normalized = normalize_homography(h)

    assert normalized[2, 2] == 1.0
    assert_point_close(apply_homography(normalized, Point(1, 1)), apply_homography(h, Point(1, 1)))
