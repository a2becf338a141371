"""
Plane-to-plane homography math.

A homography is a 3x3 float64 numpy array in row-major order. Matrices
solved from four exact correspondences have h[2, 2] == 1.

These functions are stateless and carry no knowledge of which coordinate
space a point lives in; callers name the spaces.
"""

import logging
from typing import Sequence

import numpy as np
import numpy.typing as npt

from pintura_sonora.utils.coords import Point

logger = logging.getLogger(__name__)

Homography = npt.NDArray[np.float64]

PIVOT_EPS = 1e-12
""" Smallest usable pivot magnitude in the 8x8 solve """

DENOMINATOR_EPS = 1e-9
""" Projective denominators below this map the point to infinity """

DET_EPS = 1e-12
""" Smallest usable determinant magnitude """


class HomographyError(ValueError):
    """Base class for numerical homography failures."""


class SingularSystemError(HomographyError):
    """The 4-point system has no unique solution (collinear or duplicated points)."""


class NotInvertibleError(HomographyError):
    """The homography determinant is too close to zero."""


def solve_from_four_points(src: Sequence[Point], dst: Sequence[Point]) -> Homography:
    """
    Compute the homography mapping each of 4 src points exactly onto its dst point.

    Fixes h22 = 1 and solves the remaining 8 unknowns from
        u = (h00 x + h01 y + h02) / (h20 x + h21 y + 1)
        v = (h10 x + h11 y + h12) / (h20 x + h21 y + 1)

    Raises:
        ValueError: If src or dst does not hold exactly 4 points
        SingularSystemError: If the points are degenerate
    """
    if len(src) != 4 or len(dst) != 4:
        raise ValueError(f"Need exactly 4 src and 4 dst points, got {len(src)} and {len(dst)}")

    a = np.zeros((8, 8), dtype=np.float64)
    b = np.zeros(8, dtype=np.float64)

    for i, (p, q) in enumerate(zip(src, dst)):
        x, y = float(p.x), float(p.y)
        u, v = float(q.x), float(q.y)

        a[2 * i] = [x, y, 1.0, 0.0, 0.0, 0.0, -u * x, -u * y]
        b[2 * i] = u
        a[2 * i + 1] = [0.0, 0.0, 0.0, x, y, 1.0, -v * x, -v * y]
        b[2 * i + 1] = v

    h = _solve_linear_system(a, b)
    return np.append(h, 1.0).reshape(3, 3)


def _solve_linear_system(a: npt.NDArray[np.float64], b: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """
    Gauss-Jordan elimination with partial pivoting on the augmented matrix [a | b].
    """
    n = a.shape[0]
    m = np.hstack([a, b.reshape(-1, 1)]).astype(np.float64)

    for col in range(n):
        # Row with the largest magnitude in this column becomes the pivot row
        pivot = col + int(np.argmax(np.abs(m[col:, col])))
        if abs(m[pivot, col]) < PIVOT_EPS:
            logger.debug(f"Pivot {m[pivot, col]:.3g} below {PIVOT_EPS} in column {col}")
            raise SingularSystemError("Singular system: calibration points are degenerate")

        if pivot != col:
            m[[col, pivot]] = m[[pivot, col]]

        m[col, col:] /= m[col, col]

        for r in range(n):
            if r == col:
                continue
            factor = m[r, col]
            if factor != 0.0:
                m[r, col:] -= factor * m[col, col:]

    return m[:, n]


def apply_homography(h: Homography, p: Point) -> Point:
    """
    Project a point through a homography.

    Returns `Point.NAN` when the point maps to infinity; callers must treat
    a non-finite result as unmapped.
    """
    x, y = p.x, p.y
    w = h[2, 0] * x + h[2, 1] * y + h[2, 2]
    if abs(w) < DENOMINATOR_EPS:
        return Point.NAN

    return Point(
        float((h[0, 0] * x + h[0, 1] * y + h[0, 2]) / w),
        float((h[1, 0] * x + h[1, 1] * y + h[1, 2]) / w),
    )


def invert_homography(h: Homography) -> Homography:
    """
    Invert a 3x3 homography via its adjugate and determinant.

    Raises:
        NotInvertibleError: If |det| is below DET_EPS
    """
    (a, b, c), (d, e, f), (g, hh, i) = np.asarray(h, dtype=np.float64)

    co_a = e * i - f * hh
    co_b = -(d * i - f * g)
    co_c = d * hh - e * g

    det = a * co_a + b * co_b + c * co_c
    if not np.isfinite(det) or abs(det) < DET_EPS:
        logger.debug(f"Rejected homography with det={det:.3g}")
        raise NotInvertibleError(f"Homography is not invertible (det={det:.3g})")

    adjugate = np.array([
        [co_a, -(b * i - c * hh), b * f - c * e],
        [co_b, a * i - c * g, -(a * f - c * d)],
        [co_c, -(a * hh - b * g), a * e - b * d],
    ], dtype=np.float64)

    return adjugate / det


def normalize_homography(h: Homography) -> Homography:
    """
    Scale a homography so that h[2, 2] == 1, when h[2, 2] is not close to zero.
    """
    h = np.asarray(h, dtype=np.float64)
    s = h[2, 2]
    if abs(s) > DET_EPS:
        return h / s
    return h.copy()
