"""
Geometry Module - Plane-to-plane homography math.
"""

from .homography import (
    Homography,
    HomographyError,
    SingularSystemError,
    NotInvertibleError,
    solve_from_four_points,
    apply_homography,
    invert_homography,
    normalize_homography,
)

__all__ = [
    'Homography',
    'HomographyError',
    'SingularSystemError',
    'NotInvertibleError',
    'solve_from_four_points',
    'apply_homography',
    'invert_homography',
    'normalize_homography',
]
