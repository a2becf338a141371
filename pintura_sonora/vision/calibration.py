"""
Manual 4-point calibration.

The user taps the four corners of the painting in the camera view
(top-left, top-right, bottom-right, bottom-left). The taps are solved
against the reference corners into a frame -> reference homography, giving
the same kind of mapping the auto-lock engine produces.
"""

import logging
from typing import List, Optional, Tuple

from pintura_sonora.config import CalibrationConfig
from pintura_sonora.geometry.homography import (
    Homography,
    HomographyError,
    apply_homography,
    invert_homography,
    solve_from_four_points,
)
from pintura_sonora.utils.coords import Point
from pintura_sonora.vision.autolock import LockResult

logger = logging.getLogger(__name__)

REFERENCE_CORNERS: Tuple[Point, ...] = tuple(Point(x, y) for x, y in CalibrationConfig.REFERENCE_CORNERS)
""" Reference-normalized painting corners, in tap order """


class CalibrationError(ValueError):
    """A tap was rejected; the calibration state is unchanged."""


class ManualCalibration:
    """
    Collects four camera taps and derives the frame -> reference homography.

    Taps are frame-normalized (0..1 across the camera image). Mapped points
    are reference-normalized (0..1 across the painting).
    """

    def __init__(self) -> None:
        self._taps: List[Point] = []
        self._homography: Optional[Homography] = None

    @property
    def taps(self) -> Tuple[Point, ...]:
        return tuple(self._taps)

    @property
    def is_complete(self) -> bool:
        return self._homography is not None

    @property
    def homography(self) -> Optional[Homography]:
        """Frame-normalized -> reference-normalized homography, None until calibrated."""
        return self._homography

    def reset(self) -> None:
        """Forget all taps and the derived homography."""
        self._taps = []
        self._homography = None
        logger.info("Calibration reset")

    def add_tap(self, tap: Point) -> None:
        """
        Add a corner tap in frame-normalized coordinates.

        The fourth tap completes the calibration. If the four taps are
        degenerate the fourth one is discarded and the user can tap again.

        Raises:
            CalibrationError: If calibration is already complete or the taps are degenerate
        """
        if len(self._taps) >= CalibrationConfig.TAP_COUNT:
            raise CalibrationError("Calibration already has 4 taps, reset first")

        taps = self._taps + [tap]
        if len(taps) < CalibrationConfig.TAP_COUNT:
            self._taps = taps
            logger.info(f"Calibration tap {len(taps)}/{CalibrationConfig.TAP_COUNT} at {tap}")
            return

        try:
            H_ref_to_frame = solve_from_four_points(REFERENCE_CORNERS, taps)
            H_frame_to_ref = invert_homography(H_ref_to_frame)
        except HomographyError as e:
            logger.warning(f"Calibration failed, tap the last corner again: {e}")
            raise CalibrationError(str(e)) from e

        self._taps = taps
        self._homography = H_frame_to_ref
        logger.info("Calibration complete")

    def map_point(self, point: Point) -> Optional[Point]:
        """
        Map a frame-normalized point to reference-normalized coordinates.

        Returns None when not calibrated or when the point does not map to a finite location.
        """
        if self._homography is None:
            return None
        mapped = apply_homography(self._homography, point)
        return mapped if mapped.is_finite() else None

    def locate(self, center: Point = Point.CENTER) -> LockResult:
        """
        Locate a frame-normalized point (the view center by default) on the painting.

        Returns the same result type as the auto-lock engine so consumers do not
        care which source produced the mapping.
        """
        mapped = self.map_point(center)
        if mapped is None:
            return LockResult.unlocked()
        mapped = mapped.clamped()
        return LockResult(True, mapped.x, mapped.y, 0, 0)
