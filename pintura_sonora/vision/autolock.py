"""
Planar auto-lock engine for Pintura Sonora.

This module locates the center of the camera view on the reference painting.
Feature matching and robust homography estimation run at a bounded rate;
between estimations, and for a short hold window after the last success,
the last accepted homography keeps the lock alive.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

import cv2 as cv
import numpy as np

from pintura_sonora.config import LockConfig
from pintura_sonora.geometry.homography import (
    Homography,
    HomographyError,
    apply_homography,
    invert_homography,
)
from pintura_sonora.utils.coords import Point
from pintura_sonora.vision.features import FeatureProvider, ReferenceModel, to_gray

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LockResult:
    """
    Outcome of one engine tick, in reference-normalized coordinates.
    """

    locked: bool
    "True when the mapped point can be trusted."
    x: float = 0.0
    "Mapped X on the painting, 0..1."
    y: float = 0.0
    "Mapped Y on the painting, 0..1."
    inliers: int = 0
    "Geometric inliers of a fresh estimate, 0 for stale reprojections."
    matches: int = 0
    "Ratio-test matches of a fresh estimate, 0 for stale reprojections."

    @property
    def point(self) -> Point:
        return Point(self.x, self.y)

    @classmethod
    def unlocked(cls, matches: int = 0, inliers: int = 0) -> "LockResult":
        return cls(False, 0.0, 0.0, inliers, matches)


@dataclass(frozen=True)
class LockState:
    """
    Snapshot of the last accepted estimation. Replaced as a whole, never mutated.
    """

    homography: Homography
    "Frame (analysis pixels) to reference pixels."
    hold_until_ms: float
    "The homography may be reused until this time without a fresh success."
    analysis_size: Tuple[int, int]
    "Analysis frame (width, height) the homography was estimated on."


class AutoLockEngine:
    """
    Hysteretic planar lock between camera frames and the reference painting.

    Lifecycle: construct with a feature provider, call `init` once with the
    reference image, then call `process` on every rendered frame. Only one
    call in every `vision_interval_ms` does vision work.
    """

    def __init__(self, provider: Optional[FeatureProvider],
                 analysis_width: int = LockConfig.ANALYSIS_WIDTH,
                 vision_interval_ms: float = LockConfig.VISION_INTERVAL_MS,
                 hold_ms: float = LockConfig.HOLD_MS,
                 min_matches: int = LockConfig.MIN_GOOD_MATCHES,
                 min_inliers: int = LockConfig.MIN_INLIERS,
                 reproj_threshold: float = LockConfig.RANSAC_REPROJ_THRESHOLD) -> None:
        """
        Initialize the engine.

        Args:
            provider (FeatureProvider): Correspondence backend, None if unavailable
            analysis_width (int): Width frames are resampled to (height is 3/4 of it)
            vision_interval_ms (float): Minimum time between two estimations
            hold_ms (float): How long a lock survives without a fresh success
            min_matches (int): Minimum ratio-test matches to attempt estimation
            min_inliers (int): Minimum RANSAC inliers to accept an estimate
            reproj_threshold (float): RANSAC reprojection threshold in pixels
        """
        self.provider = provider
        self.hold_ms = hold_ms
        self.min_matches = min_matches
        self.min_inliers = min_inliers
        self.reproj_threshold = reproj_threshold

        self.frame_w = LockConfig.ANALYSIS_WIDTH
        self.frame_h = LockConfig.ANALYSIS_WIDTH * 3 // 4
        self.set_analysis_size(analysis_width)

        self.vision_interval_ms = LockConfig.VISION_INTERVAL_MS
        self.set_vision_rate(vision_interval_ms)

        self._reference: Optional[ReferenceModel] = None
        self._state: Optional[LockState] = None
        self._last_run_ms: Optional[float] = None
        self._was_locked = False

    # ==================== Configuration ====================

    def set_vision_rate(self, interval_ms: float) -> None:
        """Set the minimum interval between estimations (floored at MIN_VISION_INTERVAL_MS)."""
        self.vision_interval_ms = max(LockConfig.MIN_VISION_INTERVAL_MS, interval_ms)

    def set_analysis_size(self, width: int) -> None:
        """Set the analysis width; the height follows a 4:3 aspect ratio."""
        self.frame_w = max(LockConfig.MIN_ANALYSIS_WIDTH, int(math.floor(width)))
        self.frame_h = max(LockConfig.MIN_ANALYSIS_HEIGHT, int(math.floor(width * 3 / 4)))

    @property
    def analysis_size(self) -> Tuple[int, int]:
        return self.frame_w, self.frame_h

    # ==================== Lifecycle ====================

    @property
    def reference(self) -> Optional[ReferenceModel]:
        return self._reference

    @property
    def is_initialized(self) -> bool:
        return self._reference is not None

    @property
    def lock_state(self) -> Optional[LockState]:
        return self._state

    def init(self, reference_image: np.ndarray) -> None:
        """
        Build the reference feature model. A second call is a no-op.

        Raises:
            RuntimeError: If no feature provider is available
            ValueError: If the reference image is empty
        """
        if self._reference is not None:
            return
        if self.provider is None:
            raise RuntimeError("No feature provider available")

        self._reference = self.provider.build_reference(reference_image)
        logger.info(f"Auto-lock ready: analysis {self.frame_w}x{self.frame_h}, "
                    f"every {self.vision_interval_ms:.0f} ms, hold {self.hold_ms:.0f} ms")

    def reset(self) -> None:
        """Drop the current lock and force a fresh estimation on the next tick."""
        self._state = None
        self._last_run_ms = None
        self._was_locked = False
        logger.info("Auto-lock reset")

    # ==================== Processing ====================

    def process(self, frame: Optional[np.ndarray], now_ms: float) -> LockResult:
        """
        Locate the center of the frame on the reference painting.

        Never raises for vision failures: every failure is an unlocked result
        (or a stale reprojection while the hold window lasts).

        Args:
            frame (numpy.ndarray): Camera frame (BGR, BGRA or grayscale)
            now_ms (float): Current time in milliseconds

        Returns:
            LockResult: Mapped point in reference-normalized coordinates
        """
        if self.provider is None or self._reference is None:
            return LockResult.unlocked()

        if self._last_run_ms is not None and now_ms - self._last_run_ms < self.vision_interval_ms:
            return self._hold(now_ms)

        self._last_run_ms = now_ms

        result = self._estimate(frame, now_ms)
        if not result.locked:
            held = self._hold(now_ms)
            if held.locked:
                return held
        self._log_transition(result)
        return result

    def _estimate(self, frame: Optional[np.ndarray], now_ms: float) -> LockResult:
        """Run one fresh estimation and update the lock state on success."""
        if frame is None or frame.size == 0 or frame.shape[0] == 0 or frame.shape[1] == 0:
            logger.debug("Empty frame, skipping estimation")
            return LockResult.unlocked()

        small = cv.resize(frame, (self.frame_w, self.frame_h), interpolation=cv.INTER_AREA)
        gray = to_gray(small)

        try:
            corr = self.provider.correspondences(self._reference, gray)
        except Exception as e:
            logger.warning(f"Correspondence search failed: {e}")
            return LockResult.unlocked()

        matches = corr.match_count
        if matches < self.min_matches:
            logger.debug(f"Not enough matches ({matches}/{self.min_matches})")
            return LockResult.unlocked(matches=matches)

        # Estimate reference pixels -> analysis frame pixels
        try:
            H_ref_to_frame, inliers = self.provider.estimate_homography(
                corr.reference_points, corr.frame_points, self.reproj_threshold
            )
        except Exception as e:
            logger.warning(f"Homography estimation failed: {e}")
            return LockResult.unlocked(matches=matches)

        if H_ref_to_frame is None:
            return LockResult.unlocked(matches=matches)

        if inliers < self.min_inliers:
            logger.debug(f"Not enough inliers ({inliers}/{self.min_inliers})")
            return LockResult.unlocked(matches=matches, inliers=inliers)

        try:
            H_frame_to_ref = invert_homography(H_ref_to_frame)
        except HomographyError as e:
            logger.debug(f"Rejected estimate: {e}")
            return LockResult.unlocked(matches=matches, inliers=inliers)

        state = LockState(H_frame_to_ref, now_ms + self.hold_ms, (self.frame_w, self.frame_h))
        mapped = self._project_center(state)
        if mapped is None:
            logger.debug("Frame center does not map onto the reference plane")
            return LockResult.unlocked(matches=matches, inliers=inliers)

        self._state = state
        return LockResult(True, mapped.x, mapped.y, inliers, matches)

    def _hold(self, now_ms: float) -> LockResult:
        """Reproject the center through the last accepted homography while the hold lasts."""
        state = self._state
        if state is None or now_ms >= state.hold_until_ms:
            if self._was_locked:
                self._log_transition(LockResult.unlocked())
            return LockResult.unlocked()

        mapped = self._project_center(state)
        if mapped is None:
            return LockResult.unlocked()
        return LockResult(True, mapped.x, mapped.y, 0, 0)

    def _project_center(self, state: LockState) -> Optional[Point]:
        """Map the analysis frame center to reference-normalized coordinates, clamped to [0, 1]."""
        w, h = state.analysis_size
        p_ref = apply_homography(state.homography, Point(w * 0.5, h * 0.5))
        if not p_ref.is_finite():
            return None
        return p_ref.scaled(1.0 / self._reference.width, 1.0 / self._reference.height).clamped()

    def _log_transition(self, result: LockResult) -> None:
        if result.locked and not self._was_locked:
            logger.info(f"Painting locked (inliers={result.inliers}, matches={result.matches})")
        elif not result.locked and self._was_locked:
            logger.info("Painting lock lost")
        self._was_locked = result.locked

    def tracking_status(self, result: LockResult) -> str:
        """Get tracking status string for display."""
        if not result.locked:
            return f"SEARCHING (m:{result.matches})"
        if result.inliers == 0:
            return "LOCKED (held)"
        return f"LOCKED (inl:{result.inliers} m:{result.matches})"
