"""
Feature correspondence providers for Pintura Sonora.

The lock engine only talks to the `FeatureProvider` interface: three
primitives (detect-and-describe, knn matching with a ratio test, robust
homography estimation) with fixed numpy input and output shapes. OpenCV
objects never leave the provider, so any detector/matcher/solver backend
can be swapped in.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple

import cv2 as cv
import numpy as np
import numpy.typing as npt

from pintura_sonora.config import FeatureConfig, LockConfig
from pintura_sonora.geometry.homography import Homography, normalize_homography

logger = logging.getLogger(__name__)

PointArray = npt.NDArray[np.float32]
""" Array of shape (N, 2) holding pixel coordinates """


@dataclass(frozen=True)
class ReferenceModel:
    """
    Immutable feature model of the reference painting.
    Built once from a still image and never mutated afterwards.
    """

    width: int
    "Reference image width in pixels."
    height: int
    "Reference image height in pixels."
    keypoints: PointArray
    "Keypoint positions in reference pixels, shape (N, 2)."
    descriptors: Optional[np.ndarray]
    "Descriptor matrix, one row per keypoint, or None when nothing was found."

    @property
    def feature_count(self) -> int:
        return int(self.keypoints.shape[0])


@dataclass(frozen=True)
class Correspondences:
    """
    Matched point pairs between the reference and a query frame, after the ratio test.
    """

    reference_points: PointArray
    "Reference pixels, shape (M, 2)."
    frame_points: PointArray
    "Frame pixels, shape (M, 2), row-aligned with reference_points."
    raw_count: int = 0
    "Number of knn candidates before the ratio test."

    @property
    def match_count(self) -> int:
        return int(self.reference_points.shape[0])

    @classmethod
    def empty(cls, raw_count: int = 0) -> "Correspondences":
        return cls(
            np.empty((0, 2), dtype=np.float32),
            np.empty((0, 2), dtype=np.float32),
            raw_count,
        )


def to_gray(image: np.ndarray) -> np.ndarray:
    """
    Convert a BGR, BGRA or single-channel image to an 8-bit grayscale image.
    """
    if image.ndim == 2:
        gray = image
    elif image.shape[2] == 4:
        gray = cv.cvtColor(image, cv.COLOR_BGRA2GRAY)
    elif image.shape[2] == 3:
        gray = cv.cvtColor(image, cv.COLOR_BGR2GRAY)
    else:
        gray = image[:, :, 0]

    if gray.dtype != np.uint8:
        gray = cv.normalize(gray, None, 0, 255, cv.NORM_MINMAX).astype(np.uint8)
    return gray


class FeatureProvider(ABC):
    """
    Capability interface for feature correspondence and robust estimation.

    Subclasses implement the three primitives; `build_reference` and
    `correspondences` are built on top of them.
    """

    def __init__(self, ratio_thresh: float = FeatureConfig.RATIO_THRESH) -> None:
        self.ratio_thresh = ratio_thresh
        """ A match is kept only if best < ratio_thresh * second best """

    @abstractmethod
    def detect_and_describe(self, gray: np.ndarray) -> Tuple[PointArray, Optional[np.ndarray]]:
        """
        Detect keypoints in a grayscale image and compute their descriptors.

        Returns:
            tuple: (keypoints of shape (N, 2), descriptors with N rows or None)
        """

    @abstractmethod
    def knn_ratio_match(self, reference_descriptors: np.ndarray,
                        frame_descriptors: np.ndarray) -> Tuple[List[Tuple[int, int]], int]:
        """
        Match reference descriptors against frame descriptors and apply the ratio test.

        Returns:
            tuple: (list of (reference_index, frame_index) pairs, raw candidate count)
        """

    @abstractmethod
    def estimate_homography(self, src: PointArray, dst: PointArray,
                            reproj_threshold: float) -> Tuple[Optional[Homography], int]:
        """
        Robustly estimate the homography mapping src onto dst.

        Returns:
            tuple: (3x3 homography or None, inlier count)
        """

    def build_reference(self, image: np.ndarray) -> ReferenceModel:
        """
        Build the immutable feature model of a reference image.

        Raises:
            ValueError: If the image is empty
        """
        if image is None or image.size == 0:
            raise ValueError("Reference image is empty")

        gray = to_gray(image)
        keypoints, descriptors = self.detect_and_describe(gray)
        height, width = gray.shape[:2]

        logger.info(f"Reference features: {len(keypoints)} keypoints ({width}x{height})")
        return ReferenceModel(width, height, keypoints, descriptors)

    def correspondences(self, reference: ReferenceModel, frame_gray: np.ndarray) -> Correspondences:
        """
        Find reference-to-frame point correspondences in a grayscale frame.
        """
        if reference.descriptors is None or len(reference.descriptors) == 0:
            return Correspondences.empty()

        keypoints, descriptors = self.detect_and_describe(frame_gray)
        if descriptors is None or len(descriptors) == 0:
            return Correspondences.empty()

        pairs, raw_count = self.knn_ratio_match(reference.descriptors, descriptors)
        if not pairs:
            return Correspondences.empty(raw_count)

        ref_idx = np.fromiter((p[0] for p in pairs), dtype=np.intp, count=len(pairs))
        frame_idx = np.fromiter((p[1] for p in pairs), dtype=np.intp, count=len(pairs))

        return Correspondences(
            reference.keypoints[ref_idx],
            keypoints[frame_idx],
            raw_count,
        )


class OpenCVFeatureProvider(FeatureProvider):
    """
    Shared OpenCV plumbing: keypoint conversion, ratio test and RANSAC estimation.
    """

    def __init__(self, detector, matcher, ratio_thresh: float = FeatureConfig.RATIO_THRESH) -> None:
        super().__init__(ratio_thresh)
        self.detector = detector
        self.matcher = matcher

    def detect_and_describe(self, gray):
        keypoints, descriptors = self.detector.detectAndCompute(gray, None)
        if not keypoints:
            return np.empty((0, 2), dtype=np.float32), None

        points = np.array([kp.pt for kp in keypoints], dtype=np.float32).reshape(-1, 2)
        return points, descriptors

    def knn_ratio_match(self, reference_descriptors, frame_descriptors):
        # knnMatch needs at least 2 train descriptors to produce pairs
        if len(frame_descriptors) < 2:
            return [], 0

        knn_matches = self.matcher.knnMatch(reference_descriptors, frame_descriptors, k=2)

        # Lowe's ratio test
        good_matches = []
        for match_pair in knn_matches:
            if len(match_pair) == 2:
                m, n = match_pair
                if m.distance < self.ratio_thresh * n.distance:
                    good_matches.append((m.queryIdx, m.trainIdx))

        return good_matches, len(knn_matches)

    def estimate_homography(self, src, dst, reproj_threshold=LockConfig.RANSAC_REPROJ_THRESHOLD):
        if len(src) < 4 or len(dst) < 4:
            return None, 0

        H, mask = cv.findHomography(
            np.asarray(src, dtype=np.float32),
            np.asarray(dst, dtype=np.float32),
            cv.RANSAC,
            ransacReprojThreshold=reproj_threshold,
            maxIters=LockConfig.RANSAC_MAX_ITERS,
            confidence=LockConfig.RANSAC_CONFIDENCE,
        )

        if H is None or H.shape != (3, 3):
            return None, 0

        inliers = int(np.count_nonzero(mask)) if mask is not None else 0
        return normalize_homography(H), inliers


class OrbFeatureProvider(OpenCVFeatureProvider):
    """
    ORB keypoints with a brute-force Hamming matcher. Fast enough for every vision tick.
    """

    def __init__(self, n_features: int = FeatureConfig.ORB_N_FEATURES,
                 ratio_thresh: float = FeatureConfig.RATIO_THRESH) -> None:
        super().__init__(
            cv.ORB_create(nfeatures=n_features),
            cv.BFMatcher(cv.NORM_HAMMING, crossCheck=False),
            ratio_thresh,
        )


class SiftFeatureProvider(OpenCVFeatureProvider):
    """
    SIFT keypoints with a FLANN KD-tree matcher. Slower than ORB, more tolerant to scale and blur.
    """

    def __init__(self, n_features: int = FeatureConfig.SIFT_N_FEATURES,
                 ratio_thresh: float = FeatureConfig.RATIO_THRESH) -> None:
        FLANN_INDEX_KDTREE = 1
        super().__init__(
            cv.SIFT_create(
                nfeatures=n_features,
                contrastThreshold=FeatureConfig.SIFT_CONTRAST_THRESHOLD,
                edgeThreshold=FeatureConfig.SIFT_EDGE_THRESHOLD,
            ),
            cv.FlannBasedMatcher(
                dict(algorithm=FLANN_INDEX_KDTREE, trees=FeatureConfig.FLANN_TREES),
                dict(checks=FeatureConfig.FLANN_CHECKS),
            ),
            ratio_thresh,
        )

    def knn_ratio_match(self, reference_descriptors, frame_descriptors):
        # FLANN KD-trees only accept float32 descriptors
        return super().knn_ratio_match(
            np.asarray(reference_descriptors, dtype=np.float32),
            np.asarray(frame_descriptors, dtype=np.float32),
        )


PROVIDERS = {
    "orb": OrbFeatureProvider,
    "sift": SiftFeatureProvider,
}
""" Feature backends selectable from the command line """


def create_provider(name: str) -> FeatureProvider:
    """
    Create a feature provider by backend name.

    Raises:
        ValueError: If the backend is unknown
    """
    try:
        return PROVIDERS[name]()
    except KeyError:
        raise ValueError(f"Unknown feature backend: {name} (choose from {sorted(PROVIDERS)})") from None
