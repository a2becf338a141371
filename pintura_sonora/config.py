"""
Configuration module for Pintura Sonora.

This module contains all configuration parameters and constants used throughout the application.
Every value here is a default: the engine and controllers accept overrides
through their constructors and the command line.

PERFORMANCE TUNING:
- Lower ANALYSIS_WIDTH and raise VISION_INTERVAL_MS on slow devices
- Raise HOLD_MS if the lock drops during fast camera motion
"""

import logging


# ==================== Logging Configuration ====================
LOG_LEVEL = logging.INFO
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


# ==================== Camera Configuration ====================
class CameraConfig:
    """Camera capture configuration parameters."""

    # Requested camera resolution
    DEFAULT_WIDTH = 1280
    DEFAULT_HEIGHT = 720

    # Default camera port (None = auto-select)
    DEFAULT_PORT = None

    # Camera buffer size (reduce latency)
    BUFFER_SIZE = 1


# ==================== Auto-Lock Configuration ====================
class LockConfig:
    """Configuration for the planar auto-lock engine."""

    # Analysis resolution (frames are resampled before feature extraction)
    ANALYSIS_WIDTH = 320            # Height is derived as 3/4 of the width
    MIN_ANALYSIS_WIDTH = 160
    MIN_ANALYSIS_HEIGHT = 120

    # Vision rate limiting
    VISION_INTERVAL_MS = 200        # 5 estimations per second
    MIN_VISION_INTERVAL_MS = 80

    # Keep the last homography this long after the last successful estimation
    HOLD_MS = 800

    # Acceptance thresholds
    MIN_GOOD_MATCHES = 18           # After the ratio test
    MIN_INLIERS = 14                # After RANSAC

    # Robust estimation
    RANSAC_REPROJ_THRESHOLD = 3.0   # Pixels
    RANSAC_CONFIDENCE = 0.995
    RANSAC_MAX_ITERS = 2000


# ==================== Feature Detection Configuration ====================
class FeatureConfig:
    """Configuration for keypoint detection and descriptor matching."""

    # Lowe's ratio test threshold
    RATIO_THRESH = 0.75

    # ORB feature extraction parameters (default backend)
    ORB_N_FEATURES = 900            # More keypoints = more robust, more cost

    # SIFT feature extraction parameters
    SIFT_N_FEATURES = 1000
    SIFT_CONTRAST_THRESHOLD = 0.03
    SIFT_EDGE_THRESHOLD = 15

    # FLANN matcher parameters (SIFT backend)
    FLANN_TREES = 8
    FLANN_CHECKS = 100


# ==================== Trigger Configuration ====================
class TriggerConfig:
    """Configuration for zone trigger timing."""

    # Minimum time between a fire and a fire for a different zone
    COOLDOWN_MS = 150

    # Re-fire interval while dwelling in the same zone
    REPEAT_MS = 650


# ==================== Calibration Configuration ====================
class CalibrationConfig:
    """Configuration for manual 4-point calibration."""

    # Number of taps required
    TAP_COUNT = 4

    # Reference corners in the order the user taps them: TL, TR, BR, BL
    REFERENCE_CORNERS = ((0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0))


# ==================== Audio Configuration ====================
class AudioConfig:
    """Configuration for audio playback."""

    # Master volume applied to every role sample
    MASTER_VOLUME = 0.85

    # Volume change per key press
    VOLUME_STEP = 0.1

    # Audio command queue size
    QUEUE_MAXSIZE = 32

    # Queue poll timeout (seconds)
    QUEUE_GET_TIMEOUT = 0.1

    # Thread shutdown timeout (seconds)
    THREAD_SHUTDOWN_TIMEOUT = 2.0


# ==================== UI Configuration ====================
class UIConfig:
    """Configuration for user interface elements."""

    WINDOW_NAME = "Pintura Sonora"

    # Colors (BGR format)
    COLOR_WHITE = (255, 255, 255)
    COLOR_GREEN = (0, 255, 0)
    COLOR_YELLOW = (0, 255, 255)
    COLOR_RED = (0, 0, 255)

    # Reticle radius in pixels
    RETICLE_RADIUS = 6

    # Text display
    FONT_SCALE = 0.5
    FONT_THICKNESS = 1
    LINE_HEIGHT = 18
