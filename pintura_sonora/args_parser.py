import argparse

from .config import CameraConfig, LockConfig, TriggerConfig
from .vision.features import PROVIDERS

pintura_parser = argparse.ArgumentParser(
    description="Pintura Sonora: point the camera at a painting to play its zones."
)

pintura_parser.add_argument(
    "--pack",
    help="Path to painting pack json file. Defaults to the built-in pack, which "
         "falls back to manual calibration when its reference image is missing.",
    default=None,
)
pintura_parser.add_argument(
    "--camera",
    help="Camera port. Auto-selected when omitted.",
    type=int,
    default=CameraConfig.DEFAULT_PORT,
)
pintura_parser.add_argument(
    "--manual",
    help="Use manual 4-point calibration instead of the auto-lock.",
    action="store_true",
    default=False,
)
pintura_parser.add_argument(
    "--features",
    help="Feature backend for the auto-lock.",
    choices=sorted(PROVIDERS),
    default="orb",
)

pintura_parser.add_argument(
    "--analysis-width",
    help="Analysis frame width in pixels (min 160).",
    type=int,
    default=LockConfig.ANALYSIS_WIDTH,
)
pintura_parser.add_argument(
    "--vision-rate",
    help="Minimum milliseconds between two estimations (min 80).",
    type=float,
    default=LockConfig.VISION_INTERVAL_MS,
)
pintura_parser.add_argument(
    "--hold",
    help="Milliseconds a lock survives without a fresh estimation.",
    type=float,
    default=LockConfig.HOLD_MS,
)
pintura_parser.add_argument(
    "--min-matches",
    help="Minimum ratio-test matches to attempt an estimation.",
    type=int,
    default=LockConfig.MIN_GOOD_MATCHES,
)
pintura_parser.add_argument(
    "--min-inliers",
    help="Minimum RANSAC inliers to accept an estimation.",
    type=int,
    default=LockConfig.MIN_INLIERS,
)

pintura_parser.add_argument(
    "--cooldown",
    help="Milliseconds before a different zone can fire.",
    type=float,
    default=TriggerConfig.COOLDOWN_MS,
)
pintura_parser.add_argument(
    "--repeat",
    help="Milliseconds between re-fires while staying in a zone.",
    type=float,
    default=TriggerConfig.REPEAT_MS,
)

pintura_parser.add_argument(
    "--no-audio",
    help="Disable audio playback.",
    action="store_true",
    default=False,
)
pintura_parser.add_argument(
    "--debug",
    help="Enable debug logging.",
    action="store_true",
    default=False,
)

get_args = pintura_parser.parse_args
