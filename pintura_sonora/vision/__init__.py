"""
Vision Module - Feature correspondence, auto-lock and manual calibration.

This module provides:
- Swappable feature providers backed by OpenCV (features.py)
- The rate-limited planar lock engine (autolock.py)
- Manual 4-point calibration (calibration.py)
"""

from .features import (
    FeatureProvider,
    ReferenceModel,
    Correspondences,
    OrbFeatureProvider,
    SiftFeatureProvider,
    create_provider,
)
from .autolock import AutoLockEngine, LockResult, LockState
from .calibration import ManualCalibration, CalibrationError

__all__ = [
    'FeatureProvider',
    'ReferenceModel',
    'Correspondences',
    'OrbFeatureProvider',
    'SiftFeatureProvider',
    'create_provider',
    'AutoLockEngine',
    'LockResult',
    'LockState',
    'ManualCalibration',
    'CalibrationError',
]
