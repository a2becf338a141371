"""
Pintura Sonora - Camera-driven sound exploration of a painting.

Point a camera at a known painting and the center of the camera view is
located on the painting; zones of the painting trigger sounds.

Main components:
- config: Centralized configuration
- geometry: Homography math
- vision: Feature providers, auto-lock engine, manual calibration
- mapping: Painting packs and zone lookup
- core: Trigger timing and helpers
- audio: Sample playback for zone roles
- ui: Overlay rendering
"""

__version__ = "0.2.0"
