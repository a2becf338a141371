"""
UI Display Module - Drawing and visualization functions for Pintura Sonora.

This module contains all UI-related functions for drawing overlays,
the scanner reticle, the painting outline, calibration taps and status text.
"""

import logging

import cv2 as cv
import numpy as np

from pintura_sonora.config import CameraConfig, UIConfig
from pintura_sonora.geometry.homography import HomographyError, apply_homography, invert_homography
from pintura_sonora.utils.coords import Point

logger = logging.getLogger(__name__)


def reference_outline(h_frame_to_ref, frame_scale, reference_size):
    """
    Project the painting corners into display pixels.

    Args:
        h_frame_to_ref (numpy.ndarray): Frame -> reference homography
        frame_scale (tuple): (sx, sy) converting homography frame units to display pixels
        reference_size (tuple): (width, height) of the reference in homography reference units

    Returns:
        numpy.ndarray or None: Corners as an int32 array of shape (4, 2), None if unmappable
    """
    try:
        h_ref_to_frame = invert_homography(h_frame_to_ref)
    except HomographyError as e:
        logger.debug(f"Cannot draw outline: {e}")
        return None

    w, h = reference_size
    corners = [Point(0, 0), Point(w, 0), Point(w, h), Point(0, h)]
    projected = [apply_homography(h_ref_to_frame, c).scaled(*frame_scale) for c in corners]
    if not all(p.is_finite() for p in projected):
        return None

    return np.array([p.coords for p in projected], dtype=np.int32)


def draw_outline(image, pts, color=UIConfig.COLOR_GREEN, thickness=2):
    """
    Draw a closed polygon from pre-computed display points.

    Args:
        image (numpy.ndarray): Image to draw on
        pts (numpy.ndarray): Points of shape (N, 2)
        color (tuple): BGR color for the polygon
        thickness (int): Line thickness

    Returns:
        numpy.ndarray: Image with polygon drawn
    """
    if pts is None:
        return image

    cv.polylines(image, [pts.reshape(-1, 1, 2)], isClosed=True, color=color, thickness=thickness)
    for x, y in pts:
        cv.circle(image, (int(x), int(y)), 4, color, -1)
    return image


def draw_reticle(image, locked):
    """Draw the scanner reticle at the frame center."""
    h, w = image.shape[:2]
    color = UIConfig.COLOR_GREEN if locked else UIConfig.COLOR_WHITE
    cv.circle(image, (w // 2, h // 2), UIConfig.RETICLE_RADIUS, color, -1)
    cv.circle(image, (w // 2, h // 2), UIConfig.RETICLE_RADIUS * 3, color, 1)
    return image


def draw_calibration_taps(image, taps):
    """
    Draw manual calibration taps (frame-normalized) and connect them once complete.
    """
    h, w = image.shape[:2]
    pts = np.array([(int(t.x * w), int(t.y * h)) for t in taps], dtype=np.int32).reshape(-1, 2)

    for i, (x, y) in enumerate(pts):
        cv.circle(image, (int(x), int(y)), 6, UIConfig.COLOR_YELLOW, -1)
        cv.putText(image, str(i + 1), (int(x) + 8, int(y) - 8), cv.FONT_HERSHEY_SIMPLEX,
                   UIConfig.FONT_SCALE, UIConfig.COLOR_YELLOW, UIConfig.FONT_THICKNESS)

    if len(pts) == 4:
        draw_outline(image, pts, color=UIConfig.COLOR_YELLOW)
    return image


def draw_status_lines(image, lines):
    """
    Draw status text lines in the top-left corner.

    Args:
        image (numpy.ndarray): Image to draw on
        lines (list): Text lines, drawn top to bottom
    """
    for i, text in enumerate(lines):
        cv.putText(image, text, (12, 20 + i * UIConfig.LINE_HEIGHT), cv.FONT_HERSHEY_SIMPLEX,
                   UIConfig.FONT_SCALE, UIConfig.COLOR_WHITE, UIConfig.FONT_THICKNESS)
    return image


def draw_lock_overlay(image, result, status_text, zone=None):
    """
    Draw the per-tick overlay: reticle, lock status, mapped point and zone.

    Args:
        image (numpy.ndarray): Image to draw on
        result (LockResult): Current lock result
        status_text (str): Lock status line
        zone (Zone): Zone under the scanner, if any
    """
    draw_reticle(image, result.locked)

    zone_text = f"zone: {zone.id} ({zone.role.value})" if zone is not None else "zone: -"
    draw_status_lines(image, [
        status_text,
        f"painting: {result.x:.2f},{result.y:.2f}",
        zone_text,
    ])
    return image


def setup_camera(cam_port):
    """
    Initialize and configure the camera.

    Args:
        cam_port (int): Camera port number

    Returns:
        cv.VideoCapture: Configured camera capture object
    """
    logger.info(f"Setting up camera on port {cam_port}")

    cap = cv.VideoCapture(cam_port)

    # Set buffer size BEFORE other properties to reduce latency
    cap.set(cv.CAP_PROP_BUFFERSIZE, CameraConfig.BUFFER_SIZE)
    cap.set(cv.CAP_PROP_FRAME_WIDTH, CameraConfig.DEFAULT_WIDTH)
    cap.set(cv.CAP_PROP_FRAME_HEIGHT, CameraConfig.DEFAULT_HEIGHT)

    actual_width = cap.get(cv.CAP_PROP_FRAME_WIDTH)
    actual_height = cap.get(cv.CAP_PROP_FRAME_HEIGHT)
    logger.info(f"Camera configured: {actual_width:.0f}x{actual_height:.0f}")

    return cap
