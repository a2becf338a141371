"""
Utility functions for Pintura Sonora.

This module contains helper functions for timing, camera management and
image loading.
"""

import logging
import time

import cv2 as cv
import numpy as np

logger = logging.getLogger(__name__)


# ==================== Timing ====================

def now_ms() -> float:
    """
    Monotonic clock in milliseconds, used for every lock and trigger timestamp.
    """
    return time.monotonic() * 1000.0


# ==================== Camera Management ====================

def list_camera_ports(max_failures=3):
    """
    Test camera ports and return the working ones.

    Args:
        max_failures (int): Stop after this many consecutive ports fail to open

    Returns:
        list: Tuples of (port, height, width) for ports that read frames
    """
    working_ports = []
    failures = 0
    dev_port = 0

    while failures < max_failures:
        camera = cv.VideoCapture(dev_port)
        if not camera.isOpened():
            failures += 1
            logger.debug(f"Port {dev_port} is not working.")
        else:
            failures = 0
            is_reading, _ = camera.read()
            w = camera.get(cv.CAP_PROP_FRAME_WIDTH)
            h = camera.get(cv.CAP_PROP_FRAME_HEIGHT)
            if is_reading:
                logger.info(f"Port {dev_port} is working and reads images ({h} x {w})")
                working_ports.append((dev_port, h, w))
            else:
                logger.info(f"Port {dev_port} for camera ({h} x {w}) is present but does not read.")
        camera.release()
        dev_port += 1

    return working_ports


def select_camera_port():
    """
    Select the first working camera port.

    Returns:
        int: Selected camera port number
    """
    working_ports = list_camera_ports()

    if working_ports:
        logger.info(f"Auto-selected camera port {working_ports[0][0]}")
        return working_ports[0][0]

    logger.warning("No working cameras detected, using default port 0")
    return 0


# ==================== File Loading ====================

def load_reference_image(filename: str) -> np.ndarray:
    """
    Load the reference painting image.

    Raises:
        FileNotFoundError: If the image cannot be read
    """
    image = cv.imread(filename, cv.IMREAD_COLOR)
    if image is None:
        raise FileNotFoundError(f"Cannot read reference image: {filename}")

    logger.info(f"Loaded reference image {filename} ({image.shape[1]}x{image.shape[0]})")
    return image


def frame_to_normalized(x, y, frame_shape):
    """
    Convert pixel coordinates of a displayed frame to frame-normalized coordinates.

    Args:
        x (float): Pixel column
        y (float): Pixel row
        frame_shape (tuple): Frame shape (height, width, ...)

    Returns:
        tuple: (x, y) in 0..1
    """
    h, w = frame_shape[:2]
    return x / float(w), y / float(h)
