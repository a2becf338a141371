"""
Pintura Sonora - Camera-driven sound exploration of a painting.

This is the main entry point: it wires the camera, the mapping source
(auto-lock engine or manual calibration), the zone map, the trigger
controller and the audio worker into one display-synchronized loop.
"""

import logging
import os
import sys
import threading

import cv2 as cv

from pintura_sonora.args_parser import get_args
from pintura_sonora.audio.audio import RoleSoundPlayer
from pintura_sonora.audio.worker import AudioCommand, AudioWorker
from pintura_sonora.config import LOG_FORMAT, LOG_LEVEL, AudioConfig, UIConfig
from pintura_sonora.core.trigger import TriggerController
from pintura_sonora.core.utils import frame_to_normalized, load_reference_image, now_ms, select_camera_port
from pintura_sonora.mapping.painting_pack import OBRA_BOSS, load_painting_pack
from pintura_sonora.mapping.zones import find_zone
from pintura_sonora.ui.display import (
    draw_calibration_taps,
    draw_lock_overlay,
    draw_outline,
    reference_outline,
    setup_camera,
)
from pintura_sonora.utils.coords import Point, clamp
from pintura_sonora.vision.autolock import AutoLockEngine
from pintura_sonora.vision.calibration import CalibrationError, ManualCalibration
from pintura_sonora.vision.features import create_provider

logger = logging.getLogger(__name__)

QUIT_KEYS = (ord('q'), 27)
RESET_KEY = ord('r')
VOLUME_UP_KEYS = (ord('+'), ord('='))
VOLUME_DOWN_KEYS = (ord('-'), ord('_'))


def initialize_system(args):
    """
    Initialize all system components.

    Args:
        args (argparse.Namespace): Parsed command line arguments

    Returns:
        dict: Dictionary containing all initialized components
    """
    logger.info("Initializing Pintura Sonora...")

    pack = load_painting_pack(args.pack) if args.pack else OBRA_BOSS

    manual = args.manual
    if not manual and not args.pack and not os.path.exists(pack.reference_image):
        logger.warning(f"Built-in pack image {pack.reference_image} not found, "
                       f"falling back to manual calibration (use --pack for auto-lock)")
        manual = True

    if manual:
        engine = None
        calibration = ManualCalibration()
        logger.info("Manual calibration: tap the painting corners TL, TR, BR, BL")
    else:
        calibration = None
        engine = AutoLockEngine(
            create_provider(args.features),
            analysis_width=args.analysis_width,
            vision_interval_ms=args.vision_rate,
            hold_ms=args.hold,
            min_matches=args.min_matches,
            min_inliers=args.min_inliers,
        )
        engine.init(load_reference_image(pack.reference_image))

    stop_event = threading.Event()
    audio_worker = None
    if args.no_audio:
        on_trigger = lambda role: logger.info(f"Trigger: {role.value}")  # noqa: E731
    else:
        audio_worker = AudioWorker(RoleSoundPlayer(pack.sounds), stop_event)
        audio_worker.start()
        on_trigger = audio_worker.play_role

    trigger = TriggerController(on_trigger, cooldown_ms=args.cooldown, repeat_ms=args.repeat)

    cam_port = args.camera if args.camera is not None else select_camera_port()

    logger.info("System initialization complete")

    return {
        'pack': pack,
        'cam_port': cam_port,
        'engine': engine,
        'calibration': calibration,
        'trigger': trigger,
        'audio_worker': audio_worker,
        'stop_event': stop_event,
        'volume': AudioConfig.MASTER_VOLUME,
    }


def make_mouse_callback(calibration, frame_holder):
    """
    Create an OpenCV mouse callback that turns clicks into calibration taps.

    Args:
        calibration (ManualCalibration): Calibration receiving the taps
        frame_holder (dict): Holds the shape of the last displayed frame
    """
    def on_mouse(event, x, y, flags, param):
        if event != cv.EVENT_LBUTTONDOWN or frame_holder.get('shape') is None:
            return
        tap = Point(*frame_to_normalized(x, y, frame_holder['shape']))
        try:
            calibration.add_tap(tap)
        except CalibrationError as e:
            logger.warning(f"Tap rejected: {e}")

    return on_mouse


def process_frame(frame, components, now):
    """
    Run one tick: locate the scanner, resolve the zone, fire triggers, draw the overlay.

    Args:
        frame (numpy.ndarray): Camera frame, drawn on in place
        components (dict): System components
        now (float): Current time in milliseconds

    Returns:
        tuple: (LockResult, Zone or None)
    """
    engine = components['engine']
    calibration = components['calibration']
    pack = components['pack']

    if calibration is not None:
        result = calibration.locate()
        status = "CALIBRATED" if calibration.is_complete else f"TAP CORNER {len(calibration.taps) + 1}/4"
    else:
        result = engine.process(frame, now)
        status = engine.tracking_status(result)

    zone = find_zone(pack.zones, result.x, result.y) if result.locked else None
    components['trigger'].update(zone, now)

    # Overlay
    h, w = frame.shape[:2]
    if calibration is not None:
        draw_calibration_taps(frame, calibration.taps)
    elif result.locked and engine.lock_state is not None:
        aw, ah = engine.lock_state.analysis_size
        pts = reference_outline(engine.lock_state.homography, (w / aw, h / ah),
                                (engine.reference.width, engine.reference.height))
        draw_outline(frame, pts)
    draw_lock_overlay(frame, result, status, zone)

    return result, zone


def handle_keyboard_input(waitkey, components):
    """
    Handle keyboard input for user controls.

    Args:
        waitkey (int): Key code from cv.waitKey()
        components (dict): System components

    Returns:
        bool: True if should continue, False if should exit
    """
    # Quit
    if waitkey in QUIT_KEYS:
        logger.info('Exiting...')
        return False

    audio_worker = components['audio_worker']

    # Reset lock or calibration and silence what is still playing
    if waitkey == RESET_KEY:
        if components['calibration'] is not None:
            components['calibration'].reset()
        else:
            components['engine'].reset()
        components['trigger'].reset()
        if audio_worker is not None:
            audio_worker.enqueue_command(AudioCommand('stop_all'))

    # Volume
    if waitkey in VOLUME_UP_KEYS or waitkey in VOLUME_DOWN_KEYS:
        step = AudioConfig.VOLUME_STEP if waitkey in VOLUME_UP_KEYS else -AudioConfig.VOLUME_STEP
        components['volume'] = round(clamp(components['volume'] + step), 2)
        logger.info(f"Volume {components['volume']:.2f}")
        if audio_worker is not None:
            audio_worker.enqueue_command(AudioCommand('set_volume', volume=components['volume']))

    return True


def run(components):
    """
    Main display loop.

    Args:
        components (dict): System components from `initialize_system`
    """
    cap = setup_camera(components['cam_port'])
    if not cap.isOpened():
        logger.error(f"Cannot open camera on port {components['cam_port']}")
        return

    frame_holder = {'shape': None}
    cv.namedWindow(UIConfig.WINDOW_NAME)
    if components['calibration'] is not None:
        cv.setMouseCallback(UIConfig.WINDOW_NAME, make_mouse_callback(components['calibration'], frame_holder))

    try:
        while not components['stop_event'].is_set():
            ret, frame = cap.read()
            if not ret or frame is None:
                logger.debug("No frame from camera")
                if (cv.waitKey(10) & 0xFF) in QUIT_KEYS:
                    break
                continue

            frame_holder['shape'] = frame.shape
            process_frame(frame, components, now_ms())
            cv.imshow(UIConfig.WINDOW_NAME, frame)

            if not handle_keyboard_input(cv.waitKey(1) & 0xFF, components):
                break
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        cap.release()
        cv.destroyAllWindows()


def shutdown(components):
    """Stop background workers."""
    components['stop_event'].set()
    if components['audio_worker'] is not None:
        components['audio_worker'].stop()
    logger.info("Shutdown complete")


def main(argv=None):
    args = get_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else LOG_LEVEL,
        format=LOG_FORMAT
    )

    try:
        components = initialize_system(args)
    except (OSError, ValueError) as e:
        logger.error(f"Initialization failed: {e}")
        sys.exit(1)

    try:
        run(components)
    finally:
        shutdown(components)
