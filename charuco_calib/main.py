"""
Main entry point for the ChArUco calibration toolkit

Calibrates a webcam from a printed ChArUco board and shows the live board pose
with the resulting intrinsics.
"""

import argparse
import logging
import sys
from pathlib import Path

import numpy as np

from charuco_calib.capture.session import CalibrationSession, PoseSession
from charuco_calib.exceptions import CalibrationError
from charuco_calib.io.calibration_file import load_calibration
from charuco_calib.utils.config_manager import ConfigManager
from charuco_calib.utils.logging_utils import setup_logging

logger = logging.getLogger("charuco_calib.main")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="ChArUco board webcam calibration"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration file"
    )

    parser.add_argument(
        "--mode",
        choices=("auto", "calibrate", "estimate"),
        default="auto",
        help="auto: calibrate if no calibration file exists, then show the live pose; "
             "calibrate: capture and calibrate only; estimate: live pose from an existing file"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        help="Calibration file to write or read (default from config: camera.yml)"
    )

    parser.add_argument(
        "--camera-index",
        type=int,
        help="OpenCV camera index"
    )

    parser.add_argument(
        "--board-image",
        type=str,
        help="Where to write the printable board image"
    )

    parser.add_argument(
        "--capture-mode",
        choices=("interval", "manual"),
        help="interval: capture automatically every few frames; manual: capture on 'c' or space"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        help="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    parser.add_argument(
        "--log-file",
        type=str,
        help="Optional log file"
    )

    return parser


def apply_overrides(config: ConfigManager, args: argparse.Namespace) -> None:
    """Copy command-line overrides into the configuration."""
    if args.output:
        config.set('output.calibration_file', args.output)
    if args.camera_index is not None:
        config.set('camera.index', args.camera_index)
    if args.board_image:
        config.set('output.board_image', args.board_image)
    if args.capture_mode:
        config.set('capture.mode', args.capture_mode)
    if args.log_level:
        config.set('logging.level', args.log_level)
    if args.log_file:
        config.set('logging.file', args.log_file)


def run_calibration(config: ConfigManager) -> None:
    result = CalibrationSession(config).run()
    logger.info(
        f"Calibrated from {result.frames_used} frames, "
        f"average reprojection error {result.camera_parameters.reprojection_error:.4f} pixels"
    )


def run_estimation(config: ConfigManager, calibration_path: Path) -> None:
    params = load_calibration(calibration_path)
    with np.printoptions(precision=4, suppress=True):
        logger.info(f"camera_matrix:\n{params.camera_matrix}")
        logger.info(f"dist_coeffs: {params.distortion_coeffs.ravel()}")

    PoseSession(params, config).run()


def main(argv=None) -> int:
    """Main entry point for the calibration toolkit."""
    args = build_parser().parse_args(argv)

    try:
        config = ConfigManager(args.config)
        apply_overrides(config, args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return 1

    logging_config = config.get_logging_params()
    try:
        setup_logging(logging_config.get('level') or 'INFO', logging_config.get('file'))
    except ValueError as e:
        print(f"Error configuring logging: {e}", file=sys.stderr)
        return 1

    calibration_path = Path(config.get('output.calibration_file', 'camera.yml'))

    if args.mode == "calibrate" or (args.mode == "auto" and not calibration_path.exists()):
        try:
            run_calibration(config)
        except (CalibrationError, ValueError) as e:
            logger.error(str(e))
            logger.error("Cannot calibrate the camera")
            return 1
        if args.mode == "calibrate":
            return 0

    try:
        run_estimation(config, calibration_path)
    except CalibrationError as e:
        logger.error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
