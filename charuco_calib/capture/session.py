"""
Capture Sessions

Interactive loops tying camera, preview, detection and calibration together:
one collects board frames and calibrates, the other shows the live board pose
once the camera is calibrated.
"""

import itertools
import logging
from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np

from ..data_models import CaptureRecord, CalibrationResult, CameraParameters
from ..calibration.charuco_board import save_board_image
from ..calibration.charuco_calibrator import CharuCoCalibrator
from ..calibration.calibration_validator import CalibrationValidator
from ..calibration.pose_estimator import PoseEstimator
from ..io.calibration_file import save_calibration
from ..utils.config_manager import ConfigManager
from .camera import Camera
from .frame_collector import FrameCollector
from .preview import PreviewWindow, draw_hint, ESC_KEY

CALIBRATION_HINT = "Press 'ESC' to finish and calibrate"
POSE_HINT = "Press 'ESC' to quit"


def camera_from_config(config: ConfigManager) -> Camera:
    """Build the capture device described by the 'camera' configuration section."""
    camera_config = config.get_camera_params()
    return Camera(
        camera_id=camera_config.get('index', 0),
        resolution=(camera_config.get('frame_width', 1280), camera_config.get('frame_height', 720)),
    )


def show_frame(preview: PreviewWindow, vis: np.ndarray, hint: str, mirror: bool = False) -> None:
    """
    Display an annotated frame with its hint line.

    Mirroring applies to the displayed image only; detection runs on the
    frame as captured.
    """
    if mirror:
        vis = cv2.flip(vis, 1)
    preview.show(draw_hint(vis, hint))


class CalibrationSession:
    """Runs the capture loop, calibrates, and saves the camera parameters."""

    def __init__(self,
                 config_manager: Optional[ConfigManager] = None,
                 camera: Optional[Camera] = None,
                 preview: Optional[PreviewWindow] = None):
        """
        Initialize calibration session.

        Args:
            config_manager: Configuration manager instance
            camera: Capture device; built from configuration if None
            preview: Preview window; built from configuration if None
        """
        self.config = config_manager or ConfigManager()
        self.logger = logging.getLogger(__name__)

        capture_config = self.config.get_capture_params()
        self.camera = camera or camera_from_config(self.config)
        self.mirror_preview = bool(self.config.get_camera_params().get('flip_horizontal', False))
        self.preview = preview or PreviewWindow(
            window_name=capture_config.get('window_name', 'vis'),
            wait_ms=capture_config.get('wait_key_ms', 30)
        )
        self.collector = FrameCollector(
            mode=capture_config.get('mode', 'interval'),
            frame_margin=capture_config.get('frame_margin', 10)
        )

        self.calibrator = CharuCoCalibrator(self.config)
        self.validator = CalibrationValidator(self.config)
        self.detector = self.calibrator.marker_detector

        output_config = self.config.get_output_params()
        self.output_path = Path(output_config.get('calibration_file', 'camera.yml'))
        self.board_image_path = Path(output_config.get('board_image', 'board.png'))

    def write_board_image(self) -> Path:
        """Render the printable board next to the calibration output."""
        charuco_config = self.config.get_calibration_params()
        size = (
            charuco_config.get('board_image_width', 2480),
            charuco_config.get('board_image_height', 3508),
        )
        return save_board_image(
            self.board_image_path,
            self.calibrator.charuco_board,
            size=size,
            margin=charuco_config.get('board_margin', 10),
        )

    def capture(self) -> List[CaptureRecord]:
        """
        Show the live preview and collect board frames until ESC is pressed.

        Returns:
            Captured frames

        Raises:
            CameraOpenError: If the camera cannot be opened
        """
        self.collector.clear()

        with self.camera:
            try:
                for frame_index in itertools.count():
                    frame = self.camera.read()
                    if frame is None:
                        self.logger.warning("Camera stopped delivering frames, ending capture")
                        break

                    detection = self.detector.detect(frame)

                    vis = self.detector.draw(frame, detection)
                    show_frame(self.preview, vis, CALIBRATION_HINT, self.mirror_preview)

                    key = self.preview.poll_key()
                    if key == ESC_KEY:
                        break

                    self.collector.offer(frame_index, frame, detection, key)
            finally:
                self.preview.close()

        self.logger.info(f"Capture finished with {len(self.collector)} frames")
        return list(self.collector.captures)

    def run(self) -> CalibrationResult:
        """
        Run a full calibration: board image, capture loop, solve, validate, save.

        Returns:
            Calibration result

        Raises:
            CalibrationError: If the camera cannot be opened, too few frames
                were captured, or the file cannot be written
        """
        self.write_board_image()

        captures = self.capture()
        result = self.calibrator.calibrate(captures)

        self.validator.validate_intrinsic_calibration(result.camera_parameters)
        save_calibration(self.output_path, result.camera_parameters)
        return result


class PoseSession:
    """Shows the live board pose using previously calibrated intrinsics."""

    def __init__(self,
                 camera_parameters: CameraParameters,
                 config_manager: Optional[ConfigManager] = None,
                 camera: Optional[Camera] = None,
                 preview: Optional[PreviewWindow] = None):
        """
        Initialize pose session.

        Args:
            camera_parameters: Calibrated camera intrinsics
            config_manager: Configuration manager instance
            camera: Capture device; built from configuration if None
            preview: Preview window; built from configuration if None
        """
        self.config = config_manager or ConfigManager()
        self.logger = logging.getLogger(__name__)
        self.camera_parameters = camera_parameters

        capture_config = self.config.get_capture_params()
        self.camera = camera or camera_from_config(self.config)
        self.mirror_preview = bool(self.config.get_camera_params().get('flip_horizontal', False))
        self.preview = preview or PreviewWindow(
            window_name=capture_config.get('window_name', 'vis'),
            wait_ms=capture_config.get('pose_wait_key_ms', 10)
        )

        calibrator = CharuCoCalibrator(self.config)
        self.detector = calibrator.marker_detector
        self.pose_estimator = PoseEstimator(
            self.detector,
            camera_parameters,
            calibrator.squares_x,
            calibrator.squares_y,
            calibrator.square_length
        )

    def run(self) -> int:
        """
        Show the live pose preview until ESC is pressed or frames run out.

        Returns:
            Number of frames with a valid board pose

        Raises:
            CameraOpenError: If the camera cannot be opened
        """
        valid_poses = 0
        size_checked = False

        with self.camera:
            try:
                while True:
                    frame = self.camera.read()
                    if frame is None:
                        self.logger.warning("Camera stopped delivering frames")
                        break

                    if not size_checked:
                        frame_size = (frame.shape[1], frame.shape[0])
                        if frame_size != tuple(self.camera_parameters.image_size):
                            self.logger.warning(
                                f"Frame size {frame_size} differs from calibrated size "
                                f"{tuple(self.camera_parameters.image_size)}"
                            )
                        size_checked = True

                    detection = self.detector.detect(frame)
                    pose = self.pose_estimator.estimate(frame, detection)
                    if pose.success:
                        valid_poses += 1

                    vis = self.pose_estimator.draw(frame, pose)
                    show_frame(self.preview, vis, POSE_HINT, self.mirror_preview)

                    if self.preview.poll_key() == ESC_KEY:
                        break
            finally:
                self.preview.close()

        return valid_poses
