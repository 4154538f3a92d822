"""
CharuCo Board Calibrator

Two-stage intrinsic calibration from captured ChArUco board frames. A first,
marker-only calibration gives approximate intrinsics; those are used to
interpolate the chessboard corners precisely, and the final calibration runs on
the interpolated corners.
"""

import cv2
import numpy as np
from typing import Tuple, List, Optional, Sequence
import logging

from ..data_models import CaptureRecord, CameraParameters, CalibrationResult
from ..exceptions import InsufficientCapturesError, InsufficientCornersError
from ..utils.config_manager import ConfigManager
from .charuco_board import board_from_config
from .marker_detector import MarkerDetector


class CharuCoCalibrator:
    """Calibrates camera intrinsics from frames showing a ChArUco board."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """
        Initialize CharuCo calibrator.

        Args:
            config_manager: Configuration manager instance
        """
        self.config = config_manager or ConfigManager()
        self.logger = logging.getLogger(__name__)

        # Board geometry
        charuco_config = self.config.get_calibration_params()
        self.squares_x = charuco_config.get('squares_x', 5)
        self.squares_y = charuco_config.get('squares_y', 8)
        self.square_length = charuco_config.get('square_length', 0.04)  # meters
        self.marker_length = charuco_config.get('marker_length', 0.02)  # meters
        self.charuco_board, self.aruco_dict = board_from_config(charuco_config)
        self.marker_detector = MarkerDetector(self.charuco_board, self.aruco_dict)

        # Solver thresholds
        solver_config = self.config.get_solver_params()
        self.min_captures = solver_config.get('min_captures', 1)
        self.min_charuco_corners = solver_config.get('min_charuco_corners', 5)
        self.min_valid_frames = solver_config.get('min_valid_frames', 4)
        self.aspect_ratio = float(solver_config.get('aspect_ratio', 1.0))
        self.calibration_flags = self._build_flags(solver_config)

        self.logger.info(f"CharuCo calibrator initialized: {self.squares_x}x{self.squares_y} board")

    @staticmethod
    def _build_flags(solver_config) -> int:
        flags = 0
        if solver_config.get('fix_aspect_ratio', False):
            flags |= cv2.CALIB_FIX_ASPECT_RATIO
        if solver_config.get('zero_tangent_dist', False):
            flags |= cv2.CALIB_ZERO_TANGENT_DIST
        if solver_config.get('fix_principal_point', False):
            flags |= cv2.CALIB_FIX_PRINCIPAL_POINT
        return flags

    def _initial_camera_matrix(self) -> np.ndarray:
        # Only fx/fy is read by the solver, and only with CALIB_FIX_ASPECT_RATIO
        camera_matrix = np.eye(3, dtype=np.float64)
        camera_matrix[0, 0] = self.aspect_ratio
        return camera_matrix

    def _image_size(self, captures: Sequence[CaptureRecord]) -> Tuple[int, int]:
        sizes = {capture.image_size for capture in captures}
        if len(sizes) != 1:
            raise ValueError(f"Captured frames differ in size: {sorted(sizes)}")
        return sizes.pop()

    def calibrate_from_markers(self,
                               captures: Sequence[CaptureRecord],
                               image_size: Tuple[int, int]) -> Tuple[float, np.ndarray, np.ndarray]:
        """
        Calibrate from raw marker corners, without chessboard interpolation.

        Args:
            captures: Captured frames with marker detections
            image_size: Frame size as (width, height)

        Returns:
            Tuple of (rms error, camera matrix, distortion coefficients)
        """
        object_points = []
        image_points = []

        for capture in captures:
            obj_pts, img_pts = self.charuco_board.matchImagePoints(
                list(capture.detection.corners), capture.detection.ids
            )
            if obj_pts is None or len(obj_pts) < 4:
                self.logger.debug(f"Frame {capture.frame_index}: no board markers matched")
                continue
            object_points.append(obj_pts)
            image_points.append(img_pts)

        if not object_points:
            raise InsufficientCapturesError("Not enough captures for calibration")

        rms, camera_matrix, dist_coeffs, _, _ = cv2.calibrateCamera(
            object_points, image_points, image_size,
            self._initial_camera_matrix(), None,
            flags=self.calibration_flags
        )

        self.logger.info(f"Marker calibration: RMS error = {rms:.4f} pixels over {len(object_points)} frames")
        return rms, camera_matrix, dist_coeffs

    def interpolate_corners(self,
                            captures: Sequence[CaptureRecord],
                            camera_matrix: np.ndarray,
                            dist_coeffs: np.ndarray) -> Tuple[List[np.ndarray], List[np.ndarray]]:
        """
        Interpolate ChArUco corners for every capture using approximate intrinsics.

        Frames with fewer than min_charuco_corners corners are dropped.

        Args:
            captures: Captured frames with marker detections
            camera_matrix: Approximate camera matrix
            dist_coeffs: Approximate distortion coefficients

        Returns:
            Tuple of (per-frame corners, per-frame ids) for the kept frames
        """
        all_charuco_corners = []
        all_charuco_ids = []

        for capture in captures:
            num_corners, charuco_corners, charuco_ids = self.marker_detector.interpolate(
                capture.image, capture.detection, camera_matrix, dist_coeffs
            )

            if num_corners >= self.min_charuco_corners:
                all_charuco_corners.append(charuco_corners)
                all_charuco_ids.append(charuco_ids)
            else:
                self.logger.debug(f"Frame {capture.frame_index}: only {num_corners} ChArUco corners")

        return all_charuco_corners, all_charuco_ids

    def calibrate(self, captures: Sequence[CaptureRecord]) -> CalibrationResult:
        """
        Calibrate camera intrinsic parameters from captured board frames.

        Args:
            captures: Frames accepted during the capture loop

        Returns:
            Calibration result with camera parameters and per-view poses

        Raises:
            InsufficientCapturesError: If fewer than min_captures frames were captured
            InsufficientCornersError: If too few frames have enough interpolated corners
        """
        if len(captures) < self.min_captures:
            raise InsufficientCapturesError("Not enough captures for calibration")

        image_size = self._image_size(captures)
        self.logger.info(f"Starting intrinsic calibration with {len(captures)} frames at {image_size[0]}x{image_size[1]}")

        marker_rms, camera_matrix, dist_coeffs = self.calibrate_from_markers(captures, image_size)

        all_charuco_corners, all_charuco_ids = self.interpolate_corners(
            captures, camera_matrix, dist_coeffs
        )

        if len(all_charuco_corners) < self.min_valid_frames:
            raise InsufficientCornersError("Not enough corners for calibration")

        object_points = []
        image_points = []
        for charuco_corners, charuco_ids in zip(all_charuco_corners, all_charuco_ids):
            obj_pts, img_pts = self.charuco_board.matchImagePoints(charuco_corners, charuco_ids)
            object_points.append(obj_pts)
            image_points.append(img_pts)

        rms, camera_matrix, dist_coeffs, rvecs, tvecs = cv2.calibrateCamera(
            object_points, image_points, image_size,
            self._initial_camera_matrix(), None,
            flags=self.calibration_flags
        )

        self.logger.info(f"Calibration completed: RMS error = {rms:.4f} pixels over {len(object_points)} frames")

        camera_parameters = CameraParameters(
            camera_matrix=camera_matrix,
            distortion_coeffs=dist_coeffs,
            reprojection_error=float(rms),
            image_size=image_size
        )

        return CalibrationResult(
            camera_parameters=camera_parameters,
            rvecs=list(rvecs),
            tvecs=list(tvecs),
            frames_used=len(object_points),
            marker_reprojection_error=float(marker_rms)
        )
