"""
ChArUco Board Pose Estimator

Estimates the board pose in live frames once the camera is calibrated.
"""

import cv2
import numpy as np
import logging

from ..data_models import CameraParameters, MarkerDetection, PoseEstimate
from .marker_detector import MarkerDetector

CORNER_COLOR = (0, 255, 255)


class PoseEstimator:
    """Estimates and draws the ChArUco board pose with known intrinsics."""

    def __init__(self,
                 marker_detector: MarkerDetector,
                 camera_parameters: CameraParameters,
                 squares_x: int,
                 squares_y: int,
                 square_length: float):
        """
        Initialize pose estimator.

        Args:
            marker_detector: Detector bound to the calibration board
            camera_parameters: Calibrated camera intrinsics
            squares_x: Number of squares in X direction
            squares_y: Number of squares in Y direction
            square_length: Length of each square in meters
        """
        self.marker_detector = marker_detector
        self.board = marker_detector.board
        self.camera_matrix = camera_parameters.camera_matrix
        self.dist_coeffs = camera_parameters.distortion_coeffs
        self.axis_length = 0.5 * min(squares_x, squares_y) * square_length
        self.logger = logging.getLogger(__name__)

    def estimate(self, image: np.ndarray, detection: MarkerDetection) -> PoseEstimate:
        """
        Estimate the board pose in a frame.

        Args:
            image: Input frame
            detection: Markers detected in the frame

        Returns:
            Pose estimate; success is False when fewer than 4 corners were found
            or PnP failed
        """
        num_corners, charuco_corners, charuco_ids = self.marker_detector.interpolate(
            image, detection, self.camera_matrix, self.dist_coeffs
        )

        if num_corners < 4:
            return PoseEstimate(
                success=False,
                num_corners=num_corners,
                charuco_corners=charuco_corners,
                charuco_ids=charuco_ids
            )

        obj_pts, img_pts = self.board.matchImagePoints(charuco_corners, charuco_ids)
        ok, rvec, tvec = cv2.solvePnP(obj_pts, img_pts, self.camera_matrix, self.dist_coeffs)

        if not ok:
            self.logger.debug("solvePnP failed")

        return PoseEstimate(
            success=bool(ok),
            num_corners=num_corners,
            charuco_corners=charuco_corners,
            charuco_ids=charuco_ids,
            rvec=rvec if ok else None,
            tvec=tvec if ok else None
        )

    def draw(self, image: np.ndarray, pose: PoseEstimate) -> np.ndarray:
        """
        Draw interpolated corners and, for a valid pose, the board axes.

        Args:
            image: Frame the pose was estimated from
            pose: Pose estimate for the frame

        Returns:
            Annotated copy of the frame
        """
        vis = image.copy()
        if len(vis.shape) == 2:
            vis = cv2.cvtColor(vis, cv2.COLOR_GRAY2BGR)

        if pose.num_corners > 0 and pose.charuco_corners is not None:
            cv2.aruco.drawDetectedCornersCharuco(
                vis, pose.charuco_corners, pose.charuco_ids, CORNER_COLOR
            )

        if pose.success:
            cv2.drawFrameAxes(
                vis, self.camera_matrix, self.dist_coeffs,
                pose.rvec, pose.tvec, self.axis_length
            )

        return vis
