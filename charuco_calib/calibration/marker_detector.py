"""
ArUco Marker Detector

Finds the board's markers in camera frames, recovers missed markers using the
known board layout, and interpolates ChArUco corners from them.
"""

import cv2
import numpy as np
from typing import Tuple, Optional
import logging

from ..data_models import MarkerDetection

MARKER_COLOR = (0, 255, 255)


def to_gray(image: np.ndarray) -> np.ndarray:
    """Return a single-channel view of a BGR or grayscale image."""
    if len(image.shape) == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    return image


class MarkerDetector:
    """Detects and refines ArUco markers of a ChArUco board."""

    def __init__(self, board: cv2.aruco.CharucoBoard, aruco_dict: cv2.aruco.Dictionary):
        """
        Initialize marker detector.

        Args:
            board: ChArUco board the markers belong to
            aruco_dict: ArUco dictionary of the board
        """
        self.board = board
        self.aruco_dict = aruco_dict
        self.logger = logging.getLogger(__name__)

        self.detector_params = cv2.aruco.DetectorParameters()
        self.aruco_detector = cv2.aruco.ArucoDetector(self.aruco_dict, self.detector_params)

    def detect(self, image: np.ndarray) -> MarkerDetection:
        """
        Detect board markers in a frame.

        Args:
            image: Input BGR or grayscale frame

        Returns:
            Detected markers; ids is None when nothing was found
        """
        gray = to_gray(image)
        corners, ids, rejected = self.aruco_detector.detectMarkers(gray)

        if ids is None or len(ids) == 0:
            return MarkerDetection(corners=(), ids=None, rejected=rejected)

        # Recover markers the first pass missed, using the board layout
        corners, ids, rejected, _ = self.aruco_detector.refineDetectedMarkers(
            gray, self.board, corners, ids, rejected
        )

        self.logger.debug(f"Detected {len(ids)} markers")
        return MarkerDetection(corners=corners, ids=ids, rejected=rejected)

    def draw(self, image: np.ndarray, detection: MarkerDetection) -> np.ndarray:
        """
        Draw detected markers on a copy of the frame.

        Args:
            image: Frame the detection came from
            detection: Markers to draw

        Returns:
            Annotated copy of the frame
        """
        vis = image.copy()
        if len(vis.shape) == 2:
            vis = cv2.cvtColor(vis, cv2.COLOR_GRAY2BGR)
        if detection.count > 0:
            cv2.aruco.drawDetectedMarkers(vis, detection.corners, detection.ids, MARKER_COLOR)
        return vis

    def interpolate(self,
                    image: np.ndarray,
                    detection: MarkerDetection,
                    camera_matrix: Optional[np.ndarray] = None,
                    dist_coeffs: Optional[np.ndarray] = None) -> Tuple[int, Optional[np.ndarray], Optional[np.ndarray]]:
        """
        Interpolate ChArUco chessboard corners from detected markers.

        With camera parameters the corners are located by projecting the board
        through the estimated marker pose; without them, by local homographies.

        Args:
            image: Frame the detection came from
            detection: Detected markers
            camera_matrix: Optional camera intrinsic matrix
            dist_coeffs: Optional distortion coefficients

        Returns:
            Tuple of (corner count, corners Nx1x2, ids Nx1)
        """
        if detection.count == 0:
            return 0, None, None

        num_corners, charuco_corners, charuco_ids = cv2.aruco.interpolateCornersCharuco(
            detection.corners, detection.ids, to_gray(image), self.board,
            cameraMatrix=camera_matrix,
            distCoeffs=dist_coeffs
        )

        if charuco_corners is None or charuco_ids is None:
            return 0, None, None

        return int(num_corners), charuco_corners, charuco_ids
