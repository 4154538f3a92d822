"""
Camera Calibration Module

Implements ChArUco-based intrinsic camera calibration and board pose estimation.
"""

from .charuco_board import create_charuco_board, board_from_config, save_board_image
from .marker_detector import MarkerDetector
from .charuco_calibrator import CharuCoCalibrator
from .calibration_validator import CalibrationValidator
from .pose_estimator import PoseEstimator

__all__ = [
    'create_charuco_board', 'board_from_config', 'save_board_image',
    'MarkerDetector', 'CharuCoCalibrator', 'CalibrationValidator', 'PoseEstimator'
]
