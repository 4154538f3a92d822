"""
ChArUco Webcam Calibration Toolkit

Captures frames of a printed ChArUco board from a webcam and computes the
camera intrinsics with OpenCV.

This package implements:
- ChArUco board construction and printable board rendering
- A live capture loop with interval or keypress frame selection
- Two-stage calibration (marker corners, then interpolated ChArUco corners)
- Calibration file storage in OpenCV FileStorage format
- Live board pose estimation with the calibrated intrinsics
"""

__version__ = "1.0.0"
__author__ = "ChArUco Calibration Team"

from .calibration import (
    CharuCoCalibrator, CalibrationValidator, MarkerDetector, PoseEstimator,
    create_charuco_board
)
from .capture import Camera, FrameCollector, PreviewWindow, CalibrationSession, PoseSession
from .io import save_calibration, load_calibration
from .data_models import (
    MarkerDetection, CaptureRecord, CameraParameters, CalibrationResult, PoseEstimate
)
from .exceptions import (
    CalibrationError, CameraOpenError, InsufficientCapturesError,
    InsufficientCornersError, CalibrationFileError
)

__all__ = [
    # Calibration
    'CharuCoCalibrator', 'CalibrationValidator', 'MarkerDetector', 'PoseEstimator',
    'create_charuco_board',
    # Capture
    'Camera', 'FrameCollector', 'PreviewWindow', 'CalibrationSession', 'PoseSession',
    # I/O
    'save_calibration', 'load_calibration',
    # Data Models
    'MarkerDetection', 'CaptureRecord', 'CameraParameters', 'CalibrationResult', 'PoseEstimate',
    # Errors
    'CalibrationError', 'CameraOpenError', 'InsufficientCapturesError',
    'InsufficientCornersError', 'CalibrationFileError'
]
