"""
Data Models for the ChArUco Calibration Toolkit

Defines all data structures used throughout the system.
"""

from dataclasses import dataclass, field
from typing import Tuple, List, Optional, Sequence
import numpy as np


@dataclass
class MarkerDetection:
    """ArUco markers found in a single frame."""
    corners: Sequence[np.ndarray] = ()  # one 1x4x2 array per marker
    ids: Optional[np.ndarray] = None  # Nx1 int32 marker ids
    rejected: Sequence[np.ndarray] = ()  # rejected candidate quads

    @property
    def count(self) -> int:
        """Number of detected markers."""
        return 0 if self.ids is None else len(self.ids)


@dataclass
class CaptureRecord:
    """A frame accepted for calibration, with its marker detections."""
    frame_index: int
    image: np.ndarray
    detection: MarkerDetection

    @property
    def image_size(self) -> Tuple[int, int]:
        """Frame size as (width, height)."""
        return (self.image.shape[1], self.image.shape[0])


@dataclass
class CameraParameters:
    """Camera intrinsic parameters and calibration quality metrics."""
    camera_matrix: np.ndarray  # 3x3 intrinsic matrix
    distortion_coeffs: np.ndarray  # 1xN distortion coefficients
    reprojection_error: float  # RMS reprojection error
    image_size: Tuple[int, int]  # (width, height)


@dataclass
class CalibrationResult:
    """Full output of a calibration run."""
    camera_parameters: CameraParameters
    rvecs: List[np.ndarray] = field(default_factory=list)
    tvecs: List[np.ndarray] = field(default_factory=list)
    frames_used: int = 0
    marker_reprojection_error: float = 0.0  # RMS of the marker-only first stage


@dataclass
class PoseEstimate:
    """Board pose relative to the camera for a single frame."""
    success: bool
    num_corners: int
    charuco_corners: Optional[np.ndarray] = None
    charuco_ids: Optional[np.ndarray] = None
    rvec: Optional[np.ndarray] = None
    tvec: Optional[np.ndarray] = None
