"""
Tests for CharuCo Board Calibrator
"""

import pytest
import numpy as np
import cv2
from hypothesis import given, settings, strategies as st

from charuco_calib.calibration.charuco_calibrator import CharuCoCalibrator
from charuco_calib.data_models import CaptureRecord
from charuco_calib.exceptions import InsufficientCapturesError, InsufficientCornersError
from charuco_calib.utils.config_manager import ConfigManager


def make_captures(calibrator, frames):
    """Detect markers in each frame and wrap them as captures."""
    return [
        CaptureRecord(frame_index=i, image=frame, detection=calibrator.marker_detector.detect(frame))
        for i, frame in enumerate(frames)
    ]


class TestCharuCoCalibrator:
    """Test suite for CharuCo calibrator."""

    @pytest.fixture
    def calibrator(self):
        """Fixture providing a CharuCo calibrator instance."""
        return CharuCoCalibrator()

    def test_calibrator_initialization(self, calibrator):
        """Test that calibrator picks up the default board and thresholds."""
        assert calibrator.squares_x == 5
        assert calibrator.squares_y == 8
        assert calibrator.square_length == pytest.approx(0.04)
        assert calibrator.marker_length == pytest.approx(0.02)
        assert calibrator.charuco_board is not None
        assert calibrator.min_captures == 1
        assert calibrator.min_charuco_corners == 5
        assert calibrator.min_valid_frames == 4
        assert calibrator.calibration_flags == 0

    def test_flags_from_config(self):
        """Test that solver options map to OpenCV calibration flags."""
        config = ConfigManager()
        config.set('calibration.fix_aspect_ratio', True)
        config.set('calibration.zero_tangent_dist', True)

        calibrator = CharuCoCalibrator(config)

        assert calibrator.calibration_flags & cv2.CALIB_FIX_ASPECT_RATIO
        assert calibrator.calibration_flags & cv2.CALIB_ZERO_TANGENT_DIST
        assert not calibrator.calibration_flags & cv2.CALIB_FIX_PRINCIPAL_POINT

    def test_calibrate_without_captures(self, calibrator):
        """Test that an empty capture list is rejected."""
        with pytest.raises(InsufficientCapturesError, match="Not enough captures"):
            calibrator.calibrate([])

    def test_calibrate_with_too_few_frames(self, calibrator, synthetic_views):
        """Test that fewer usable frames than min_valid_frames are rejected."""
        captures = make_captures(calibrator, synthetic_views[:2])

        with pytest.raises(InsufficientCornersError, match="Not enough corners"):
            calibrator.calibrate(captures)

    def test_calibrate_rejects_mixed_frame_sizes(self, calibrator, synthetic_views):
        """Test that frames of different sizes cannot be calibrated together."""
        captures = make_captures(calibrator, synthetic_views[:4])
        small = cv2.resize(synthetic_views[4], (640, 360))
        captures.append(CaptureRecord(frame_index=99, image=small,
                                      detection=calibrator.marker_detector.detect(small)))

        with pytest.raises(ValueError, match="differ in size"):
            calibrator.calibrate(captures)

    def test_calibrate_from_markers(self, calibrator, synthetic_views, true_camera_matrix):
        """Test the marker-only first stage gives usable approximate intrinsics."""
        captures = make_captures(calibrator, synthetic_views)

        rms, camera_matrix, dist_coeffs = calibrator.calibrate_from_markers(captures, (1280, 720))

        assert rms < 2.0
        assert camera_matrix.shape == (3, 3)
        assert camera_matrix[0, 0] == pytest.approx(true_camera_matrix[0, 0], rel=0.15)

    def test_interpolate_corners_drops_sparse_frames(self, calibrator, synthetic_views, blank_frame,
                                                     true_camera_matrix):
        """Test that frames without enough ChArUco corners are dropped."""
        captures = make_captures(calibrator, synthetic_views[:3])
        captures.append(CaptureRecord(frame_index=3, image=blank_frame,
                                      detection=calibrator.marker_detector.detect(blank_frame)))

        corners, ids = calibrator.interpolate_corners(captures, true_camera_matrix, np.zeros(5))

        assert len(corners) == 3
        assert len(ids) == 3
        for frame_corners, frame_ids in zip(corners, ids):
            assert len(frame_corners) == len(frame_ids)
            assert len(frame_corners) >= calibrator.min_charuco_corners

    def test_calibrate_synthetic_views(self, calibrator, synthetic_views, true_camera_matrix):
        """Test that calibration recovers the synthetic camera."""
        captures = make_captures(calibrator, synthetic_views)

        result = calibrator.calibrate(captures)
        params = result.camera_parameters

        assert params.image_size == (1280, 720)
        assert params.reprojection_error < 1.0
        assert params.camera_matrix.shape == (3, 3)
        assert params.distortion_coeffs.size >= 5

        fx, fy = params.camera_matrix[0, 0], params.camera_matrix[1, 1]
        assert fx == pytest.approx(true_camera_matrix[0, 0], rel=0.05)
        assert fy == pytest.approx(true_camera_matrix[1, 1], rel=0.05)
        assert abs(params.camera_matrix[0, 2] - 640) < 40
        assert abs(params.camera_matrix[1, 2] - 360) < 40

        assert result.frames_used == len(synthetic_views)
        assert len(result.rvecs) == result.frames_used
        assert len(result.tvecs) == result.frames_used

    def test_calibrate_with_fixed_aspect_ratio(self, synthetic_views):
        """Test that CALIB_FIX_ASPECT_RATIO keeps fx/fy at the configured ratio."""
        config = ConfigManager()
        config.set('calibration.fix_aspect_ratio', True)
        config.set('calibration.aspect_ratio', 1.0)
        calibrator = CharuCoCalibrator(config)

        result = calibrator.calibrate(make_captures(calibrator, synthetic_views))
        camera_matrix = result.camera_parameters.camera_matrix

        assert camera_matrix[0, 0] / camera_matrix[1, 1] == pytest.approx(1.0, abs=1e-6)

    @pytest.mark.property
    @settings(deadline=None, max_examples=20)
    @given(
        squares_x=st.integers(min_value=3, max_value=10),
        squares_y=st.integers(min_value=3, max_value=10)
    )
    def test_property_board_dimensions(self, squares_x, squares_y):
        """Property test: the calibrator builds a board for any valid dimensions."""
        config = ConfigManager()
        config.set('charuco.squares_x', squares_x)
        config.set('charuco.squares_y', squares_y)

        calibrator = CharuCoCalibrator(config)

        assert calibrator.squares_x == squares_x
        assert calibrator.squares_y == squares_y
        assert tuple(calibrator.charuco_board.getChessboardSize()) == (squares_x, squares_y)
        assert len(calibrator.charuco_board.getChessboardCorners()) == (squares_x - 1) * (squares_y - 1)
