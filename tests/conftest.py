"""
Pytest configuration and fixtures for calibration toolkit tests.
"""

import pytest
import numpy as np
import cv2

from charuco_calib.calibration.charuco_board import create_charuco_board
from charuco_calib.capture.preview import NO_KEY
from charuco_calib.data_models import CameraParameters
from charuco_calib.exceptions import CameraOpenError
from charuco_calib.utils.config_manager import ConfigManager

# Synthetic camera used to render board views
IMAGE_SIZE = (1280, 720)
FOCAL_LENGTH = 1000.0
BOARD_PIXELS_PER_METER = 2500.0  # 0.04 m squares -> 100 px
BOARD_MARGIN_PX = 20

# (rx, ry, rz) in degrees and distance in meters
VIEW_POSES = [
    ((0, 0, 0), 0.55),
    ((20, 0, 0), 0.55),
    ((-20, 0, 0), 0.55),
    ((0, 20, 0), 0.55),
    ((0, -20, 0), 0.55),
    ((15, 15, 5), 0.6),
    ((-15, 15, -5), 0.6),
    ((15, -15, 10), 0.6),
    ((-15, -15, 0), 0.6),
    ((10, -5, 30), 0.6),
]


def pytest_configure(config):
    config.addinivalue_line("markers", "property: hypothesis property-based tests")


class FakeCamera:
    """Stands in for Camera, replaying a fixed list of frames."""

    def __init__(self, frames, fail_open=False):
        self.frames = list(frames)
        self.fail_open = fail_open
        self.opened = False
        self.released = False
        self.reads = 0

    def open(self):
        if self.fail_open:
            raise CameraOpenError("Failed to open camera 0")
        self.opened = True

    def read(self):
        if self.reads >= len(self.frames):
            return None
        frame = self.frames[self.reads]
        self.reads += 1
        return frame

    def release(self):
        self.released = True

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()


class FakePreview:
    """Stands in for PreviewWindow, replaying scripted key presses."""

    def __init__(self, keys=()):
        self.keys = list(keys)
        self.shown = []
        self.closed = False

    def show(self, image):
        self.shown.append(image)

    def poll_key(self):
        if self.keys:
            return self.keys.pop(0)
        return NO_KEY

    def close(self):
        self.closed = True


@pytest.fixture
def config_manager():
    """Fixture providing a configuration manager instance."""
    return ConfigManager()


@pytest.fixture
def tmp_config(tmp_path):
    """Configuration whose output files land in a temporary directory."""
    config = ConfigManager()
    config.set('output.calibration_file', str(tmp_path / "camera.yml"))
    config.set('output.board_image', str(tmp_path / "board.png"))
    config.set('charuco.board_image_width', 620)
    config.set('charuco.board_image_height', 877)
    return config


@pytest.fixture
def true_camera_matrix():
    """Intrinsics of the synthetic camera."""
    return np.array([
        [FOCAL_LENGTH, 0, IMAGE_SIZE[0] / 2],
        [0, FOCAL_LENGTH, IMAGE_SIZE[1] / 2],
        [0, 0, 1]
    ], dtype=np.float64)


@pytest.fixture
def board_and_dict():
    """Default 5x8 board."""
    return create_charuco_board()


@pytest.fixture
def render_view(board_and_dict, true_camera_matrix):
    """
    Fixture providing a function that renders the board seen by the synthetic camera.

    The printed board is modelled as the generated board image lying in the
    Z=0 plane, so a view is the board image warped by K [r1 r2 t].
    """
    board, _ = board_and_dict
    squares_x, squares_y = board.getChessboardSize()
    square_length = board.getSquareLength()

    board_w = int(round(squares_x * square_length * BOARD_PIXELS_PER_METER))
    board_h = int(round(squares_y * square_length * BOARD_PIXELS_PER_METER))
    board_image = board.generateImage(
        (board_w + 2 * BOARD_MARGIN_PX, board_h + 2 * BOARD_MARGIN_PX),
        marginSize=BOARD_MARGIN_PX
    )

    # Board image pixels -> metric plane coordinates
    scale = 1.0 / BOARD_PIXELS_PER_METER
    pixel_to_plane = np.array([
        [scale, 0, -BOARD_MARGIN_PX * scale],
        [0, scale, -BOARD_MARGIN_PX * scale],
        [0, 0, 1]
    ])
    center = np.array([board_w * scale / 2, board_h * scale / 2, 0.0])

    def render(angles_deg, distance):
        rvec = np.radians(np.asarray(angles_deg, dtype=np.float64))
        R, _ = cv2.Rodrigues(rvec)
        tvec = np.array([0.0, 0.0, distance]) - R @ center
        H = true_camera_matrix @ np.column_stack([R[:, 0], R[:, 1], tvec]) @ pixel_to_plane
        view = cv2.warpPerspective(
            board_image, H, IMAGE_SIZE,
            flags=cv2.INTER_LINEAR, borderValue=160
        )
        return cv2.cvtColor(view, cv2.COLOR_GRAY2BGR)

    return render


@pytest.fixture
def synthetic_views(render_view):
    """Board views from varied poses, as BGR frames."""
    return [render_view(angles, distance) for angles, distance in VIEW_POSES]


@pytest.fixture
def frontal_view(render_view):
    """A single fronto-parallel board view."""
    return render_view((0, 0, 0), 0.55)


@pytest.fixture
def blank_frame():
    """A frame with nothing to detect."""
    return np.full((IMAGE_SIZE[1], IMAGE_SIZE[0], 3), 128, dtype=np.uint8)


@pytest.fixture
def sample_camera_params():
    """Fixture providing sample camera parameters."""
    camera_matrix = np.array([
        [912.4, 0, 641.7],
        [0, 910.9, 357.2],
        [0, 0, 1]
    ], dtype=np.float64)

    distortion_coeffs = np.array([[0.11, -0.23, 0.001, 0.002, 0.05]], dtype=np.float64)

    return CameraParameters(
        camera_matrix=camera_matrix,
        distortion_coeffs=distortion_coeffs,
        reprojection_error=0.31,
        image_size=(1280, 720)
    )


@pytest.fixture
def fake_camera_factory():
    """Fixture providing the FakeCamera class."""
    return FakeCamera


@pytest.fixture
def fake_preview_factory():
    """Fixture providing the FakePreview class."""
    return FakePreview
