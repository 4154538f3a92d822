"""
Calibration file read/write.

Camera parameters are stored with OpenCV's FileStorage, so the format follows
the file extension (.yml/.yaml, .xml or .json) and the files can be read by
any OpenCV program.
"""

from pathlib import Path
from typing import Union
import logging

import cv2
import numpy as np

from ..data_models import CameraParameters
from ..exceptions import CalibrationFileError

logger = logging.getLogger(__name__)

FIELDS = (
    "image_width",
    "image_height",
    "camera_matrix",
    "distortion_coefficients",
    "avg_reprojection_error",
)


def save_calibration(path: Union[str, Path], params: CameraParameters) -> Path:
    """Write camera parameters to a calibration file.

    Args:
        path: Output file path.
        params: Calibrated camera parameters.

    Returns:
        Path to the written file.

    Raises:
        CalibrationFileError: If the file cannot be opened for writing.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fs = cv2.FileStorage(str(path), cv2.FILE_STORAGE_WRITE)
    if not fs.isOpened():
        raise CalibrationFileError(f"Cannot save output file: {path}")

    try:
        fs.write("image_width", int(params.image_size[0]))
        fs.write("image_height", int(params.image_size[1]))
        fs.write("camera_matrix", np.asarray(params.camera_matrix, dtype=np.float64))
        fs.write("distortion_coefficients", np.asarray(params.distortion_coeffs, dtype=np.float64))
        fs.write("avg_reprojection_error", float(params.reprojection_error))
    finally:
        fs.release()

    logger.info(f"Saved calibration to {path}")
    return path


def _read_node(fs: cv2.FileStorage, name: str, path: Path) -> cv2.FileNode:
    node = fs.getNode(name)
    if node.empty() or node.isNone():
        raise CalibrationFileError(f"Calibration file {path} is missing '{name}'")
    return node


def load_calibration(path: Union[str, Path]) -> CameraParameters:
    """Read camera parameters from a calibration file.

    Args:
        path: Calibration file path.

    Returns:
        CameraParameters loaded from the file.

    Raises:
        CalibrationFileError: If the file is missing, unreadable or incomplete.
    """
    path = Path(path)
    if not path.exists():
        raise CalibrationFileError(f"File not found: {path}")

    try:
        fs = cv2.FileStorage(str(path), cv2.FILE_STORAGE_READ)
    except cv2.error as e:
        raise CalibrationFileError(f"Cannot parse calibration file {path}: {e}") from e

    if not fs.isOpened():
        raise CalibrationFileError(f"Cannot open calibration file: {path}")

    try:
        width = int(_read_node(fs, "image_width", path).real())
        height = int(_read_node(fs, "image_height", path).real())
        camera_matrix = _read_node(fs, "camera_matrix", path).mat()
        dist_coeffs = _read_node(fs, "distortion_coefficients", path).mat()
        rep_error = float(_read_node(fs, "avg_reprojection_error", path).real())
    finally:
        fs.release()

    if camera_matrix is None or camera_matrix.shape != (3, 3):
        raise CalibrationFileError(f"Calibration file {path} has an invalid camera_matrix")
    if dist_coeffs is None or dist_coeffs.size == 0:
        raise CalibrationFileError(f"Calibration file {path} has empty distortion_coefficients")

    logger.info(f"Loaded calibration from {path}")
    return CameraParameters(
        camera_matrix=camera_matrix,
        distortion_coeffs=dist_coeffs,
        reprojection_error=rep_error,
        image_size=(width, height)
    )
