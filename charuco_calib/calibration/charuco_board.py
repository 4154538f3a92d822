"""
ChArUco Board Construction

ChArUco boards combine ArUco markers with a chessboard pattern, giving
sub-pixel chessboard corners that stay identifiable under partial occlusion.
"""

import cv2
import numpy as np
import logging
from pathlib import Path
from typing import Tuple, Dict, Any, Union

from ..exceptions import CalibrationFileError

logger = logging.getLogger(__name__)

# A4 at 300 DPI
DEFAULT_BOARD_IMAGE_SIZE = (2480, 3508)


def get_dictionary(name: str) -> cv2.aruco.Dictionary:
    """
    Look up a predefined ArUco dictionary by name.

    Args:
        name: Dictionary name, e.g. 'DICT_6X6_250'

    Returns:
        The ArUco dictionary

    Raises:
        ValueError: If the name is not a predefined dictionary
    """
    if not name.startswith('DICT_') or not hasattr(cv2.aruco, name):
        raise ValueError(f"Unknown ArUco dictionary: {name}")
    return cv2.aruco.getPredefinedDictionary(getattr(cv2.aruco, name))


def create_charuco_board(
    squares_x: int = 5,
    squares_y: int = 8,
    square_length: float = 0.04,  # meters
    marker_length: float = 0.02,  # meters
    dictionary: str = "DICT_6X6_250",
) -> Tuple[cv2.aruco.CharucoBoard, cv2.aruco.Dictionary]:
    """
    Create a ChArUco board for calibration.

    Args:
        squares_x: Number of squares in X direction
        squares_y: Number of squares in Y direction
        square_length: Length of each square in meters
        marker_length: Length of ArUco marker in meters
        dictionary: ArUco dictionary name

    Returns:
        Tuple of (CharucoBoard, Dictionary)
    """
    aruco_dict = get_dictionary(dictionary)
    board = cv2.aruco.CharucoBoard(
        (squares_x, squares_y),
        square_length,
        marker_length,
        aruco_dict
    )
    return board, aruco_dict


def board_from_config(charuco_config: Dict[str, Any]) -> Tuple[cv2.aruco.CharucoBoard, cv2.aruco.Dictionary]:
    """Create the board described by the 'charuco' configuration section."""
    return create_charuco_board(
        squares_x=charuco_config.get('squares_x', 5),
        squares_y=charuco_config.get('squares_y', 8),
        square_length=charuco_config.get('square_length', 0.04),
        marker_length=charuco_config.get('marker_length', 0.02),
        dictionary=charuco_config.get('dictionary', 'DICT_6X6_250'),
    )


def generate_board_image(
    board: cv2.aruco.CharucoBoard,
    size: Tuple[int, int] = DEFAULT_BOARD_IMAGE_SIZE,
    margin: int = 10,
) -> np.ndarray:
    """
    Render a ChArUco board for printing.

    Args:
        board: ChArUco board object
        size: Output image size as (width, height) in pixels
        margin: White border around the board in pixels

    Returns:
        Grayscale board image
    """
    return board.generateImage(tuple(size), marginSize=margin)


def save_board_image(
    output_path: Union[str, Path],
    board: cv2.aruco.CharucoBoard,
    size: Tuple[int, int] = DEFAULT_BOARD_IMAGE_SIZE,
    margin: int = 10,
) -> Path:
    """
    Render the board and write it to disk.

    Args:
        output_path: Path to save the board image
        board: ChArUco board object
        size: Output image size as (width, height) in pixels
        margin: White border around the board in pixels

    Returns:
        Path of the written image

    Raises:
        CalibrationFileError: If the image cannot be written
    """
    output_path = Path(output_path)
    board_image = generate_board_image(board, size, margin)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        written = cv2.imwrite(str(output_path), board_image)
    except (OSError, cv2.error) as e:
        raise CalibrationFileError(f"Cannot write board image {output_path}: {e}") from e

    if not written:
        raise CalibrationFileError(f"Cannot write board image: {output_path}")

    logger.info(f"ChArUco board saved to {output_path} ({size[0]}x{size[1]} pixels)")
    return output_path
