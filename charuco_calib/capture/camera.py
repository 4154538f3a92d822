"""
Camera Capture

Blocking frame capture from an OpenCV video device at a fixed resolution.
"""

import cv2
import numpy as np
import logging
from typing import Optional, Tuple

from ..exceptions import CameraOpenError


class Camera:
    """
    Capture device opened by index.

    Used as a context manager: entering opens the device, leaving releases it.
    """

    def __init__(
        self,
        camera_id: int = 0,
        resolution: Tuple[int, int] = (1280, 720),
    ):
        """
        Initialize camera.

        Args:
            camera_id: OpenCV camera index
            resolution: Requested (width, height)
        """
        self.camera_id = camera_id
        self.resolution = resolution
        self.logger = logging.getLogger(__name__)

        self._cap: Optional[cv2.VideoCapture] = None

    @property
    def is_open(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    def open(self) -> None:
        """
        Open the device and request the configured resolution.

        Raises:
            CameraOpenError: If the device cannot be opened
        """
        if self.is_open:
            return

        cap = cv2.VideoCapture(self.camera_id)
        if not cap.isOpened():
            cap.release()
            raise CameraOpenError(f"Failed to open camera {self.camera_id}")

        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.resolution[0])
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.resolution[1])
        self._cap = cap

        # The driver may pick a different mode than requested
        actual_width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        actual_height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        if (actual_width, actual_height) != tuple(self.resolution):
            self.logger.warning(
                f"Camera {self.camera_id} runs at {actual_width}x{actual_height}, "
                f"requested {self.resolution[0]}x{self.resolution[1]}"
            )
        else:
            self.logger.info(f"Camera {self.camera_id}: {actual_width}x{actual_height}")

    def read(self) -> Optional[np.ndarray]:
        """Grab the next frame, or None when the device yields nothing."""
        if self._cap is None:
            return None

        ret, frame = self._cap.read()
        if not ret or frame is None:
            return None
        return frame

    def release(self) -> None:
        """Release the device."""
        if self._cap is not None:
            self._cap.release()
            self._cap = None

    def __enter__(self) -> "Camera":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()
