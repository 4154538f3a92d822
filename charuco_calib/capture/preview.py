"""
Preview window and keyboard input.
"""

import cv2
import numpy as np

ESC_KEY = 27
NO_KEY = -1

HINT_ORIGIN = (10, 20)
HINT_COLOR = (255, 255, 0)


def draw_hint(image: np.ndarray, text: str) -> np.ndarray:
    """Write a one-line hint in the top-left corner of the image, in place."""
    cv2.putText(
        image, text, HINT_ORIGIN,
        cv2.FONT_HERSHEY_SIMPLEX, 0.4, HINT_COLOR, 1, cv2.LINE_AA
    )
    return image


class PreviewWindow:
    """An OpenCV window that shows frames and polls the keyboard."""

    def __init__(self, window_name: str = "vis", wait_ms: int = 30):
        """
        Args:
            window_name: Title of the preview window
            wait_ms: How long poll_key blocks waiting for a key
        """
        self.window_name = window_name
        self.wait_ms = wait_ms
        self._shown = False

    def show(self, image: np.ndarray) -> None:
        cv2.imshow(self.window_name, image)
        self._shown = True

    def poll_key(self) -> int:
        """Wait briefly for a key press; returns the key code or NO_KEY."""
        key = cv2.waitKey(self.wait_ms)
        if key == -1:
            return NO_KEY
        return key & 0xFF

    def close(self) -> None:
        if self._shown:
            cv2.destroyWindow(self.window_name)
            self._shown = False
