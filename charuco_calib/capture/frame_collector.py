"""
Calibration Frame Collector

Decides which live frames are kept for calibration and holds them until the
capture loop ends.
"""

import numpy as np
import logging
from typing import List, Sequence

from ..data_models import CaptureRecord, MarkerDetection

DEFAULT_CAPTURE_KEYS = (ord('c'), ord(' '))


class FrameCollector:
    """
    Collects frames that show board markers.

    In 'interval' mode a frame is kept automatically when at least frame_margin
    frames have passed since the previous capture. In 'manual' mode a frame is
    kept when one of the capture keys was pressed while it was on screen.
    """

    def __init__(self,
                 mode: str = 'interval',
                 frame_margin: int = 10,
                 capture_keys: Sequence[int] = DEFAULT_CAPTURE_KEYS):
        """
        Initialize frame collector.

        Args:
            mode: 'interval' or 'manual'
            frame_margin: Minimum frame distance between automatic captures
            capture_keys: Key codes that trigger a manual capture
        """
        if mode not in ('interval', 'manual'):
            raise ValueError(f"Unknown capture mode: {mode}")
        if frame_margin < 0:
            raise ValueError("frame_margin must not be negative")

        self.mode = mode
        self.frame_margin = frame_margin
        self.capture_keys = tuple(capture_keys)
        self.logger = logging.getLogger(__name__)

        self.captures: List[CaptureRecord] = []
        self._prev_index = -frame_margin

    def __len__(self) -> int:
        return len(self.captures)

    def should_capture(self, frame_index: int, detection: MarkerDetection, key: int) -> bool:
        """Whether the frame qualifies for capture under the current mode."""
        if detection.count == 0:
            return False
        if self.mode == 'manual':
            return key in self.capture_keys
        return frame_index - self._prev_index >= self.frame_margin

    def offer(self,
              frame_index: int,
              image: np.ndarray,
              detection: MarkerDetection,
              key: int = -1) -> bool:
        """
        Offer a frame for capture.

        Args:
            frame_index: Loop iteration the frame was read in
            image: The raw frame
            detection: Markers detected in the frame
            key: Key pressed while the frame was shown, or -1

        Returns:
            True if the frame was captured
        """
        if not self.should_capture(frame_index, detection, key):
            return False

        self.captures.append(CaptureRecord(frame_index=frame_index, image=image, detection=detection))
        self._prev_index = frame_index
        self.logger.info(f"Frame captured #{len(self.captures)}")
        return True

    def clear(self) -> None:
        """Drop all captures and restart the interval count."""
        self.captures = []
        self._prev_index = -self.frame_margin
