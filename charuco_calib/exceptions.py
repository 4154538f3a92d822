"""
Calibration error types.
"""


class CalibrationError(Exception):
    """Base exception for calibration failures."""
    pass


class CameraOpenError(CalibrationError):
    """Raised when the capture device cannot be opened."""
    pass


class InsufficientCapturesError(CalibrationError):
    """Raised when too few frames were captured to calibrate."""
    pass


class InsufficientCornersError(CalibrationError):
    """Raised when too few frames have enough ChArUco corners after interpolation."""
    pass


class CalibrationFileError(CalibrationError):
    """Raised when a calibration file cannot be written or read."""
    pass
