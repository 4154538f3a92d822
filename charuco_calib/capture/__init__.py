"""
Camera Capture Module

Camera access, preview window, frame selection and the interactive sessions.
"""

from .camera import Camera
from .preview import PreviewWindow, ESC_KEY
from .frame_collector import FrameCollector
from .session import CalibrationSession, PoseSession, camera_from_config

__all__ = [
    'Camera', 'PreviewWindow', 'ESC_KEY', 'FrameCollector',
    'CalibrationSession', 'PoseSession', 'camera_from_config'
]
