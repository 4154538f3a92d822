"""
Configuration Management System

Handles loading, validation, and management of calibration toolkit parameters.
"""

import yaml
from typing import Dict, Any, Optional
from pathlib import Path

import cv2


CAPTURE_MODES = ('interval', 'manual')


class ConfigManager:
    """Manages configuration parameters for the calibration toolkit."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to configuration file. If None, uses default config.
        """
        self.config_path = config_path or self._get_default_config_path()
        self.config = self._load_config()
        self._validate_config()

    def _get_default_config_path(self) -> str:
        """Get path to default configuration file."""
        package_dir = Path(__file__).parent.parent
        return str(package_dir / "config" / "default_config.yaml")

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        try:
            with open(self.config_path, 'r') as file:
                config = yaml.safe_load(file)
        except FileNotFoundError:
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")
        except yaml.YAMLError as e:
            raise ValueError(f"Error parsing configuration file: {e}")

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ValueError(f"Configuration root must be a mapping: {self.config_path}")
        return config

    def _validate_config(self) -> None:
        """Validate configuration parameters for consistency and feasibility."""
        # Validate board geometry
        charuco = self.config.get('charuco') or {}
        if charuco.get('squares_x', 5) < 2 or charuco.get('squares_y', 8) < 2:
            raise ValueError("ChArUco board needs at least 2 squares in each direction")

        square_length = float(charuco.get('square_length', 0.04))
        marker_length = float(charuco.get('marker_length', 0.02))
        if square_length <= 0 or marker_length <= 0:
            raise ValueError("square_length and marker_length must be positive")
        if marker_length >= square_length:
            raise ValueError("marker_length must be less than square_length")

        dict_name = charuco.get('dictionary', 'DICT_6X6_250')
        if not str(dict_name).startswith('DICT_') or not hasattr(cv2.aruco, str(dict_name)):
            raise ValueError(f"Unknown ArUco dictionary: {dict_name}")

        # Validate camera resolution
        camera = self.config.get('camera') or {}
        if camera.get('frame_width', 1280) <= 0 or camera.get('frame_height', 720) <= 0:
            raise ValueError("Camera resolution must be positive")

        # Validate capture policy
        capture = self.config.get('capture') or {}
        if capture.get('mode', 'interval') not in CAPTURE_MODES:
            raise ValueError(f"Capture mode must be one of {CAPTURE_MODES}")
        if capture.get('frame_margin', 10) < 0:
            raise ValueError("frame_margin must not be negative")

        # Validate solver thresholds
        calibration = self.config.get('calibration') or {}
        if calibration.get('min_charuco_corners', 5) < 4:
            raise ValueError("min_charuco_corners must be at least 4")
        if calibration.get('min_captures', 1) < 1 or calibration.get('min_valid_frames', 4) < 1:
            raise ValueError("min_captures and min_valid_frames must be at least 1")
        if float(calibration.get('aspect_ratio', 1.0)) <= 0:
            raise ValueError("aspect_ratio must be positive")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key (e.g., 'charuco.squares_x')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value using dot notation.

        Args:
            key: Configuration key (e.g., 'capture.mode')
            value: Value to set
        """
        keys = key.split('.')
        config_ref = self.config

        for k in keys[:-1]:
            if not isinstance(config_ref.get(k), dict):
                config_ref[k] = {}
            config_ref = config_ref[k]

        config_ref[keys[-1]] = value
        self._validate_config()

    def save(self, output_path: Optional[str] = None) -> None:
        """
        Save current configuration to file.

        Args:
            output_path: Path to save configuration. If None, overwrites current file.
        """
        save_path = output_path or self.config_path

        with open(save_path, 'w') as file:
            yaml.dump(self.config, file, default_flow_style=False, indent=2)

    def get_camera_params(self) -> Dict[str, Any]:
        """Get capture device parameters as a dictionary."""
        return self.config.get('camera') or {}

    def get_calibration_params(self) -> Dict[str, Any]:
        """Get ChArUco board parameters as a dictionary."""
        return self.config.get('charuco') or {}

    def get_capture_params(self) -> Dict[str, Any]:
        """Get capture loop parameters as a dictionary."""
        return self.config.get('capture') or {}

    def get_solver_params(self) -> Dict[str, Any]:
        """Get calibration solver parameters and thresholds as a dictionary."""
        return self.config.get('calibration') or {}

    def get_output_params(self) -> Dict[str, Any]:
        """Get output file locations as a dictionary."""
        return self.config.get('output') or {}

    def get_logging_params(self) -> Dict[str, Any]:
        """Get logging parameters as a dictionary."""
        return self.config.get('logging') or {}
