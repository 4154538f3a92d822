"""
Calibration Quality Validator

Checks calibrated intrinsics for plausibility and reports a quality score.
"""

import logging
from typing import Dict, Any, Optional

from ..data_models import CameraParameters
from ..utils.config_manager import ConfigManager


class CalibrationValidator:
    """Validates calibration quality metrics against configured thresholds."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """
        Initialize calibration validator.

        Args:
            config_manager: Configuration manager instance
        """
        self.config = config_manager or ConfigManager()
        self.logger = logging.getLogger(__name__)

        solver_config = self.config.get_solver_params()
        self.max_reprojection_error = float(solver_config.get('max_reprojection_error', 1.0))  # pixels
        self.min_focal_length = float(solver_config.get('min_focal_length', 100))  # pixels
        self.max_focal_length = float(solver_config.get('max_focal_length', 5000))  # pixels
        self.max_distortion_k1 = float(solver_config.get('max_distortion_k1', 1.0))

    def validate_intrinsic_calibration(self, params: CameraParameters) -> Dict[str, Any]:
        """
        Validate intrinsic calibration quality.

        Args:
            params: Camera parameters to validate

        Returns:
            Dictionary with validation results and quality metrics
        """
        results = {
            'is_valid': True,
            'errors': [],
            'warnings': [],
            'quality_score': 0.0,
            'metrics': {}
        }

        # Reprojection error is the only hard requirement
        results['metrics']['reprojection_error'] = params.reprojection_error
        if params.reprojection_error > self.max_reprojection_error:
            results['is_valid'] = False
            results['errors'].append(
                f"Reprojection error {params.reprojection_error:.4f} > {self.max_reprojection_error} pixels"
            )

        fx = float(params.camera_matrix[0, 0])
        fy = float(params.camera_matrix[1, 1])
        cx = float(params.camera_matrix[0, 2])
        cy = float(params.camera_matrix[1, 2])

        results['metrics']['focal_length_x'] = fx
        results['metrics']['focal_length_y'] = fy
        results['metrics']['principal_point'] = (cx, cy)

        if fx < self.min_focal_length or fx > self.max_focal_length:
            results['warnings'].append(f"Unusual focal length fx: {fx:.1f} pixels")

        if fy < self.min_focal_length or fy > self.max_focal_length:
            results['warnings'].append(f"Unusual focal length fy: {fy:.1f} pixels")

        if fy > 0:
            aspect_ratio = fx / fy
            results['metrics']['aspect_ratio'] = aspect_ratio
            if abs(aspect_ratio - 1.0) > 0.1:
                results['warnings'].append(f"Unusual aspect ratio: {aspect_ratio:.3f}")
        else:
            results['is_valid'] = False
            results['errors'].append(f"Non-positive focal length fy: {fy:.1f}")

        # Principal point should sit near the image center
        image_center_x = params.image_size[0] / 2
        image_center_y = params.image_size[1] / 2

        cx_offset = abs(cx - image_center_x) / image_center_x
        cy_offset = abs(cy - image_center_y) / image_center_y

        results['metrics']['principal_point_offset'] = (cx_offset, cy_offset)

        if cx_offset > 0.2 or cy_offset > 0.2:
            results['warnings'].append(
                f"Principal point far from center: ({cx_offset:.2%}, {cy_offset:.2%})"
            )

        coeffs = params.distortion_coeffs.ravel()
        if len(coeffs) >= 2:
            k1, k2 = float(coeffs[0]), float(coeffs[1])

            results['metrics']['distortion_k1'] = k1
            results['metrics']['distortion_k2'] = k2

            if abs(k1) > self.max_distortion_k1:
                results['warnings'].append(f"High radial distortion k1: {k1:.4f}")

            if abs(k2) > self.max_distortion_k1:
                results['warnings'].append(f"High radial distortion k2: {k2:.4f}")

        # Quality score (0-100)
        quality_score = 100.0
        quality_score -= max(0.0, params.reprojection_error - 0.25) * 40
        quality_score -= len(results['warnings']) * 5
        quality_score -= len(results['errors']) * 20

        results['quality_score'] = max(0.0, min(100.0, quality_score))

        if results['is_valid']:
            self.logger.info(f"Intrinsic calibration valid: quality={results['quality_score']:.1f}%")
        else:
            self.logger.error(f"Intrinsic calibration invalid: {len(results['errors'])} errors")
            for error in results['errors']:
                self.logger.error(error)

        for warning in results['warnings']:
            self.logger.warning(warning)

        return results
