"""
Calibration File I/O
"""

from .calibration_file import save_calibration, load_calibration

__all__ = ['save_calibration', 'load_calibration']
