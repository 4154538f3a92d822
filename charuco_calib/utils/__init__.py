"""
Utility Functions and Helpers

Common utilities for the calibration toolkit.
"""

from .config_manager import ConfigManager
from .logging_utils import setup_logging

__all__ = ['ConfigManager', 'setup_logging']
