"""
Utility Functions Module

This module provides common utility functions used across the scanner
registration project.
- Logging setup and stage timing
- YAML configuration loading
- Export utilities for LAS/LAZ and transform matrices
"""

from .logging import setup_logger, set_log_level, log_duration
from .config import AppConfig, load_config
from .export import (
    export_beacons_to_laz,
    save_transform_matrix,
    load_transform_matrix,
    save_scanner_transforms,
)

__all__ = [
    "setup_logger",
    "set_log_level",
    "log_duration",
    "AppConfig",
    "load_config",
    "export_beacons_to_laz",
    "save_transform_matrix",
    "load_transform_matrix",
    "save_scanner_transforms",
]
