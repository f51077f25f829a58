"""
Scanner Report Preprocessing Module

This module contains the scan data model and the loader that turns scanner
report text into Scan objects:
- Scan value type with read-only, deduplicated integer points
- Report parsing and validation
"""

from .scan import MalformedInputError, Scan, as_point_array, scans_from_mapping
from .loader import ScanReportLoader

__all__ = [
    "MalformedInputError",
    "Scan",
    "ScanReportLoader",
    "as_point_array",
    "scans_from_mapping",
]
