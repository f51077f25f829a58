"""
Pipeline Module

High-level entry points chaining alignment, frame resolution and beacon map
assembly.
"""

from .workflow import build_beacon_map, export_results

__all__ = [
    "build_beacon_map",
    "export_results",
]
