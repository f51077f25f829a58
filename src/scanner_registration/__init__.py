"""
Scanner Registration Package

A Python package for reconstructing one shared coordinate system from several
partially overlapping 3D scanner reports. Each scanner reports integer beacon
positions relative to itself, in an unknown one of 24 axis orientations.
Overlapping scanners are detected by translation voting over all orientations,
and their relative poses are chained from an anchor scanner until every
scanner and beacon is expressed in the anchor's frame.
"""

__version__ = "0.1.0"

from .preprocessing import *
from .alignment import *
from .mapping import *
from .pipeline import *
from .utils import *

__all__ = [
    "preprocessing",
    "alignment",
    "mapping",
    "acceleration",
    "pipeline",
    "utils",
]
