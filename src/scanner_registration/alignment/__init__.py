"""
Scan Alignment Module

This module finds the relative pose of overlapping scans: the 24 axis
orientations, integer rigid transforms, translation voting and the pairwise
aligner built on top of them.
"""

from .orientation import ORIENTATIONS, generate_orientations, orientation_index
from .rigid_transform import RigidTransform
from .overlap_matcher import OverlapMatcher, distance_fingerprint, shared_fingerprint_count
from .scan_aligner import AlignmentEdge, AmbiguousAlignmentError, ScanAligner, align_scan_pair

__all__ = [
    "ORIENTATIONS",
    "generate_orientations",
    "orientation_index",
    "RigidTransform",
    "OverlapMatcher",
    "distance_fingerprint",
    "shared_fingerprint_count",
    "AlignmentEdge",
    "AmbiguousAlignmentError",
    "ScanAligner",
    "align_scan_pair",
]
