"""
Global Mapping Module

Exports the graph resolver that brings all scans into one frame and the
assembler that merges them into a beacon map:
- graph_resolver.py: pairwise edge discovery and frame propagation
- beacon_map.py: deduplicated beacon set and scanner distances
"""

from .graph_resolver import DisconnectedGraphError, ResolvedFrames, ScannerGraphResolver
from .beacon_map import BeaconMap, BeaconMapAssembler, max_manhattan_distance

__all__ = [
    "BeaconMap",
    "BeaconMapAssembler",
    "DisconnectedGraphError",
    "ResolvedFrames",
    "ScannerGraphResolver",
    "max_manhattan_distance",
]
