"""
Beacon Map Assembly

Maps every scan's points into the global frame, merges them into one
deduplicated beacon set and measures how far apart the scanners are.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping

import numpy as np

from ..alignment.rigid_transform import RigidTransform
from ..preprocessing.scan import Scan
from ..utils.logging import setup_logger
from .graph_resolver import ResolvedFrames

logger = setup_logger(__name__)


def max_manhattan_distance(points: np.ndarray) -> int:
    """
    Largest |dx| + |dy| + |dz| over all pairs of points.

    Exhaustive pairwise comparison; returns 0 for fewer than two points.
    """
    points = np.asarray(points, dtype=np.int64).reshape(-1, 3)
    if len(points) < 2:
        return 0
    dist = np.abs(points[:, None, :] - points[None, :, :]).sum(axis=2)
    return int(dist.max())


@dataclass
class BeaconMap:
    """Result of assembling all scans in the global frame.

    Attributes:
        beacons: (K, 3) int64 array of unique global points, sorted lexicographically
        observations: (K,) number of scans that observed each beacon
        scanner_origins: scan id -> global position of the scanner
        transforms: scan id -> transform from local into global frame
        anchor_id: Scan whose frame is the global frame
    """

    beacons: np.ndarray
    observations: np.ndarray
    scanner_origins: Dict[int, np.ndarray]
    transforms: Dict[int, RigidTransform]
    anchor_id: int

    @property
    def beacon_count(self) -> int:
        return int(len(self.beacons))

    @property
    def max_origin_distance(self) -> int:
        """Largest Manhattan distance between any two scanner origins."""
        return max_manhattan_distance(self.origin_array())

    def origin_array(self) -> np.ndarray:
        """Scanner origins as an (S, 3) array ordered by scan id."""
        if not self.scanner_origins:
            return np.empty((0, 3), dtype=np.int64)
        return np.stack([self.scanner_origins[k] for k in sorted(self.scanner_origins)])

    def summary(self) -> Dict[str, int]:
        return {
            "scanners": len(self.scanner_origins),
            "beacons": self.beacon_count,
            "max_origin_distance": self.max_origin_distance,
        }


class BeaconMapAssembler:
    """Merge globally expressed scans into a BeaconMap."""

    def assemble(self, scans: Mapping[int, Scan], frames: ResolvedFrames) -> BeaconMap:
        """
        Build the global beacon map.

        Args:
            scans: scan id -> Scan in its local frame
            frames: Resolved transforms for every scan

        Raises:
            KeyError: If a scan has no resolved transform
        """
        missing = [scan_id for scan_id in scans if scan_id not in frames.transforms]
        if missing:
            raise KeyError(f"No resolved transform for scans {sorted(missing)}")

        global_sets = []
        origins: Dict[int, np.ndarray] = {}
        for scan_id, scan in scans.items():
            transform = frames.transforms[scan_id]
            global_sets.append(transform.apply(scan.points))
            origins[scan_id] = transform.apply(np.zeros(3, dtype=np.int64))

        stacked = np.concatenate(global_sets, axis=0) if global_sets else np.empty((0, 3), dtype=np.int64)
        if len(stacked):
            # Points are unique within each scan, so counts are per-scan observations
            beacons, observations = np.unique(stacked, axis=0, return_counts=True)
        else:
            beacons = np.empty((0, 3), dtype=np.int64)
            observations = np.empty(0, dtype=np.int64)

        logger.info(
            f"Assembled {len(beacons)} unique beacons from {len(stacked)} observations "
            f"across {len(scans)} scans"
        )
        return BeaconMap(
            beacons=beacons,
            observations=observations,
            scanner_origins=origins,
            transforms={scan_id: frames.transforms[scan_id] for scan_id in scans},
            anchor_id=frames.anchor_id,
        )
