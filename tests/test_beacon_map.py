"""
Tests for beacon map assembly.
"""

import numpy as np
import pytest

from scanner_registration.alignment.orientation import ORIENTATIONS
from scanner_registration.alignment.rigid_transform import RigidTransform
from scanner_registration.mapping.beacon_map import BeaconMapAssembler, max_manhattan_distance
from scanner_registration.mapping.graph_resolver import ResolvedFrames
from scanner_registration.preprocessing.scan import Scan


def _frames(transforms, anchor_id=0):
    parents = {k: (None if k == anchor_id else anchor_id) for k in transforms}
    return ResolvedFrames(anchor_id=anchor_id, transforms=transforms, parents=parents)


class TestMaxManhattanDistance:
    """Tests for the exhaustive pairwise Manhattan distance."""

    def test_simple(self):
        points = np.array([[0, 0, 0], [1, -2, 3], [-4, 0, 0]])
        # [1,-2,3] vs [-4,0,0]: 5 + 2 + 3
        assert max_manhattan_distance(points) == 10

    def test_fewer_than_two_points(self):
        assert max_manhattan_distance(np.empty((0, 3))) == 0
        assert max_manhattan_distance(np.array([[5, 5, 5]])) == 0

    def test_published_example_pair(self):
        a = np.array([1105, -1205, 1229])
        b = np.array([-92, -2380, -20])
        assert max_manhattan_distance(np.stack([a, b])) == 3621


class TestBeaconMapAssembler:
    """Test suite for BeaconMapAssembler."""

    def test_union_not_sum(self):
        """Partially coinciding global points are counted once."""
        scans = {
            0: Scan(0, [[0, 0, 0], [1, 0, 0], [2, 0, 0], [3, 0, 0]]),
            # Shifted by +2 in x: local (0,0,0) and (1,0,0) land on (2,0,0), (3,0,0)
            1: Scan(1, [[0, 0, 0], [1, 0, 0], [2, 0, 0]]),
        }
        frames = _frames({
            0: RigidTransform.identity(),
            1: RigidTransform(ORIENTATIONS[0], np.array([2, 0, 0])),
        })
        beacon_map = BeaconMapAssembler().assemble(scans, frames)

        assert beacon_map.beacon_count == 5  # not 7
        np.testing.assert_array_equal(
            beacon_map.beacons, [[0, 0, 0], [1, 0, 0], [2, 0, 0], [3, 0, 0], [4, 0, 0]]
        )
        np.testing.assert_array_equal(beacon_map.observations, [1, 1, 2, 2, 1])

    def test_scanner_origins_and_distance(self):
        scans = {0: Scan(0, [[1, 1, 1]]), 1: Scan(1, [[1, 1, 1]]), 2: Scan(2, [[0, 0, 0]])}
        frames = _frames({
            0: RigidTransform.identity(),
            1: RigidTransform(ORIENTATIONS[5], np.array([10, -20, 5])),
            2: RigidTransform(ORIENTATIONS[11], np.array([-3, 4, 0])),
        })
        beacon_map = BeaconMapAssembler().assemble(scans, frames)

        np.testing.assert_array_equal(beacon_map.scanner_origins[1], [10, -20, 5])
        np.testing.assert_array_equal(beacon_map.scanner_origins[2], [-3, 4, 0])
        # scanners 1 and 2: 13 + 24 + 5
        assert beacon_map.max_origin_distance == 42
        assert beacon_map.summary() == {"scanners": 3, "beacons": 3, "max_origin_distance": 42}
        assert beacon_map.anchor_id == 0

    def test_rotation_applied_before_translation(self):
        R = ORIENTATIONS[7]
        scans = {0: Scan(0, [[1, 2, 3]])}
        frames = _frames({0: RigidTransform(R, np.array([100, 0, 0]))})
        beacon_map = BeaconMapAssembler().assemble(scans, frames)
        np.testing.assert_array_equal(beacon_map.beacons[0], R @ np.array([1, 2, 3]) + [100, 0, 0])

    def test_missing_transform(self):
        scans = {0: Scan(0, [[0, 0, 0]]), 1: Scan(1, [[0, 0, 0]])}
        with pytest.raises(KeyError):
            BeaconMapAssembler().assemble(scans, _frames({0: RigidTransform.identity()}))

    def test_single_scan(self):
        scans = {0: Scan(0, [[0, 0, 0], [5, 5, 5]])}
        beacon_map = BeaconMapAssembler().assemble(scans, _frames({0: RigidTransform.identity()}))
        assert beacon_map.beacon_count == 2
        assert beacon_map.max_origin_distance == 0
