"""
Tests for translation voting and distance fingerprints.
"""

import numpy as np
import pytest

from scanner_registration.alignment.orientation import ORIENTATIONS
from scanner_registration.alignment.overlap_matcher import (
    OverlapMatcher,
    distance_fingerprint,
    shared_fingerprint_count,
)
from scanner_registration.alignment.rigid_transform import RigidTransform

from synthetic_scans import to_local, unique_random_points


def _pair(n_shared: int, n_private: int = 10, seed: int = 3, orientation: int = 14):
    """Reference and candidate points sharing ``n_shared`` world points."""
    rng = np.random.default_rng(seed)
    world = unique_random_points(rng, n_shared + 2 * n_private)
    shared = world[:n_shared]
    reference = np.vstack([shared, world[n_shared:n_shared + n_private]])
    pose = RigidTransform(ORIENTATIONS[orientation], np.array([120, -340, 560]))
    candidate = to_local(np.vstack([shared, world[n_shared + n_private:]]), pose)
    return reference, candidate, pose


class TestOverlapMatcher:
    """Tests for OverlapMatcher.find_translation."""

    def test_recovers_translation_with_correct_orientation(self):
        reference, candidate, pose = _pair(12)
        t = OverlapMatcher(threshold=12).find_translation(reference, candidate, pose.rotation)
        assert t is not None
        np.testing.assert_array_equal(t, pose.translation)

    def test_below_threshold_is_no_match(self):
        reference, candidate, pose = _pair(11)
        assert OverlapMatcher(threshold=12).find_translation(reference, candidate, pose.rotation) is None

    def test_lower_threshold_accepts_smaller_overlap(self):
        reference, candidate, pose = _pair(11)
        t = OverlapMatcher(threshold=11).find_translation(reference, candidate, pose.rotation)
        np.testing.assert_array_equal(t, pose.translation)

    def test_wrong_orientation_is_no_match(self):
        reference, candidate, pose = _pair(12, orientation=14)
        assert OverlapMatcher(threshold=12).find_translation(reference, candidate, ORIENTATIONS[0]) is None

    def test_too_few_points(self):
        reference, candidate, pose = _pair(12)
        matcher = OverlapMatcher(threshold=12)
        assert matcher.find_translation(reference[:11], candidate, pose.rotation) is None
        assert matcher.find_translation(reference, candidate[:5], pose.rotation) is None

    def test_strongest_translation_wins(self):
        # 3 points vote for (10, 0, 0), 4 points for (0, 5, 0)
        reference = np.array([[0, 0, 0], [1, 0, 0], [2, 0, 0], [100, 0, 0],
                              [200, 5, 0], [300, 5, 0], [400, 5, 0], [500, 5, 0]])
        candidate = np.array([[-10, 0, 0], [-9, 0, 0], [-8, 0, 0],
                              [200, 0, 0], [300, 0, 0], [400, 0, 0], [500, 0, 0]])
        t = OverlapMatcher(threshold=3).find_translation(reference, candidate, ORIENTATIONS[0])
        np.testing.assert_array_equal(t, [0, 5, 0])

    def test_threshold_validation(self):
        with pytest.raises(ValueError):
            OverlapMatcher(threshold=0)

    @pytest.mark.parametrize("threshold", [1.5, 12.0, True, "12"])
    def test_threshold_must_be_integer(self, threshold):
        with pytest.raises(ValueError):
            OverlapMatcher(threshold=threshold)

    def test_numpy_integer_threshold(self):
        assert OverlapMatcher(threshold=np.int64(5)).threshold == 5


class TestDistanceFingerprint:
    """Tests for rotation-invariant pair distance fingerprints."""

    def test_counts_all_pairs(self):
        points = np.array([[0, 0, 0], [1, 0, 0], [0, 2, 0]])
        values, counts = distance_fingerprint(points)
        # squared distances: 1, 4, 5
        np.testing.assert_array_equal(values, [1, 4, 5])
        np.testing.assert_array_equal(counts, [1, 1, 1])
        assert counts.sum() == 3

    def test_invariant_under_pose(self):
        rng = np.random.default_rng(11)
        points = rng.integers(-500, 500, size=(25, 3))
        pose = RigidTransform(ORIENTATIONS[19], np.array([7, 8, 9]))
        a = distance_fingerprint(points)
        b = distance_fingerprint(pose.apply(points))
        np.testing.assert_array_equal(a[0], b[0])
        np.testing.assert_array_equal(a[1], b[1])

    def test_shared_points_imply_shared_distances(self):
        reference, candidate, _ = _pair(12)
        shared = shared_fingerprint_count(distance_fingerprint(reference), distance_fingerprint(candidate))
        assert shared >= 12 * 11 // 2
        assert OverlapMatcher(threshold=12).fingerprints_compatible(
            distance_fingerprint(reference), distance_fingerprint(candidate)
        )

    def test_too_few_shared_points_fail_prefilter(self):
        reference, candidate, _ = _pair(4, n_private=12)
        assert not OverlapMatcher(threshold=12).fingerprints_compatible(
            distance_fingerprint(reference), distance_fingerprint(candidate)
        )

    def test_single_point_has_empty_fingerprint(self):
        values, counts = distance_fingerprint(np.array([[1, 2, 3]]))
        assert values.size == 0 and counts.size == 0
        assert shared_fingerprint_count((values, counts), distance_fingerprint(np.zeros((3, 3)))) == 0
