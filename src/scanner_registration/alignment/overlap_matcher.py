"""
Overlap Matching by Translation Voting

For a fixed orientation, every pair (reference point, rotated candidate point)
votes for the translation that would make the two coincide. When the scans
truly overlap, every shared point votes for the same translation, so the true
offset collects at least ``threshold`` votes while coincidental offsets stay
far below it.

Also provides rotation-invariant distance fingerprints used to discard scan
pairs that cannot share ``threshold`` points before any orientation is tried.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from ..utils.logging import setup_logger

logger = setup_logger(__name__)

Fingerprint = Tuple[np.ndarray, np.ndarray]


def distance_fingerprint(points: np.ndarray) -> Fingerprint:
    """
    Multiset of squared distances between all point pairs of a scan.

    Squared distances between integer points are integers and do not change
    under rotation or translation, so two scans sharing k points share at
    least k*(k-1)/2 fingerprint entries.

    Args:
        points: (N, 3) int array

    Returns:
        Tuple of (sorted distinct squared distances, their multiplicities)
    """
    points = np.asarray(points, dtype=np.int64)
    if len(points) < 2:
        empty = np.empty(0, dtype=np.int64)
        return empty, empty
    i, j = np.triu_indices(len(points), k=1)
    diff = points[i] - points[j]
    sq = np.einsum("ij,ij->i", diff, diff)
    return np.unique(sq, return_counts=True)


def shared_fingerprint_count(a: Fingerprint, b: Fingerprint) -> int:
    """Size of the multiset intersection of two fingerprints."""
    values_a, counts_a = a
    values_b, counts_b = b
    if values_a.size == 0 or values_b.size == 0:
        return 0
    _, ia, ib = np.intersect1d(values_a, values_b, assume_unique=True, return_indices=True)
    return int(np.minimum(counts_a[ia], counts_b[ib]).sum())


@dataclass
class OverlapMatcher:
    threshold: int = 12  # minimum number of coincident points

    def __post_init__(self) -> None:
        if isinstance(self.threshold, bool) or not isinstance(self.threshold, numbers.Integral):
            raise ValueError(f"Overlap threshold must be an integer, got {self.threshold!r}")
        if self.threshold < 1:
            raise ValueError(f"Overlap threshold must be at least 1, got {self.threshold}")
        self.threshold = int(self.threshold)

    @property
    def required_shared_distances(self) -> int:
        return self.threshold * (self.threshold - 1) // 2

    def find_translation(
        self,
        reference: np.ndarray,
        candidate: np.ndarray,
        rotation: np.ndarray,
    ) -> Optional[np.ndarray]:
        """
        Find the translation placing the rotated candidate onto the reference.

        Args:
            reference: Nx3 points already in the target frame
            candidate: Mx3 points in the candidate's local frame
            rotation: 3x3 orientation applied to the candidate before translating

        Returns:
            Length-3 int64 translation t such that at least ``threshold``
            points satisfy ``rotation @ c + t == r``, or None. If several
            translations qualify, the one with most votes wins (ties go to the
            lexicographically smallest vector).
        """
        if len(reference) < self.threshold or len(candidate) < self.threshold:
            return None

        rotated = np.asarray(candidate, dtype=np.int64) @ np.asarray(rotation, dtype=np.int64).T
        offsets = (np.asarray(reference, dtype=np.int64)[:, None, :] - rotated[None, :, :]).reshape(-1, 3)
        votes, counts = np.unique(offsets, axis=0, return_counts=True)

        winners = np.flatnonzero(counts >= self.threshold)
        if winners.size == 0:
            return None
        if winners.size > 1:
            logger.debug(
                "%d translations reach the overlap threshold for one orientation; keeping the strongest",
                winners.size,
            )
        best = winners[np.argmax(counts[winners])]
        return votes[best].copy()

    def fingerprints_compatible(self, a: Fingerprint, b: Fingerprint) -> bool:
        """False when two scans cannot share ``threshold`` points."""
        return shared_fingerprint_count(a, b) >= self.required_shared_distances
