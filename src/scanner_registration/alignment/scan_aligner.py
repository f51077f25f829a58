"""
Pairwise Scan Alignment

Tries the 24 axis orientations for an ordered pair of scans and returns the
rigid transform mapping the candidate scan's frame into the reference scan's
frame, or None when the scans do not overlap.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..preprocessing.scan import Scan, as_point_array
from ..utils.logging import setup_logger
from .orientation import ORIENTATIONS
from .overlap_matcher import Fingerprint, OverlapMatcher, distance_fingerprint
from .rigid_transform import RigidTransform

logger = setup_logger(__name__)

ScanOrPoints = Union[Scan, np.ndarray]


class AmbiguousAlignmentError(RuntimeError):
    """More than one orientation satisfies the overlap threshold for a pair."""

    def __init__(self, reference_id: Optional[int], candidate_id: Optional[int], n_matches: int):
        self.reference_id = reference_id
        self.candidate_id = candidate_id
        self.n_matches = n_matches
        super().__init__(
            f"Scans {reference_id} and {candidate_id}: {n_matches} orientations reach the "
            f"overlap threshold; the relative orientation is ambiguous"
        )


@dataclass(frozen=True)
class AlignmentEdge:
    """Confirmed overlap between two scans.

    ``transform`` maps points from the candidate scan's frame into the
    reference scan's frame.
    """

    reference_id: int
    candidate_id: int
    transform: RigidTransform

    def reversed(self) -> "AlignmentEdge":
        return AlignmentEdge(self.candidate_id, self.reference_id, self.transform.inverse())

    def other(self, scan_id: int) -> int:
        if scan_id == self.reference_id:
            return self.candidate_id
        if scan_id == self.candidate_id:
            return self.reference_id
        raise KeyError(f"Scan {scan_id} is not part of edge {self.reference_id}-{self.candidate_id}")

    def transform_into(self, scan_id: int) -> RigidTransform:
        """Transform from the other scan's frame into ``scan_id``'s frame."""
        if scan_id == self.reference_id:
            return self.transform
        if scan_id == self.candidate_id:
            return self.transform.inverse()
        raise KeyError(f"Scan {scan_id} is not part of edge {self.reference_id}-{self.candidate_id}")


class ScanAligner:
    """
    Find the relative pose of two scans.

    Orientations are tried in the fixed ORIENTATIONS order and the first one
    whose translation vote reaches the overlap threshold is returned. With
    ``verify_unique_orientation`` every orientation is tried and a pair with
    several qualifying orientations raises AmbiguousAlignmentError.
    """

    def __init__(
        self,
        overlap_threshold: int = 12,
        use_fingerprint_prefilter: bool = True,
        verify_unique_orientation: bool = False,
        orientations: Sequence[np.ndarray] = ORIENTATIONS,
    ):
        """
        Initialize the aligner.

        Args:
            overlap_threshold: Minimum number of coincident points to accept a match.
            use_fingerprint_prefilter: If True, skip pairs whose distance
                fingerprints rule out an overlap.
            verify_unique_orientation: If True, check all orientations and fail
                on ambiguous pairs instead of returning the first match.
            orientations: Orientation matrices to try, in order.
        """
        self.matcher = OverlapMatcher(threshold=overlap_threshold)
        self.use_fingerprint_prefilter = use_fingerprint_prefilter
        self.verify_unique_orientation = verify_unique_orientation
        self.orientations = tuple(orientations)
        self._fingerprints: Dict[Scan, Fingerprint] = {}

    @classmethod
    def from_config(cls, matching) -> "ScanAligner":
        """Create an aligner from a ``MatchingConfig`` section."""
        return cls(
            overlap_threshold=matching.overlap_threshold,
            use_fingerprint_prefilter=matching.use_fingerprint_prefilter,
            verify_unique_orientation=matching.verify_unique_orientation,
        )

    @property
    def overlap_threshold(self) -> int:
        return self.matcher.threshold

    # ------------------------ Public API ------------------------
    def align(self, reference: ScanOrPoints, candidate: ScanOrPoints) -> Optional[RigidTransform]:
        """
        Transform mapping ``candidate`` into ``reference``'s frame, or None.

        Args:
            reference: Scan (or Nx3 points) defining the target frame
            candidate: Scan (or Mx3 points) to be placed into that frame
        """
        ref_pts, ref_id = self._unpack(reference)
        cand_pts, cand_id = self._unpack(candidate)

        if not self._may_overlap(reference, candidate, ref_pts, cand_pts):
            logger.debug(f"Scans {ref_id} and {cand_id}: fingerprints rule out an overlap")
            return None

        if self.verify_unique_orientation:
            matches = self._matches(ref_pts, cand_pts, stop_at_first=False)
            if len(matches) > 1:
                raise AmbiguousAlignmentError(ref_id, cand_id, len(matches))
        else:
            matches = self._matches(ref_pts, cand_pts, stop_at_first=True)

        if not matches:
            logger.debug(f"Scans {ref_id} and {cand_id}: no orientation reaches the overlap threshold")
            return None

        transform = matches[0]
        logger.debug(
            f"Scans {ref_id} <- {cand_id}: matched with translation {transform.translation.tolist()}"
        )
        return transform

    def find_all_alignments(self, reference: ScanOrPoints, candidate: ScanOrPoints) -> List[RigidTransform]:
        """Every transform (one per orientation at most) that reaches the threshold."""
        ref_pts, _ = self._unpack(reference)
        cand_pts, _ = self._unpack(candidate)
        return self._matches(ref_pts, cand_pts, stop_at_first=False)

    def align_edge(self, reference: Scan, candidate: Scan) -> Optional[AlignmentEdge]:
        transform = self.align(reference, candidate)
        if transform is None:
            return None
        return AlignmentEdge(reference.scan_id, candidate.scan_id, transform)

    # ------------------------ Helpers ------------------------
    def _matches(self, ref_pts: np.ndarray, cand_pts: np.ndarray, *, stop_at_first: bool) -> List[RigidTransform]:
        found: List[RigidTransform] = []
        for rotation in self.orientations:
            translation = self.matcher.find_translation(ref_pts, cand_pts, rotation)
            if translation is None:
                continue
            found.append(RigidTransform(rotation, translation))
            if stop_at_first:
                break
        return found

    def _may_overlap(self, reference, candidate, ref_pts: np.ndarray, cand_pts: np.ndarray) -> bool:
        if len(ref_pts) < self.overlap_threshold or len(cand_pts) < self.overlap_threshold:
            return False
        if not self.use_fingerprint_prefilter:
            return True
        return self.matcher.fingerprints_compatible(
            self._fingerprint(reference, ref_pts),
            self._fingerprint(candidate, cand_pts),
        )

    def _fingerprint(self, scan: ScanOrPoints, points: np.ndarray) -> Fingerprint:
        if not isinstance(scan, Scan):
            return distance_fingerprint(points)
        fp = self._fingerprints.get(scan)
        if fp is None:
            fp = distance_fingerprint(points)
            self._fingerprints[scan] = fp
        return fp

    @staticmethod
    def _unpack(scan: ScanOrPoints) -> Tuple[np.ndarray, Optional[int]]:
        if isinstance(scan, Scan):
            return scan.points, scan.scan_id
        return as_point_array(scan), None


def align_scan_pair(pair: Tuple[Scan, Scan], aligner: ScanAligner) -> Optional[AlignmentEdge]:
    """Worker entry point for parallel edge discovery.

    Must be at module level for pickling.
    """
    reference, candidate = pair
    return aligner.align_edge(reference, candidate)
