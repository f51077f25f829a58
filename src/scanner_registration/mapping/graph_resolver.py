"""
Scanner Graph Resolution

Builds the overlap graph between scans (one pairwise alignment per unordered
pair) and propagates the anchor scan's frame through it breadth-first. Every
scan reachable from the anchor gets the transform from its local frame into
the anchor's (global) frame, composed along the traversal edges.

The spanning tree is stored as parent identifiers per scan, so paths back to
the anchor can be inspected without holding references between scans.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from ..acceleration.parallel_executor import PairParallelExecutor
from ..alignment.rigid_transform import RigidTransform
from ..alignment.scan_aligner import AlignmentEdge, ScanAligner, align_scan_pair
from ..preprocessing.scan import Scan
from ..utils.logging import setup_logger

logger = setup_logger(__name__)


class DisconnectedGraphError(RuntimeError):
    """Some scans share no chain of overlaps with the anchor scan."""

    def __init__(self, anchor_id: int, unreachable: Iterable[int]):
        self.anchor_id = anchor_id
        self.unreachable = sorted(unreachable)
        super().__init__(
            f"{len(self.unreachable)} scan(s) cannot be reached from anchor scan {anchor_id}: "
            f"{self.unreachable}"
        )


@dataclass
class ResolvedFrames:
    """Transforms of every scan into the anchor scan's frame.

    Attributes:
        anchor_id: Scan whose local frame is the global frame
        transforms: scan id -> transform from local into global frame
        parents: scan id -> scan it was reached from (None for the anchor)
        edges: Alignment edges the resolution was computed from
    """

    anchor_id: int
    transforms: Dict[int, RigidTransform]
    parents: Dict[int, Optional[int]]
    edges: List[AlignmentEdge] = field(default_factory=list, repr=False)

    def __len__(self) -> int:
        return len(self.transforms)

    def __getitem__(self, scan_id: int) -> RigidTransform:
        return self.transforms[scan_id]

    def origin(self, scan_id: int) -> np.ndarray:
        """Global position of a scanner."""
        return self.transforms[scan_id].origin

    def path_to_anchor(self, scan_id: int) -> List[int]:
        """Scan identifiers from ``scan_id`` back to the anchor along the spanning tree."""
        if scan_id not in self.parents:
            raise KeyError(f"Scan {scan_id} is not resolved")
        path = [scan_id]
        parent = self.parents[scan_id]
        while parent is not None:
            path.append(parent)
            parent = self.parents[parent]
        return path


class ScannerGraphResolver:
    """
    Resolve all scans into one global frame.

    Pairwise results are cached per (reference, candidate) scan pair and
    never recomputed, including pairs that do not overlap.
    """

    def __init__(
        self,
        aligner: Optional[ScanAligner] = None,
        *,
        anchor_id: Optional[int] = None,
        executor: Optional[PairParallelExecutor] = None,
    ):
        """
        Args:
            aligner: Pairwise aligner (default: threshold 12, fingerprint prefilter on)
            anchor_id: Scan defining the global frame (None = first scan given)
            executor: Optional process-pool executor for edge discovery
        """
        self.aligner = aligner or ScanAligner()
        self.anchor_id = anchor_id
        self.executor = executor
        self._edge_cache: Dict[Tuple[Scan, Scan], Optional[AlignmentEdge]] = {}

    @classmethod
    def from_config(cls, cfg) -> "ScannerGraphResolver":
        """Create a resolver from an ``AppConfig``."""
        executor = None
        if cfg.parallel.enabled:
            executor = PairParallelExecutor(n_workers=cfg.parallel.n_workers)
        return cls(
            ScanAligner.from_config(cfg.matching),
            anchor_id=cfg.resolver.anchor_scan,
            executor=executor,
        )

    @property
    def cached_pairs(self) -> int:
        return len(self._edge_cache)

    # ------------------------ Edge discovery ------------------------
    def discover_edges(self, scans: Mapping[int, Scan]) -> List[AlignmentEdge]:
        """
        Align every unordered pair of scans once.

        The scan with the smaller identifier is the reference of each pair.

        Returns:
            Alignment edges sorted by (reference_id, candidate_id)
        """
        ids = sorted(scans)
        pairs = [(scans[i], scans[j]) for i, j in combinations(ids, 2)]
        pending = [p for p in pairs if p not in self._edge_cache]
        logger.info(
            f"Edge discovery: {len(pairs)} scan pairs, {len(pending)} not yet aligned"
        )

        if pending:
            if self.executor is not None:
                results = self.executor.map_items(
                    pending, align_scan_pair, {"aligner": self.aligner}
                )
            else:
                results = [align_scan_pair(pair, self.aligner) for pair in pending]
            for pair, edge in zip(pending, results):
                self._edge_cache[pair] = edge

        edges = [self._edge_cache[p] for p in pairs if self._edge_cache[p] is not None]
        logger.info(f"Found {len(edges)} overlapping scan pairs")
        return edges

    # ------------------------ Frame propagation ------------------------
    def resolve(self, scans: Mapping[int, Scan]) -> ResolvedFrames:
        """
        Discover edges and express every scan in the anchor's frame.

        Raises:
            ValueError: If no scans are given or the anchor is unknown
            DisconnectedGraphError: If some scans cannot be reached from the anchor
        """
        if not scans:
            raise ValueError("Cannot resolve an empty set of scans")
        anchor_id = self._anchor_for(list(scans))
        edges = self.discover_edges(scans)
        return self.resolve_from_edges(list(scans), edges, anchor_id=anchor_id)

    def resolve_from_edges(
        self,
        scan_ids: Sequence[int],
        edges: Iterable[AlignmentEdge],
        *,
        anchor_id: Optional[int] = None,
    ) -> ResolvedFrames:
        """
        Propagate the anchor's frame breadth-first over known edges.

        Each scan is resolved the first time it is reached:
        ``global(child) = global(parent) o edge(child -> parent)``.
        """
        if not scan_ids:
            raise ValueError("Cannot resolve an empty set of scans")
        anchor = self._anchor_for(scan_ids) if anchor_id is None else anchor_id
        if anchor not in scan_ids:
            raise ValueError(f"Anchor scan {anchor} is not among the scans {sorted(scan_ids)}")

        edges = list(edges)
        adjacency: Dict[int, List[AlignmentEdge]] = {scan_id: [] for scan_id in scan_ids}
        for edge in edges:
            for end in (edge.reference_id, edge.candidate_id):
                if end not in adjacency:
                    raise ValueError(f"Edge {edge.reference_id}-{edge.candidate_id} refers to unknown scan {end}")
            adjacency[edge.reference_id].append(edge)
            adjacency[edge.candidate_id].append(edge)

        transforms: Dict[int, RigidTransform] = {anchor: RigidTransform.identity()}
        parents: Dict[int, Optional[int]] = {anchor: None}
        queue = deque([anchor])
        while queue:
            current = queue.popleft()
            for edge in adjacency[current]:
                neighbour = edge.other(current)
                if neighbour in transforms:
                    continue
                transforms[neighbour] = transforms[current] @ edge.transform_into(current)
                parents[neighbour] = current
                queue.append(neighbour)

        unreachable = [scan_id for scan_id in scan_ids if scan_id not in transforms]
        if unreachable:
            logger.error(f"Scans unreachable from anchor {anchor}: {sorted(unreachable)}")
            raise DisconnectedGraphError(anchor, unreachable)

        logger.info(f"Resolved {len(transforms)} scans into the frame of scan {anchor}")
        return ResolvedFrames(anchor_id=anchor, transforms=transforms, parents=parents, edges=edges)

    def _anchor_for(self, scan_ids: Sequence[int]) -> int:
        if self.anchor_id is not None:
            if self.anchor_id not in scan_ids:
                raise ValueError(f"Anchor scan {self.anchor_id} is not among the scans {sorted(scan_ids)}")
            return self.anchor_id
        return scan_ids[0]
