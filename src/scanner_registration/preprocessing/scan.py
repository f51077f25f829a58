"""
Scan data model.

A scan is one scanner's report: an identifier and the set of integer points
it observed, expressed in the scanner's own local frame.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass, field
from typing import Mapping, Sequence, Union

import numpy as np


class MalformedInputError(ValueError):
    """Raised when a scanner report does not have the expected structure."""


PointsLike = Union[np.ndarray, Sequence[Sequence[int]]]


def as_point_array(points: PointsLike) -> np.ndarray:
    """
    Convert points to a read-only (N, 3) int64 array with duplicates removed.

    Raises:
        MalformedInputError: If the input is not an (N, 3) collection of integers
    """
    try:
        arr = np.asarray(points)
    except (ValueError, TypeError, OverflowError) as e:
        raise MalformedInputError(f"Expected Nx3 points: {e}") from e
    if arr.size == 0:
        out = np.empty((0, 3), dtype=np.int64)
        out.setflags(write=False)
        return out
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise MalformedInputError(f"Expected Nx3 points, got shape {arr.shape}")
    if not np.issubdtype(arr.dtype, np.integer):
        if not np.issubdtype(arr.dtype, np.floating) or not np.all(np.mod(arr, 1) == 0):
            raise MalformedInputError(f"Points must be integer coordinates, got dtype {arr.dtype}")
    if arr.dtype.kind == "u" and arr.max() > np.iinfo(np.int64).max:
        raise MalformedInputError("Point coordinates out of range for int64")
    out = np.unique(arr.astype(np.int64), axis=0)
    out.setflags(write=False)
    return out


@dataclass(frozen=True, eq=False)
class Scan:
    """One scanner's observations in its local frame.

    Attributes:
        scan_id: Non-negative scanner identifier
        points: (N, 3) read-only int64 array of unique local coordinates
    """

    scan_id: int
    points: np.ndarray = field(repr=False)

    def __post_init__(self) -> None:
        if isinstance(self.scan_id, (bool, np.bool_)) or not isinstance(self.scan_id, numbers.Integral):
            raise MalformedInputError(f"Scan identifier must be an integer, got {self.scan_id!r}")
        if self.scan_id < 0:
            raise MalformedInputError(f"Scan identifier must be non-negative, got {self.scan_id}")
        object.__setattr__(self, "scan_id", int(self.scan_id))
        object.__setattr__(self, "points", as_point_array(self.points))

    def __len__(self) -> int:
        return len(self.points)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Scan):
            return NotImplemented
        return self.scan_id == other.scan_id and np.array_equal(self.points, other.points)

    def __hash__(self) -> int:
        return hash((self.scan_id, self.points.tobytes()))

    def __repr__(self) -> str:
        return f"Scan(scan_id={self.scan_id}, n_points={len(self)})"


def scans_from_mapping(scan_points: Mapping[int, Union[PointsLike, Scan]]) -> dict[int, Scan]:
    """Build Scan objects from a ``scan id -> points`` mapping.

    Values that already are Scan objects are kept as-is (their identifier must
    match the key).
    """
    scans: dict[int, Scan] = {}
    for scan_id, points in scan_points.items():
        if isinstance(points, Scan):
            if points.scan_id != int(scan_id):
                raise MalformedInputError(
                    f"Scan keyed as {scan_id} carries identifier {points.scan_id}"
                )
            scans[int(scan_id)] = points
        else:
            scans[int(scan_id)] = Scan(int(scan_id), points)
    return scans

