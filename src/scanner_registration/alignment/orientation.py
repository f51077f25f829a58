"""
Orientation Set

The 24 rotations of 3D space that map coordinate axes onto coordinate axes
(a scanner may face any of 6 directions and have any of 4 "up" directions).

Each orientation is a signed permutation matrix with determinant +1. They are
generated from the 6 axis permutations combined with the 8 sign assignments,
keeping the 24 that preserve handedness.
"""

from __future__ import annotations

from itertools import permutations, product
from typing import Tuple

import numpy as np


def generate_orientations() -> Tuple[np.ndarray, ...]:
    """
    Build the handedness-preserving axis rotations.

    Returns:
        Tuple of 24 read-only 3x3 int64 matrices, identity first
    """
    orientations = []
    for axes in permutations(range(3)):
        for signs in product((1, -1), repeat=3):
            R = np.zeros((3, 3), dtype=np.int64)
            R[np.arange(3), axes] = signs
            # Signed permutation matrices have determinant exactly +-1
            if round(np.linalg.det(R)) != 1:
                continue
            R.setflags(write=False)
            orientations.append(R)
    return tuple(orientations)


ORIENTATIONS: Tuple[np.ndarray, ...] = generate_orientations()


def orientation_index(rotation: np.ndarray) -> int:
    """Position of ``rotation`` in ORIENTATIONS.

    Raises:
        ValueError: If the matrix is not one of the 24 axis rotations
    """
    for i, R in enumerate(ORIENTATIONS):
        if np.array_equal(R, rotation):
            return i
    raise ValueError(f"Not an axis-aligned rotation:\n{rotation}")
