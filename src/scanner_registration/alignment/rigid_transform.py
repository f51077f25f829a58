"""
Rigid transforms on integer coordinates.

A RigidTransform maps points from one scanner frame into another:

    target = R @ source + t

where R is one of the 24 axis rotations and t an integer translation. The
transform of a scanner into the global frame also gives the scanner's global
position, since the local origin maps to t.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .orientation import ORIENTATIONS


def _frozen(arr: np.ndarray) -> np.ndarray:
    arr = np.array(arr, dtype=np.int64)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class RigidTransform:
    """Rotation plus translation on integer 3D points.

    Attributes:
        rotation: 3x3 int64 rotation matrix (determinant +1)
        translation: length-3 int64 translation vector

    Example:
        >>> T = RigidTransform(ORIENTATIONS[0], np.array([1, 2, 3]))
        >>> T.apply(np.array([[0, 0, 0]]))  # -> [[1, 2, 3]]
    """

    rotation: np.ndarray
    translation: np.ndarray

    def __post_init__(self) -> None:
        rotation = _frozen(self.rotation)
        translation = _frozen(self.translation).reshape(-1)
        if rotation.shape != (3, 3):
            raise ValueError(f"Rotation must be 3x3, got shape {rotation.shape}")
        if translation.shape != (3,):
            raise ValueError(f"Translation must have 3 components, got shape {translation.shape}")
        translation.setflags(write=False)
        object.__setattr__(self, "rotation", rotation)
        object.__setattr__(self, "translation", translation)

    @classmethod
    def identity(cls) -> "RigidTransform":
        return cls(ORIENTATIONS[0], np.zeros(3, dtype=np.int64))

    @classmethod
    def from_matrix(cls, matrix: np.ndarray) -> "RigidTransform":
        """Create a transform from a 4x4 homogeneous matrix.

        Raises:
            ValueError: If the matrix is not a 4x4 integer rigid transform
        """
        matrix = np.asarray(matrix)
        if matrix.shape != (4, 4):
            raise ValueError(f"Expected 4x4 matrix, got shape {matrix.shape}")
        if not np.all(np.mod(matrix, 1) == 0):
            raise ValueError("Transform matrix must contain integer entries")
        matrix = matrix.astype(np.int64)
        if not np.array_equal(matrix[3], [0, 0, 0, 1]):
            raise ValueError(f"Last row must be [0, 0, 0, 1], got {matrix[3]}")
        return cls(matrix[:3, :3], matrix[:3, 3])

    @property
    def origin(self) -> np.ndarray:
        """Image of the source frame's origin."""
        return self.translation

    def apply(self, points: np.ndarray) -> np.ndarray:
        """Transform an (N, 3) array (or a single length-3 point)."""
        points = np.asarray(points, dtype=np.int64)
        if points.size == 0:
            return np.empty((0, 3), dtype=np.int64)
        return points @ self.rotation.T + self.translation

    def compose(self, inner: "RigidTransform") -> "RigidTransform":
        """Transform equivalent to applying ``inner`` first, then ``self``."""
        return RigidTransform(
            self.rotation @ inner.rotation,
            self.rotation @ inner.translation + self.translation,
        )

    def __matmul__(self, inner: "RigidTransform") -> "RigidTransform":
        if not isinstance(inner, RigidTransform):
            return NotImplemented
        return self.compose(inner)

    def inverse(self) -> "RigidTransform":
        # Rotation matrices are orthogonal: R^-1 == R^T
        R_inv = self.rotation.T
        return RigidTransform(R_inv, -(R_inv @ self.translation))

    def as_matrix(self) -> np.ndarray:
        """4x4 homogeneous int64 matrix."""
        T = np.eye(4, dtype=np.int64)
        T[:3, :3] = self.rotation
        T[:3, 3] = self.translation
        return T

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RigidTransform):
            return NotImplemented
        return np.array_equal(self.rotation, other.rotation) and np.array_equal(
            self.translation, other.translation
        )

    def __hash__(self) -> int:
        return hash((self.rotation.tobytes(), self.translation.tobytes()))

    def __repr__(self) -> str:
        return (
            f"RigidTransform(rotation={self.rotation.tolist()}, "
            f"translation={self.translation.tolist()})"
        )
