"""
Export utilities for scanner registration results.

Provides functions to export:
- The assembled beacon map to LAS/LAZ, with the number of scanners that
  observed each beacon as an extra dimension
- Rigid transforms as 4x4 homogeneous matrices in text files
"""

from pathlib import Path
from typing import Dict, List, TYPE_CHECKING, Union

import numpy as np

from .logging import setup_logger

if TYPE_CHECKING:
    from ..alignment.rigid_transform import RigidTransform
    from ..mapping.beacon_map import BeaconMap

logger = setup_logger(__name__)


def export_beacons_to_laz(
    beacon_map: "BeaconMap",
    output_path: Union[str, Path],
    *,
    include_scanners: bool = False,
) -> str:
    """
    Export the beacon map to a LAZ/LAS file.

    Beacon coordinates are stored with unit scale (they are integers). The
    number of scans that observed each beacon is stored in the extra dimension
    "observations". With ``include_scanners`` the scanner origins are appended
    as extra points with ``observations == 0`` and ``scanner_id`` set.

    Args:
        beacon_map: Result of BeaconMapAssembler.assemble
        output_path: Path for output file (extension determines format)
        include_scanners: Also write scanner positions

    Returns:
        Path to created file
    """
    import laspy

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    points = np.asarray(beacon_map.beacons, dtype=np.int64).reshape(-1, 3)
    observations = np.asarray(beacon_map.observations, dtype=np.uint16)
    scanner_ids = np.full(len(points), -1, dtype=np.int32)

    if include_scanners and beacon_map.scanner_origins:
        ids = sorted(beacon_map.scanner_origins)
        origins = np.stack([beacon_map.scanner_origins[k] for k in ids]).astype(np.int64)
        points = np.vstack([points, origins])
        observations = np.concatenate([observations, np.zeros(len(ids), dtype=np.uint16)])
        scanner_ids = np.concatenate([scanner_ids, np.asarray(ids, dtype=np.int32)])

    # LAS 1.4 point format 6 supports extra bytes
    header = laspy.LasHeader(point_format=6, version="1.4")
    header.scales = np.array([1.0, 1.0, 1.0])
    header.offsets = np.zeros(3)
    header.add_extra_dim(laspy.ExtraBytesParams(name="observations", type=np.uint16))
    header.add_extra_dim(laspy.ExtraBytesParams(name="scanner_id", type=np.int32))

    las = laspy.LasData(header)
    las.x = points[:, 0].astype(np.float64)
    las.y = points[:, 1].astype(np.float64)
    las.z = points[:, 2].astype(np.float64)
    las.observations = observations
    las.scanner_id = scanner_ids

    las.write(str(output_path))
    logger.info(f"Exported {len(points):,} points to {output_path}")

    return str(output_path)


def save_transform_matrix(transform: "RigidTransform", output_file: Union[str, Path]) -> None:
    """Save a rigid transform as a 4x4 homogeneous matrix text file.

    Args:
        transform: Transform to save
        output_file: Path to output file
    """
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    np.savetxt(output_file, transform.as_matrix(), fmt='%d', header='4x4 transformation matrix')
    logger.info(f"Saved transformation matrix to {output_file}")


def load_transform_matrix(input_file: Union[str, Path]) -> "RigidTransform":
    """Load a rigid transform from a 4x4 matrix text file.

    Raises:
        ValueError: If the file does not hold a 4x4 integer rigid transform
    """
    from ..alignment.rigid_transform import RigidTransform

    matrix = np.loadtxt(input_file)
    if matrix.shape != (4, 4):
        raise ValueError(f"Expected 4x4 matrix, got shape {matrix.shape}")
    logger.info(f"Loaded transformation matrix from {input_file}")
    return RigidTransform.from_matrix(matrix)


def save_scanner_transforms(
    transforms: Dict[int, "RigidTransform"],
    output_dir: Union[str, Path],
) -> List[str]:
    """Write one ``scanner_<id>.txt`` matrix file per scanner.

    Returns:
        List of written file paths, ordered by scanner id
    """
    output_dir = Path(output_dir)
    written = []
    for scan_id in sorted(transforms):
        path = output_dir / f"scanner_{scan_id}.txt"
        save_transform_matrix(transforms[scan_id], path)
        written.append(str(path))
    return written
