"""
End-to-end beacon mapping.

Runs the full chain on a ``scan id -> points`` mapping:
pairwise alignment -> frame propagation -> beacon map assembly, configured
from an AppConfig.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional

from ..mapping.beacon_map import BeaconMap, BeaconMapAssembler
from ..mapping.graph_resolver import ScannerGraphResolver
from ..preprocessing.scan import scans_from_mapping
from ..utils.config import AppConfig
from ..utils.export import export_beacons_to_laz, save_scanner_transforms
from ..utils.logging import log_duration, setup_logger

logger = setup_logger(__name__)


def build_beacon_map(scan_points: Mapping, config: Optional[AppConfig] = None) -> BeaconMap:
    """
    Express all scans in one frame and merge their points.

    Args:
        scan_points: scan id -> (N, 3) integer points or Scan objects. The
            first entry is the anchor unless ``resolver.anchor_scan`` is set.
        config: Application configuration (defaults when None)

    Returns:
        BeaconMap with the deduplicated beacons and scanner origins

    Raises:
        DisconnectedGraphError: If some scans share no chain of overlaps with the anchor
    """
    cfg = config or AppConfig()
    scans = scans_from_mapping(scan_points)
    if not scans:
        raise ValueError("No scans to map")

    resolver = ScannerGraphResolver.from_config(cfg)
    with log_duration(logger, f"Resolving {len(scans)} scans"):
        frames = resolver.resolve(scans)

    beacon_map = BeaconMapAssembler().assemble(scans, frames)
    logger.info(
        f"Beacon map: {beacon_map.beacon_count} beacons, "
        f"max scanner distance {beacon_map.max_origin_distance}"
    )
    return beacon_map


def export_results(beacon_map: BeaconMap, config: AppConfig) -> list[str]:
    """Write the beacon map (and optional transforms) as configured in ``export``."""
    output_dir = Path(config.paths.output_dir)
    written = [
        export_beacons_to_laz(
            beacon_map,
            output_dir / config.export.beacons_file,
            include_scanners=True,
        )
    ]
    if config.export.transforms_dir:
        written.extend(
            save_scanner_transforms(beacon_map.transforms, output_dir / config.export.transforms_dir)
        )
    return written
