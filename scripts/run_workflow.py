"""
Complete scanner registration workflow

This script loads scanner reports, resolves every scanner into the anchor's
frame and reports the number of unique beacons together with the largest
Manhattan distance between two scanners.
"""

import sys
import argparse
from pathlib import Path

# Add the src to the path to import modules
sys.path.append(str(Path(__file__).parent.parent / "src"))

from scanner_registration.preprocessing.loader import ScanReportLoader
from scanner_registration.pipeline.workflow import build_beacon_map, export_results
from scanner_registration.mapping.graph_resolver import DisconnectedGraphError
from scanner_registration.utils.config import load_config, AppConfig
from scanner_registration.utils.logging import setup_logger, set_log_level


def main() -> int:
    """
    Main function to run the scanner registration workflow.
    """
    parser = argparse.ArgumentParser(description="Scanner Registration Workflow")
    parser.add_argument(
        "--input",
        type=str,
        default=None,
        help="Scanner report file (defaults to paths.input_file from the config)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file (defaults to config/default.yaml)",
    )
    parser.add_argument(
        "--threshold",
        type=int,
        default=None,
        help="Override matching.overlap_threshold",
    )
    parser.add_argument(
        "--anchor",
        type=int,
        default=None,
        help="Override resolver.anchor_scan (scanner whose frame becomes the global frame)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Discover pairwise alignments with this many worker processes",
    )
    parser.add_argument(
        "--export",
        action="store_true",
        help="Write the beacon map (and transforms, if configured) to paths.output_dir",
    )
    args = parser.parse_args()

    cfg: AppConfig = load_config(args.config)
    if args.input:
        cfg.paths.input_file = args.input
    if args.threshold is not None:
        cfg.matching.overlap_threshold = args.threshold
    if args.anchor is not None:
        cfg.resolver.anchor_scan = args.anchor
    if args.workers is not None:
        cfg.parallel.enabled = args.workers > 1
        cfg.parallel.n_workers = args.workers

    logger = setup_logger(__name__, level=cfg.logging.level, log_file=cfg.logging.file)
    set_log_level(cfg.logging.level, log_file=cfg.logging.file)

    logger.info("Scanner Registration Workflow")
    logger.info("=============================")

    scans = ScanReportLoader().load(cfg.paths.input_file)
    try:
        beacon_map = build_beacon_map(scans, cfg)
    except DisconnectedGraphError as e:
        logger.error(f"Cannot build a single map: {e}")
        return 1

    for scan_id in sorted(beacon_map.scanner_origins):
        logger.info(f"Scanner {scan_id} at {beacon_map.scanner_origins[scan_id].tolist()}")

    if args.export or cfg.export.enabled:
        for path in export_results(beacon_map, cfg):
            logger.info(f"Wrote {path}")

    print(f"Unique beacons: {beacon_map.beacon_count}")
    print(f"Largest scanner distance: {beacon_map.max_origin_distance}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
