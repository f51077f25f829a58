"""
Scanner Report Loader

This module parses scanner reports into Scan objects. A report file holds one
block per scanner, separated by blank lines:

    --- scanner 0 ---
    404,-588,-901
    528,-643,409
    ...

Coordinates are signed integers relative to the reporting scanner.
"""

import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from ..utils.logging import setup_logger
from .scan import MalformedInputError, Scan

logger = setup_logger(__name__)

HEADER_PATTERN = re.compile(r"^---\s*scanner\s+(\d+)\s*---$", re.IGNORECASE)
POINT_PATTERN = re.compile(r"^\s*(-?\d+)\s*,\s*(-?\d+)\s*,\s*(-?\d+)\s*$")

INT64_MIN = int(np.iinfo(np.int64).min)
INT64_MAX = int(np.iinfo(np.int64).max)


class ScanReportLoader:
    """
    A class for loading scanner reports from text.

    Features:
    - Header detection with explicit scanner identifiers
    - Strict integer coordinate parsing with line numbers in error messages
    - Duplicate scanner and empty report detection
    """

    def __init__(self, *, allow_empty_scans: bool = False):
        """
        Initialize the report loader.

        Args:
            allow_empty_scans: If False, a scanner block without points is rejected
        """
        self.allow_empty_scans = allow_empty_scans

    def load(self, file_path: Union[str, Path]) -> Dict[int, Scan]:
        """
        Load a scanner report file.

        Args:
            file_path: Path to the report text file

        Returns:
            dict mapping scanner identifier to Scan, in declaration order

        Raises:
            FileNotFoundError: If the file does not exist
            MalformedInputError: If the file content is not a valid report
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        logger.info(f"Loading scanner reports from {file_path}")
        scans = self.parse(file_path.read_text(encoding="utf-8"), source=str(file_path))
        logger.info(
            f"Loaded {len(scans)} scanners with {sum(len(s) for s in scans.values())} points in total"
        )
        return scans

    def parse(self, text: str, *, source: Optional[str] = None) -> Dict[int, Scan]:
        """Parse report text into Scan objects keyed by scanner identifier."""
        where = source or "<text>"
        blocks: List[Tuple[int, List[Tuple[int, int, int]]]] = []
        current: Optional[List[Tuple[int, int, int]]] = None

        for line_no, raw in enumerate(text.splitlines(), start=1):
            line = raw.strip()
            if not line:
                continue

            header = HEADER_PATTERN.match(line)
            if header:
                current = []
                blocks.append((int(header.group(1)), current))
                continue

            if current is None:
                raise MalformedInputError(f"{where}:{line_no}: point listed before any scanner header")

            match = POINT_PATTERN.match(line)
            if not match:
                raise MalformedInputError(f"{where}:{line_no}: expected 'x,y,z' integers, got {line!r}")
            point = (int(match.group(1)), int(match.group(2)), int(match.group(3)))
            if any(v < INT64_MIN or v > INT64_MAX for v in point):
                raise MalformedInputError(f"{where}:{line_no}: coordinate out of range for int64 in {line!r}")
            current.append(point)

        if not blocks:
            raise MalformedInputError(f"{where}: no scanner reports found")

        scans: Dict[int, Scan] = {}
        for scan_id, points in blocks:
            if scan_id in scans:
                raise MalformedInputError(f"{where}: duplicate scanner identifier {scan_id}")
            if not points and not self.allow_empty_scans:
                raise MalformedInputError(f"{where}: scanner {scan_id} reports no points")
            if len(set(points)) != len(points):
                logger.warning(f"Scanner {scan_id} reports duplicate points; duplicates are merged")
            scans[scan_id] = Scan(scan_id, np.asarray(points, dtype=np.int64).reshape(-1, 3))

        return scans
