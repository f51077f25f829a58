"""
Shared fixtures for scanner registration tests.
"""

from pathlib import Path

import numpy as np
import pytest

from synthetic_scans import (
    FIVE_SCANNER_ORIENTATIONS,
    FIVE_SCANNER_ORIGINS,
    FIVE_SCANNER_OVERLAPS,
    SyntheticSurvey,
    make_survey,
)

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture
def five_scanner_survey() -> SyntheticSurvey:
    return make_survey(FIVE_SCANNER_ORIGINS, FIVE_SCANNER_ORIENTATIONS, FIVE_SCANNER_OVERLAPS)


@pytest.fixture
def example_report_path() -> Path:
    """The published five-scanner example report."""
    return DATA_DIR / "example_scanners.txt"


@pytest.fixture
def example_beacons() -> np.ndarray:
    """All 79 beacons of the example report, in scanner 0's frame."""
    rows = [
        [int(v) for v in line.split(",")]
        for line in (DATA_DIR / "example_beacons.txt").read_text().splitlines()
        if line.strip()
    ]
    return np.unique(np.asarray(rows, dtype=np.int64), axis=0)
