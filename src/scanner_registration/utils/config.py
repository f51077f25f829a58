"""
Configuration management for scanner-registration.

Provides a typed pydantic model and YAML loader with sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Literal, Any, Dict

from pydantic import BaseModel, Field, ValidationError
import yaml


# -----------------------
# Typed config structures
# -----------------------


class PathsConfig(BaseModel):
    input_file: str = Field(default="data/scanner_reports.txt")
    output_dir: str = Field(default="data/output")


class MatchingConfig(BaseModel):
    overlap_threshold: int = Field(
        default=12,
        ge=1,
        description="Minimum number of coincident points required to accept an alignment",
    )
    use_fingerprint_prefilter: bool = Field(
        default=True,
        description="Skip pairs whose pairwise-distance fingerprints cannot share enough points",
    )
    verify_unique_orientation: bool = Field(
        default=False,
        description="Try all 24 orientations and fail if more than one satisfies the threshold",
    )


class ResolverConfig(BaseModel):
    # None = the first scanner of the input mapping
    anchor_scan: Optional[int] = Field(default=None, ge=0)


class ParallelConfig(BaseModel):
    enabled: bool = Field(default=False, description="Discover pairwise alignments in worker processes")
    n_workers: Optional[int] = Field(default=None, description="Number of worker processes (None = auto-detect: cpu_count - 1)")


class ExportConfig(BaseModel):
    enabled: bool = Field(default=False)
    beacons_file: str = Field(default="beacons.laz", description="File name (inside paths.output_dir) for the beacon map")
    transforms_dir: Optional[str] = Field(
        default=None,
        description="Directory (inside paths.output_dir) for per-scanner 4x4 transforms (None = do not write)",
    )


class LoggingConfig(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    file: Optional[str] = Field(default=None)


class AppConfig(BaseModel):
    paths: PathsConfig = Field(default_factory=PathsConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    parallel: ParallelConfig = Field(default_factory=ParallelConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# -----------------------
# Loader
# -----------------------


def _project_root() -> Path:
    """
    Resolve the repository root directory.

    File is at: repo_root/src/scanner_registration/utils/config.py
    parents sequence:
      0 -> .../src/scanner_registration/utils
      1 -> .../src/scanner_registration
      2 -> .../src
      3 -> repo_root
    """
    return Path(__file__).resolve().parents[3]


def load_config(path: Optional[str | Path] = None, *, allow_missing: bool = True) -> AppConfig:
    """
    Load configuration from YAML into a typed AppConfig.

    Search order when path is None:
    1) repo_root/config/default.yaml
    2) if missing and allow_missing=True: return default AppConfig()

    Relative paths that do not exist from the working directory are also
    tried relative to the repository root.

    Args:
        path: Explicit YAML file path.
        allow_missing: If True, returns defaults when file missing; otherwise raises.

    Returns:
        AppConfig instance
    """
    cfg_path: Path
    if path is None:
        cfg_path = _project_root() / "config" / "default.yaml"
    else:
        cfg_path = Path(path)
        if not cfg_path.is_absolute() and not cfg_path.exists():
            cfg_path = _project_root() / cfg_path

    if not cfg_path.exists():
        if allow_missing:
            return AppConfig()
        raise FileNotFoundError(f"Config file not found: {cfg_path}")

    with cfg_path.open("r", encoding="utf-8") as f:
        raw: Dict[str, Any] = yaml.safe_load(f) or {}

    try:
        return AppConfig.model_validate(raw)
    except ValidationError as e:
        # Re-raise with context to help users fix the YAML
        raise ValueError(f"Invalid configuration in {cfg_path}: {e}") from e
