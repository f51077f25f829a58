"""
Tests for YAML configuration loading.
"""

import logging

import pytest

from scanner_registration.utils.config import AppConfig, load_config
from scanner_registration.utils.logging import set_log_level, setup_logger


class TestLoadConfig:
    """Tests for load_config and the shipped profiles."""

    def test_default_file(self):
        cfg = load_config()
        assert cfg.matching.overlap_threshold == 12
        assert cfg.matching.use_fingerprint_prefilter is True
        assert cfg.resolver.anchor_scan is None
        assert cfg.parallel.enabled is False
        assert cfg.logging.level == "INFO"

    def test_defaults_match_model(self):
        assert load_config() == AppConfig()

    def test_large_survey_profile(self):
        cfg = load_config("config/profiles/large_survey.yaml")
        assert cfg.parallel.enabled is True
        assert cfg.parallel.n_workers == 4
        assert cfg.export.enabled is True
        assert cfg.export.transforms_dir == "transforms"

    def test_strict_profile(self):
        cfg = load_config("config/profiles/strict.yaml")
        assert cfg.matching.use_fingerprint_prefilter is False
        assert cfg.matching.verify_unique_orientation is True
        assert cfg.logging.level == "DEBUG"

    def test_partial_file_keeps_defaults(self, tmp_path):
        path = tmp_path / "partial.yaml"
        path.write_text("matching:\n  overlap_threshold: 6\n")
        cfg = load_config(path)
        assert cfg.matching.overlap_threshold == 6
        assert cfg.export.beacons_file == "beacons.laz"

    @pytest.mark.parametrize(
        "content",
        [
            "matching:\n  overlap_threshold: 0\n",
            "resolver:\n  anchor_scan: -1\n",
            "logging:\n  level: VERBOSE\n",
        ],
    )
    def test_invalid_values(self, tmp_path, content):
        path = tmp_path / "bad.yaml"
        path.write_text(content)
        with pytest.raises(ValueError, match="Invalid configuration"):
            load_config(path)

    def test_missing_file(self, tmp_path):
        missing = tmp_path / "missing.yaml"
        assert load_config(missing) == AppConfig()
        with pytest.raises(FileNotFoundError):
            load_config(missing, allow_missing=False)


class TestLogging:
    """Tests for the logging helpers."""

    def test_setup_logger_does_not_duplicate_handlers(self):
        logger = setup_logger("scanner_registration.tests.dup")
        n_handlers = len(logger.handlers)
        assert setup_logger("scanner_registration.tests.dup") is logger
        assert len(logger.handlers) == n_handlers

    def test_set_log_level(self, tmp_path):
        logger = setup_logger("scanner_registration.tests.level")
        try:
            set_log_level("DEBUG", log_file=str(tmp_path / "run.log"))
            assert logger.level == logging.DEBUG
            logger.debug("written to file")
            for handler in logger.handlers:
                handler.flush()
            assert "written to file" in (tmp_path / "run.log").read_text()
        finally:
            set_log_level("INFO")
            for name, other in list(logging.Logger.manager.loggerDict.items()):
                if not (isinstance(other, logging.Logger) and name.startswith("scanner_registration")):
                    continue
                for handler in list(other.handlers):
                    if isinstance(handler, logging.FileHandler):
                        other.removeHandler(handler)
                        handler.close()

    def test_records_reach_root_handlers(self, caplog):
        logger = setup_logger("scanner_registration.tests.caplog")
        with caplog.at_level(logging.INFO):
            logger.info("edge discovery started")
        assert "edge discovery started" in caplog.text

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            setup_logger("scanner_registration.tests.bad", level="LOUD")
