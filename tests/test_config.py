"""
Tests for Settings and logging configuration.

Tests cover:
- Defaults when no environment variables are set
- Environment overrides, including threshold constants
- Invalid values falling back to defaults
"""

import logging
import os
from unittest.mock import patch

import pytest

from airquality.config import DEFAULT_API_BASE_URL, Settings
from airquality.logging_config import setup_logging
from airquality.quality_band import BandThresholds


class TestSettings:
    """Test suite for Settings.from_env."""

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings.from_env()
        assert settings.api_base_url == DEFAULT_API_BASE_URL
        assert settings.fetch_timeout == 10.0
        assert settings.default_pollutant == "SO2"
        assert settings.default_radius_km == 10.0
        assert settings.thresholds == BandThresholds()
        assert settings.advice_mode == "mock"

    def test_environment_overrides(self):
        env = {
            "AIRQUALITY_API_BASE_URL": "https://api.example.test/",
            "AIRQUALITY_FETCH_TIMEOUT": "3.5",
            "AIRQUALITY_DEFAULT_POLLUTANT": "no2",
            "AIRQUALITY_DEFAULT_RADIUS_KM": "25",
            "AIRQUALITY_ADVICE_MODE": "GROK",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings.from_env()
        assert settings.api_base_url == "https://api.example.test"
        assert settings.fetch_timeout == 3.5
        assert settings.default_pollutant == "NO2"
        assert settings.default_radius_km == 25.0
        assert settings.advice_mode == "grok"

    def test_threshold_overrides(self):
        with patch.dict(os.environ, {"AIRQUALITY_THRESHOLD_POOR_MAX": "0.2"}, clear=True):
            settings = Settings.from_env()
        assert settings.thresholds.poor_max == 0.2
        assert settings.thresholds.poor_min == 0.085

    def test_out_of_order_thresholds_use_defaults(self, caplog):
        with patch.dict(os.environ, {"AIRQUALITY_THRESHOLD_POOR_MIN": "0.5"}, clear=True):
            with caplog.at_level(logging.WARNING, logger="airquality.config"):
                settings = Settings.from_env()
        assert settings.thresholds == BandThresholds()
        assert "AIRQUALITY_THRESHOLD_" in caplog.text

    def test_out_of_order_thresholds_rejected_by_constructor(self):
        with pytest.raises(ValueError):
            BandThresholds(poor_min=0.5)

    def test_invalid_timeout_uses_default(self, caplog):
        with patch.dict(os.environ, {"AIRQUALITY_FETCH_TIMEOUT": "soon"}, clear=True):
            with caplog.at_level(logging.WARNING, logger="airquality.config"):
                settings = Settings.from_env()
        assert settings.fetch_timeout == 10.0
        assert "AIRQUALITY_FETCH_TIMEOUT" in caplog.text

    def test_non_positive_timeout_uses_default(self):
        with patch.dict(os.environ, {"AIRQUALITY_FETCH_TIMEOUT": "0"}, clear=True):
            assert Settings.from_env().fetch_timeout == 10.0

    def test_unknown_advice_mode_is_mock(self):
        with patch.dict(os.environ, {"AIRQUALITY_ADVICE_MODE": "magic"}, clear=True):
            assert Settings.from_env().advice_mode == "mock"


class TestSetupLogging:
    """Test suite for setup_logging."""

    def test_handlers_not_duplicated(self, tmp_path):
        log_file = tmp_path / "app.log"
        setup_logging(logging.DEBUG, str(log_file))
        logger = setup_logging("INFO")
        assert logger.name == "airquality"
        assert logger.level == logging.INFO
        assert len(logger.handlers) == 1
        logger.handlers.clear()

    def test_unknown_level_name_defaults_to_info(self):
        logger = setup_logging("LOUD")
        assert logger.level == logging.INFO
        logger.handlers.clear()
