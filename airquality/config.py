"""
Configuration for the Air Quality Map.

Settings are read from environment variables (a local .env file is loaded
first). Precedence everywhere is: explicit constructor argument, then
environment variable, then the defaults below.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from .quality_band import BandThresholds

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://ox2you-api.onrender.com"
DEFAULT_GEOCODER_URL = "https://nominatim.openstreetmap.org/search"
DEFAULT_FETCH_TIMEOUT = 10.0
DEFAULT_POLLUTANT = "SO2"
DEFAULT_RADIUS_KM = 10.0
ADVICE_MODES = ("mock", "grok")


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name, "").strip()
    return raw if raw else default


def _env_float(name: str, default: float, positive: bool = False) -> float:
    """Reads a float env var, falling back to the default on bad input."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number, using %s", name, raw, default)
        return default
    if positive and value <= 0:
        logger.warning("Ignoring %s=%r: must be > 0, using %s", name, raw, default)
        return default
    return value


def thresholds_from_env() -> BandThresholds:
    """
    Builds BandThresholds from AIRQUALITY_THRESHOLD_* variables.

    Out-of-order values are ignored as a whole: a warning is logged and the
    default thresholds are used.
    """
    defaults = BandThresholds()
    try:
        return BandThresholds(
            moderate_min=_env_float("AIRQUALITY_THRESHOLD_MODERATE_MIN", defaults.moderate_min),
            moderate_upper_min=_env_float("AIRQUALITY_THRESHOLD_MODERATE_UPPER_MIN", defaults.moderate_upper_min),
            poor_min=_env_float("AIRQUALITY_THRESHOLD_POOR_MIN", defaults.poor_min),
            poor_max=_env_float("AIRQUALITY_THRESHOLD_POOR_MAX", defaults.poor_max),
        )
    except ValueError as e:
        logger.warning("Ignoring AIRQUALITY_THRESHOLD_* overrides: %s, using defaults", e)
        return defaults


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings for a map session.

    Attributes:
        api_base_url: Base URL of the heatmap API
        fetch_timeout: Timeout in seconds for one heatmap request
        default_pollutant: Pollutant code used when the user picks none
        default_radius_km: Search radius used when the user picks none
        thresholds: Band classification boundaries
        advice_mode: "mock" or "grok" for popup copy
        geocoder_url: Nominatim-compatible search endpoint
        log_level: Name of the logging level for the airquality logger
    """

    api_base_url: str = DEFAULT_API_BASE_URL
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    default_pollutant: str = DEFAULT_POLLUTANT
    default_radius_km: float = DEFAULT_RADIUS_KM
    thresholds: BandThresholds = field(default_factory=BandThresholds)
    advice_mode: str = "mock"
    geocoder_url: str = DEFAULT_GEOCODER_URL
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        advice_mode = os.getenv("AIRQUALITY_ADVICE_MODE", "").lower()
        return cls(
            api_base_url=_env_str("AIRQUALITY_API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/"),
            fetch_timeout=_env_float("AIRQUALITY_FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT, positive=True),
            default_pollutant=_env_str("AIRQUALITY_DEFAULT_POLLUTANT", DEFAULT_POLLUTANT).upper(),
            default_radius_km=_env_float("AIRQUALITY_DEFAULT_RADIUS_KM", DEFAULT_RADIUS_KM, positive=True),
            thresholds=thresholds_from_env(),
            advice_mode=advice_mode if advice_mode in ADVICE_MODES else "mock",
            geocoder_url=_env_str("AIRQUALITY_GEOCODER_URL", DEFAULT_GEOCODER_URL),
            log_level=_env_str("AIRQUALITY_LOG_LEVEL", "INFO").upper(),
        )
