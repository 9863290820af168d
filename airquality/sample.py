"""
Sample module for the Air Quality Map.

This module defines the Sample dataclass which represents a single raw
pollutant-concentration observation tied to a coordinate, and the fixed
fallback sample set used when the remote data source is unavailable.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Coordinate:
    """
    Geographic position in GeoJSON order.

    Attributes:
        lon: Longitude in degrees
        lat: Latitude in degrees
    """

    lon: float
    lat: float


@dataclass(frozen=True)
class Sample:
    """
    Represents one pollutant-concentration observation.

    Samples are immutable once created. The band_hint and unit come from the
    wire and are kept for display only; the band is always recomputed
    locally by the BandClassifier.

    Attributes:
        coordinate: Position of the observation
        value: Pollutant concentration proxy (signed; classified by magnitude)
        band_hint: Optional band label reported by the data source
        unit: Optional measurement unit reported by the data source
    """

    coordinate: Coordinate
    value: float
    band_hint: Optional[str] = None
    unit: Optional[str] = None


# Substitute data for degraded mode: one reading per band around central London
FALLBACK_SAMPLE_SET: tuple[Sample, ...] = (
    Sample(Coordinate(lon=-0.09, lat=51.505), 0.087),
    Sample(Coordinate(lon=-0.1278, lat=51.5074), 0.03),
    Sample(Coordinate(lon=-0.1, lat=51.51), 0.005),
)
