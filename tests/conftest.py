"""
Pytest configuration for Air Quality Map tests.

Registers custom markers and provides shared fixtures.
"""

import pytest

from airquality.sample import Coordinate, Sample


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def london():
    """Fixture providing central London coordinates."""
    return Coordinate(lon=-0.1278, lat=51.5074)


@pytest.fixture
def mixed_samples():
    """Fixture providing one sample per band, in Good/Poor/Moderate order."""
    return [
        Sample(Coordinate(lon=-0.10, lat=51.50), 0.005),
        Sample(Coordinate(lon=-0.11, lat=51.51), -0.087),
        Sample(Coordinate(lon=-0.12, lat=51.52), 0.06),
    ]


@pytest.fixture
def feature_collection():
    """Fixture providing a heatmap API response body with two features."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [-0.1278, 51.5074]},
                "properties": {
                    "value": -0.087,
                    "pollutant": "SO2",
                    "radius_km": 10,
                    "color": "#FF0000",
                    "band": "poor",
                    "unit": "mol/m2",
                },
            },
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [-0.09, 51.505]},
                "properties": {
                    "value": 0.2,
                    "pollutant": "SO2",
                    "radius_km": 10,
                    "color": "#FF0000",
                    "band": "poor",
                    "unit": "mol/m2",
                },
            },
        ],
        "properties": {"pollutant": "SO2", "radius_km": 10},
    }
