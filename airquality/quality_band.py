"""
Quality band module for the Air Quality Map.

This module defines the QualityBand enumeration and the BandThresholds
dataclass holding the four boundary constants used by the BandClassifier.
Bands are categorical tags, not a scale: the classification rule is not
monotonic in the sample value.
"""

from dataclasses import dataclass
from enum import Enum


class QualityBand(Enum):
    """Categorical air quality severity derived from a sample value."""

    GOOD = "good"
    MODERATE = "moderate"
    POOR = "poor"

    @property
    def display_name(self) -> str:
        """Capitalized band name used in tooltips and the legend."""
        return self.value.capitalize()


@dataclass(frozen=True)
class BandThresholds:
    """
    Boundary constants for band classification.

    The defaults reproduce the rule the map has always used, including the
    narrow Poor window: absolute values above poor_max classify as Good.

    Attributes:
        moderate_min: Lower bound of the lower Moderate range (inclusive)
        moderate_upper_min: Lower bound of the upper Moderate range (inclusive)
        poor_min: Lower bound of the Poor range (inclusive)
        poor_max: Upper bound of the Poor range (inclusive)
    """

    moderate_min: float = 0.01
    moderate_upper_min: float = 0.05
    poor_min: float = 0.085
    poor_max: float = 0.089

    def __post_init__(self) -> None:
        ordered = (self.moderate_min, self.moderate_upper_min, self.poor_min, self.poor_max)
        if any(lower > upper for lower, upper in zip(ordered, ordered[1:])):
            raise ValueError(
                "thresholds must satisfy moderate_min <= moderate_upper_min <= poor_min <= poor_max, "
                f"got {ordered}"
            )

    def is_poor(self, magnitude: float) -> bool:
        """Returns True if an absolute sample value falls in the Poor window."""
        return self.poor_min <= magnitude <= self.poor_max
