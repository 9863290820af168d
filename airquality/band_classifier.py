"""
Band classifier module for the Air Quality Map.

This module contains the BandClassifier class which is a pure classifier
turning a raw pollutant value into a QualityBand and its display color. It
does not know about coordinates, overlays or rendering; those are handled by
the OverlayBuilder.
"""

from typing import Optional

import numpy as np

from .errors import InvalidSampleError
from .legend_model import LegendModel
from .quality_band import BandThresholds, QualityBand


class BandClassifier:
    """
    Pure classifier for pollutant sample values.

    Classifies by absolute value against four named thresholds. The Poor
    window is narrow: values just above poor_max classify as Good, the same
    as values near zero.
    """

    def __init__(self, thresholds: Optional[BandThresholds] = None) -> None:
        """
        Args:
            thresholds: Optional boundary constants. Defaults to BandThresholds().
        """
        self.thresholds = thresholds if thresholds is not None else BandThresholds()

    def classify(self, value: float) -> tuple[QualityBand, str]:
        """
        Classifies a sample value into a quality band.

        Rule, with a = |value|:
        - poor_min <= a <= poor_max            -> Poor
        - moderate_upper_min <= a < poor_min   -> Moderate
        - moderate_min <= a < moderate_upper_min -> Moderate
        - otherwise                            -> Good

        Args:
            value: Signed pollutant concentration proxy

        Returns:
            A tuple of (QualityBand, hex color from the LegendModel)

        Raises:
            InvalidSampleError: If value is not a finite number
        """
        magnitude = self.magnitude(value)
        thresholds = self.thresholds

        if thresholds.is_poor(magnitude):
            band = QualityBand.POOR
        elif thresholds.moderate_upper_min <= magnitude < thresholds.poor_min:
            band = QualityBand.MODERATE
        elif thresholds.moderate_min <= magnitude < thresholds.moderate_upper_min:
            band = QualityBand.MODERATE
        else:
            # Below moderate_min or above poor_max
            band = QualityBand.GOOD

        return (band, LegendModel.color_for(band))

    def is_poor_band(self, value: float) -> bool:
        """
        Checks whether a value falls in the narrow Poor window.

        Raises:
            InvalidSampleError: If value is not a finite number
        """
        return self.thresholds.is_poor(self.magnitude(value))

    @staticmethod
    def magnitude(value: float) -> float:
        """
        Returns |value| after checking it is a finite number.

        Raises:
            InvalidSampleError: If value is non-numeric, NaN or infinite
        """
        # bool is an int subclass but never a meaningful concentration
        if isinstance(value, bool):
            raise InvalidSampleError(value, "value must be numeric")
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise InvalidSampleError(value, "value must be numeric") from None

        if not np.isfinite(number):
            raise InvalidSampleError(value)

        return abs(number)
