"""
Overlay builder module for the Air Quality Map.

This module contains the OverlayBuilder class which turns a sequence of raw
samples into renderable overlay points. Samples in the narrow Poor window
are emitted first with a fixed Poor treatment; every other sample is
classified by the BandClassifier. Each sample lands in exactly one of the
two passes, so no point is rendered twice.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from .band_classifier import BandClassifier
from .errors import EmptyInputError, InvalidSampleError
from .legend_model import LegendModel
from .overlay_point import OverlayPoint, tooltip_for
from .quality_band import QualityBand
from .sample import Sample

logger = logging.getLogger(__name__)


@dataclass
class SamplePartition:
    """
    Result of splitting samples into the Poor window and the rest.

    Attributes:
        poor_band: Samples with poor_min <= |value| <= poor_max, in input order
        rest: All other classifiable samples, in input order
        dropped: Samples that could not be classified (non-finite values)
    """

    poor_band: list[Sample] = field(default_factory=list)
    rest: list[Sample] = field(default_factory=list)
    dropped: list[Sample] = field(default_factory=list)


class OverlayBuilder:
    """
    Builds overlay points from samples.

    Pure with respect to its input: samples are never mutated and the same
    input always produces the same output, in the same order.
    """

    def __init__(self, classifier: Optional[BandClassifier] = None) -> None:
        self.classifier = classifier if classifier is not None else BandClassifier()

    def partition(self, samples: Sequence[Sample]) -> SamplePartition:
        """
        Splits samples into the Poor window and the rest.

        Samples whose value cannot be classified are logged and moved to
        `dropped`; they never abort the partition of the remaining samples.

        Args:
            samples: Ordered sequence of samples

        Returns:
            SamplePartition with poor_band, rest and dropped lists
        """
        result = SamplePartition()
        for sample in samples:
            try:
                is_poor = self.classifier.is_poor_band(sample.value)
            except InvalidSampleError as exc:
                logger.warning("Dropping sample at %s: %s", sample.coordinate, exc)
                result.dropped.append(sample)
                continue

            if is_poor:
                result.poor_band.append(sample)
            else:
                result.rest.append(sample)
        return result

    def build(self, samples: Sequence[Sample]) -> list[OverlayPoint]:
        """
        Builds overlay points for a sample collection.

        Step 1 partitions the samples. Step 2 emits the Poor window with the
        fixed Poor color and tooltip. Step 3 classifies the rest and emits
        them with "Air Quality: {Band}" tooltips.

        An empty input yields an empty list; callers that need data on the
        map substitute the fallback set before calling.

        Args:
            samples: Ordered sequence of samples

        Returns:
            Overlay points: Poor-window points first, then the rest, each
            group in input order
        """
        if not samples:
            logger.debug("No samples to build overlay from")
            return []

        # Step 1: Partition
        partition = self.partition(samples)

        # Step 2: Poor window, fixed treatment
        points = [
            OverlayPoint(
                coordinate=sample.coordinate,
                band=QualityBand.POOR,
                color=LegendModel.color_for(QualityBand.POOR),
                tooltip_text=tooltip_for(QualityBand.POOR),
            )
            for sample in partition.poor_band
        ]

        # Step 3: Reclassify everything else
        for sample in partition.rest:
            band, color = self.classifier.classify(sample.value)
            points.append(
                OverlayPoint(
                    coordinate=sample.coordinate,
                    band=band,
                    color=color,
                    tooltip_text=tooltip_for(band),
                )
            )

        logger.debug(
            "Built %d overlay points (%d poor window, %d rest, %d dropped)",
            len(points), len(partition.poor_band), len(partition.rest), len(partition.dropped),
        )
        return points

    @staticmethod
    def require_non_empty(samples: Sequence[Sample]) -> Sequence[Sample]:
        """
        Returns samples unchanged, or raises if there are none.

        Raises:
            EmptyInputError: If samples is empty
        """
        if not samples:
            raise EmptyInputError("overlay requires at least one sample")
        return samples
