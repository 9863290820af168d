"""
Overlay point module for the Air Quality Map.

This module defines the OverlayPoint value object consumed by the map
surface and the InteractionController, and the per-band style table that
gives Poor points their heavier visual treatment.
"""

from dataclasses import dataclass

from .quality_band import QualityBand
from .sample import Coordinate


TOOLTIP_PREFIX = "Air Quality: "


@dataclass(frozen=True)
class OverlayPoint:
    """
    A renderable, classified point on the map.

    Attributes:
        coordinate: Position of the source sample
        band: Quality band of the source sample
        color: Hex display color for the band
        tooltip_text: Hover text, e.g. "Air Quality: Poor"
    """

    coordinate: Coordinate
    band: QualityBand
    color: str
    tooltip_text: str


@dataclass(frozen=True)
class OverlayStyle:
    """
    Visual treatment shared by every point of one band.

    Attributes:
        fill_opacity: Fill opacity between 0 and 1
        line_weight: Outline width in pixels
        radius_m: Circle radius in meters
    """

    fill_opacity: float
    line_weight: int
    radius_m: int


OVERLAY_STYLES = {
    QualityBand.POOR: OverlayStyle(fill_opacity=0.8, line_weight=3, radius_m=300),
    QualityBand.MODERATE: OverlayStyle(fill_opacity=0.5, line_weight=1, radius_m=250),
    QualityBand.GOOD: OverlayStyle(fill_opacity=0.5, line_weight=1, radius_m=250),
}


def tooltip_for(band: QualityBand) -> str:
    return f"{TOOLTIP_PREFIX}{band.display_name}"
