"""
Legend model for the Air Quality Map.

Single source of truth for band colors and labels. The classifier and the
on-screen legend both read from this table so they cannot drift apart.
"""

from dataclasses import dataclass

from .quality_band import QualityBand


@dataclass(frozen=True)
class LegendEntry:
    band: QualityBand
    color: str
    label: str


class LegendModel:
    """Static, read-only mapping from QualityBand to display color and label."""

    # Display order: best to worst
    ENTRIES = {
        QualityBand.GOOD: LegendEntry(QualityBand.GOOD, "#2DC937", "Good"),
        QualityBand.MODERATE: LegendEntry(QualityBand.MODERATE, "#E7B416", "Moderate"),
        QualityBand.POOR: LegendEntry(QualityBand.POOR, "#FF0000", "Poor"),
    }

    @classmethod
    def entries(cls) -> list[LegendEntry]:
        return list(cls.ENTRIES.values())

    @classmethod
    def color_for(cls, band: QualityBand) -> str:
        return cls.ENTRIES[band].color

    @classmethod
    def label_for(cls, band: QualityBand) -> str:
        return cls.ENTRIES[band].label

    @staticmethod
    def hex_to_rgba(color: str, alpha: int = 255) -> list[int]:
        """
        Converts a '#RRGGBB' color to the [r, g, b, a] list pydeck expects.

        Args:
            color: Hex color string, with or without the leading '#'
            alpha: Alpha channel value (0-255)

        Returns:
            List of four integers
        """
        value = color.lstrip("#")
        if len(value) != 6:
            raise ValueError(f"expected a #RRGGBB color, got {color!r}")
        return [int(value[i:i + 2], 16) for i in (0, 2, 4)] + [alpha]
