"""
Air Quality Map package.

Classifies pollutant samples into quality bands, builds map overlays from
them and tracks the click-driven detail popup state.
"""

from .air_quality_map import AirQualityMap, MapRender
from .band_classifier import BandClassifier
from .data_source_adapter import DataSourceAdapter, FetchResult, HeatmapQuery
from .errors import AirQualityError, DataFetchError, EmptyInputError, InvalidSampleError
from .interaction_controller import InteractionController, InteractionState, OverlayClickEvent
from .legend_model import LegendModel
from .overlay_builder import OverlayBuilder
from .overlay_point import OverlayPoint
from .quality_band import BandThresholds, QualityBand
from .sample import FALLBACK_SAMPLE_SET, Coordinate, Sample

__all__ = [
    'AirQualityMap',
    'MapRender',
    'BandClassifier',
    'DataSourceAdapter',
    'FetchResult',
    'HeatmapQuery',
    'AirQualityError',
    'DataFetchError',
    'EmptyInputError',
    'InvalidSampleError',
    'InteractionController',
    'InteractionState',
    'OverlayClickEvent',
    'LegendModel',
    'OverlayBuilder',
    'OverlayPoint',
    'BandThresholds',
    'QualityBand',
    'FALLBACK_SAMPLE_SET',
    'Coordinate',
    'Sample',
]
