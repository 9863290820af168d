"""
Map surface for the Air Quality Map, built on Pydeck (Deck.gl for Python).

Each quality band is rendered as its own ScatterplotLayer using the band's
entry in OVERLAY_STYLES. The surface is a scoped resource: open_map_surface()
builds it when data is ready and always releases its layers on exit, error
paths included.
"""
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Sequence

import pydeck as pdk

from .interaction_controller import OverlayClickEvent
from .legend_model import LegendModel
from .overlay_point import OVERLAY_STYLES, OverlayPoint
from .quality_band import QualityBand
from .sample import Coordinate

logger = logging.getLogger(__name__)

# CartoDB Positron - free basemap, no API key required
MAP_STYLE = "https://basemaps.cartocdn.com/gl/positron-gl-style/style.json"

DEFAULT_ZOOM = 12
USER_MARKER_LAYER_ID = "user-location"
USER_MARKER_LABEL = "You are here!"


def layer_id_for(band: QualityBand) -> str:
    return f"overlay-{band.value}"


def overlay_records(points: Sequence[OverlayPoint], band: QualityBand) -> list[dict]:
    """
    Flattens the points of one band into pydeck records.

    point_index refers back into `points` so a picked object can be turned
    into a click event carrying the original OverlayPoint.
    """
    style = OVERLAY_STYLES[band]
    alpha = int(round(style.fill_opacity * 255))
    return [
        {
            "point_index": index,
            "longitude": point.coordinate.lon,
            "latitude": point.coordinate.lat,
            "band": point.band.display_name,
            "tooltip_text": point.tooltip_text,
            "fill_color": LegendModel.hex_to_rgba(point.color, alpha),
            "line_color": LegendModel.hex_to_rgba(point.color),
        }
        for index, point in enumerate(points)
        if point.band is band
    ]


def create_band_layer(points: Sequence[OverlayPoint], band: QualityBand) -> Optional[pdk.Layer]:
    """
    Create a ScatterplotLayer for one quality band.

    Returns:
        Pydeck ScatterplotLayer, or None if the band has no points
    """
    records = overlay_records(points, band)
    if not records:
        return None

    style = OVERLAY_STYLES[band]
    return pdk.Layer(
        "ScatterplotLayer",
        id=layer_id_for(band),
        data=records,
        get_position=["longitude", "latitude"],
        get_fill_color="fill_color",
        get_line_color="line_color",
        get_radius=style.radius_m,
        stroked=True,
        line_width_min_pixels=style.line_weight,
        pickable=True,
        auto_highlight=True,
    )


def create_user_marker_layer(location: Coordinate) -> pdk.Layer:
    return pdk.Layer(
        "ScatterplotLayer",
        id=USER_MARKER_LAYER_ID,
        data=[{
            "longitude": location.lon,
            "latitude": location.lat,
            "tooltip_text": USER_MARKER_LABEL,
        }],
        get_position=["longitude", "latitude"],
        get_fill_color=[30, 110, 230, 230],
        get_radius=60,
        radius_min_pixels=6,
        pickable=False,
    )


def build_deck(
    points: Sequence[OverlayPoint],
    center: Coordinate,
    zoom: float = DEFAULT_ZOOM,
    user_location: Optional[Coordinate] = None,
) -> pdk.Deck:
    """
    Assemble the deck: Good and Moderate below, Poor on top, user marker last.

    Args:
        points: Overlay points to render
        center: Initial view center
        zoom: Initial zoom level
        user_location: Optional position for the "You are here" marker
    """
    layers = []
    for band in (QualityBand.GOOD, QualityBand.MODERATE, QualityBand.POOR):
        layer = create_band_layer(points, band)
        if layer is not None:
            layers.append(layer)

    if user_location is not None:
        layers.append(create_user_marker_layer(user_location))

    view_state = pdk.ViewState(
        latitude=center.lat,
        longitude=center.lon,
        zoom=zoom,
        pitch=0,
        bearing=0,
    )

    return pdk.Deck(
        layers=layers,
        initial_view_state=view_state,
        tooltip={"text": "{tooltip_text}"},
        map_style=MAP_STYLE,
    )


@dataclass
class MapSurface:
    """A built deck plus the overlay points it renders."""

    deck: pdk.Deck
    points: list[OverlayPoint] = field(default_factory=list)
    released: bool = False

    def click_event_for(self, selection: Any) -> Optional[OverlayClickEvent]:
        if self.released:
            return None
        return overlay_click_from_selection(selection, self.points)

    def release(self) -> None:
        """Drops all layers and point references. Idempotent."""
        if self.released:
            return
        self.deck.layers = []
        self.points = []
        self.released = True
        logger.debug("Map surface released")


@contextmanager
def open_map_surface(
    points: Sequence[OverlayPoint],
    center: Coordinate,
    zoom: float = DEFAULT_ZOOM,
    user_location: Optional[Coordinate] = None,
) -> Iterator[MapSurface]:
    """Builds a MapSurface and guarantees it is released when the block exits."""
    surface = MapSurface(
        deck=build_deck(points, center, zoom=zoom, user_location=user_location),
        points=list(points),
    )
    try:
        yield surface
    finally:
        surface.release()


def overlay_click_from_selection(selection: Any, points: Sequence[OverlayPoint]) -> Optional[OverlayClickEvent]:
    """
    Turns a pydeck chart selection into an overlay click event.

    Args:
        selection: Selection state as returned by st.pydeck_chart, i.e. a
                   mapping with an "objects" dict of layer id -> picked objects
        points: The points the deck was built from

    Returns:
        OverlayClickEvent for the first picked overlay point, or None
    """
    if not selection:
        return None

    objects = selection.get("objects") or {}
    for band in QualityBand:
        for picked in objects.get(layer_id_for(band), []):
            index = picked.get("point_index")
            if isinstance(index, int) and 0 <= index < len(points):
                return OverlayClickEvent(points[index])
    return None


def selection_signature(selection: Any) -> Optional[tuple]:
    """
    Reduces a chart selection to a hashable signature of the picked points.

    Returns None when nothing on an overlay layer is selected.
    """
    if not selection:
        return None

    objects = selection.get("objects") or {}
    picked = tuple(
        (layer_id_for(band), tuple(obj.get("point_index") for obj in objects.get(layer_id_for(band), [])))
        for band in QualityBand
        if objects.get(layer_id_for(band))
    )
    return picked or None


class SelectionTracker:
    """
    Turns the persisted selection of a chart into one-shot click events.

    A chart selection survives reruns, so the same selection is seen again
    on every rerun. A click is dispatched only when the selection changes on
    a given chart; an empty selection resets the tracker so picking the same
    point again counts as a new click.
    """

    def __init__(self) -> None:
        self._last: Optional[tuple] = None

    def new_click(self, chart_key: str, selection: Any, surface: MapSurface) -> Optional[OverlayClickEvent]:
        """
        Args:
            chart_key: Key of the chart widget the selection came from
            selection: Selection state as returned by st.pydeck_chart
            surface: The open surface the chart was drawn from

        Returns:
            OverlayClickEvent if the selection is new, otherwise None
        """
        signature = selection_signature(selection)
        if signature is None:
            self._last = None
            return None

        signature = (chart_key, signature)
        if signature == self._last:
            return None

        event = surface.click_event_for(selection)
        self._last = signature if event is not None else None
        return event
