"""
Tests for the pydeck map surface.

Tests cover:
- Layer records and per-band layers
- Deck assembly and user marker
- Scoped lifecycle: release on normal exit and on error
- Selection to click-event mapping
"""

import pytest

from airquality.interaction_controller import InteractionController, OverlayClickEvent
from airquality.map_surface import (
    USER_MARKER_LAYER_ID,
    SelectionTracker,
    build_deck,
    create_band_layer,
    layer_id_for,
    open_map_surface,
    overlay_click_from_selection,
    overlay_records,
    selection_signature,
)
from airquality.overlay_builder import OverlayBuilder
from airquality.quality_band import QualityBand
from airquality.sample import Coordinate


class TestMapSurface:
    """Test suite for map surface construction and lifecycle."""

    @pytest.fixture
    def points(self, mixed_samples):
        """Fixture providing overlay points: Poor, Good, Moderate."""
        return OverlayBuilder().build(mixed_samples)

    @pytest.fixture
    def center(self):
        return Coordinate(lon=-0.1, lat=51.5)

    # ==================== Layers ====================

    def test_records_reference_original_points(self, points):
        records = overlay_records(points, QualityBand.GOOD)
        assert len(records) == 1
        assert records[0]["point_index"] == 1
        assert records[0]["tooltip_text"] == "Air Quality: Good"
        assert records[0]["longitude"] == points[1].coordinate.lon

    def test_poor_records_use_heavier_fill(self, points):
        poor = overlay_records(points, QualityBand.POOR)[0]
        good = overlay_records(points, QualityBand.GOOD)[0]
        assert poor["fill_color"][:3] == [255, 0, 0]
        assert poor["fill_color"][3] > good["fill_color"][3]

    def test_band_without_points_has_no_layer(self, points):
        assert create_band_layer(points[:1], QualityBand.GOOD) is None

    def test_band_layer_id(self, points):
        layer = create_band_layer(points, QualityBand.POOR)
        assert layer.id == layer_id_for(QualityBand.POOR)
        assert layer.type == "ScatterplotLayer"

    def test_deck_layers_with_user_marker(self, points, center):
        deck = build_deck(points, center, user_location=center)
        assert [layer.id for layer in deck.layers] == [
            "overlay-good", "overlay-moderate", "overlay-poor", USER_MARKER_LAYER_ID
        ]

    def test_deck_without_points(self, center):
        deck = build_deck([], center)
        assert deck.layers == []

    # ==================== Lifecycle ====================

    def test_surface_released_on_exit(self, points, center):
        with open_map_surface(points, center) as surface:
            assert surface.released is False
            assert len(surface.deck.layers) == 3
        assert surface.released is True
        assert surface.deck.layers == []
        assert surface.points == []

    def test_surface_released_on_error(self, points, center):
        with pytest.raises(RuntimeError):
            with open_map_surface(points, center) as surface:
                raise RuntimeError("render failed")
        assert surface.released is True

    def test_release_is_idempotent(self, points, center):
        with open_map_surface(points, center) as surface:
            surface.release()
        assert surface.released is True

    # ==================== Selection ====================

    def test_selection_becomes_click_event(self, points, center):
        selection = {
            "indices": {"overlay-poor": [0]},
            "objects": {"overlay-poor": [{"point_index": 0, "band": "Poor"}]},
        }
        with open_map_surface(points, center) as surface:
            event = surface.click_event_for(selection)
        assert event == OverlayClickEvent(points[0])

    def test_empty_selection(self, points):
        assert overlay_click_from_selection(None, points) is None
        assert overlay_click_from_selection({"indices": {}, "objects": {}}, points) is None

    def test_selection_with_unknown_index(self, points):
        selection = {"objects": {"overlay-good": [{"point_index": 42}]}}
        assert overlay_click_from_selection(selection, points) is None

    def test_released_surface_ignores_selection(self, points, center):
        with open_map_surface(points, center) as surface:
            pass
        selection = {"objects": {"overlay-poor": [{"point_index": 0}]}}
        assert surface.click_event_for(selection) is None


class TestSelectionTracker:
    """Test suite for one-shot click dispatch from persisted chart selections."""

    POOR_SELECTION = {"objects": {"overlay-poor": [{"point_index": 0}]}}
    GOOD_SELECTION = {"objects": {"overlay-good": [{"point_index": 1}]}}
    EMPTY_SELECTION = {"indices": {}, "objects": {}}

    @pytest.fixture
    def points(self, mixed_samples):
        return OverlayBuilder().build(mixed_samples)

    @pytest.fixture
    def tracker(self):
        return SelectionTracker()

    def new_click(self, tracker, points, chart_key, selection):
        with open_map_surface(points, Coordinate(lon=-0.1, lat=51.5)) as surface:
            return tracker.new_click(chart_key, selection, surface)

    def test_signature_of_empty_selection(self):
        assert selection_signature(None) is None
        assert selection_signature(self.EMPTY_SELECTION) is None
        assert selection_signature({"objects": {"overlay-poor": []}}) is None

    def test_signature_of_picked_point(self):
        assert selection_signature(self.POOR_SELECTION) == (("overlay-poor", (0,)),)

    def test_first_selection_dispatches(self, tracker, points):
        event = self.new_click(tracker, points, "air_map_1", self.POOR_SELECTION)
        assert event == OverlayClickEvent(points[0])

    def test_repeated_selection_on_rerun_is_ignored(self, tracker, points):
        self.new_click(tracker, points, "air_map_1", self.POOR_SELECTION)
        assert self.new_click(tracker, points, "air_map_1", self.POOR_SELECTION) is None

    def test_different_point_dispatches(self, tracker, points):
        self.new_click(tracker, points, "air_map_1", self.POOR_SELECTION)
        event = self.new_click(tracker, points, "air_map_1", self.GOOD_SELECTION)
        assert event == OverlayClickEvent(points[1])

    def test_same_point_after_empty_selection_dispatches_again(self, tracker, points):
        self.new_click(tracker, points, "air_map_1", self.POOR_SELECTION)
        assert self.new_click(tracker, points, "air_map_1", self.EMPTY_SELECTION) is None
        event = self.new_click(tracker, points, "air_map_1", self.POOR_SELECTION)
        assert event == OverlayClickEvent(points[0])

    def test_popup_reopens_after_close_and_reselect(self, tracker, points):
        controller = InteractionController()
        controller.on_overlay_click(self.new_click(tracker, points, "air_map_1", self.POOR_SELECTION))
        controller.on_popup_close()

        # Rerun after Close still carries the old selection
        assert self.new_click(tracker, points, "air_map_1", self.POOR_SELECTION) is None
        assert controller.state.popup_open is False

        self.new_click(tracker, points, "air_map_1", None)
        event = self.new_click(tracker, points, "air_map_1", self.POOR_SELECTION)
        controller.on_overlay_click(event)
        assert controller.state.popup_open is True
        assert controller.state.selected_band is QualityBand.POOR

    def test_new_chart_key_counts_as_new_selection(self, tracker, points):
        self.new_click(tracker, points, "air_map_1", self.POOR_SELECTION)
        event = self.new_click(tracker, points, "air_map_2", self.POOR_SELECTION)
        assert event == OverlayClickEvent(points[0])

    def test_unmatched_selection_does_not_block_later_click(self, tracker, points):
        unknown = {"objects": {"overlay-poor": [{"point_index": 42}]}}
        assert self.new_click(tracker, points, "air_map_1", unknown) is None
        assert self.new_click(tracker, points, "air_map_1", self.POOR_SELECTION) is not None
