"""
Web UI module for the Air Quality Map.

This module provides a Streamlit-based web interface for the air quality
overlay. The sidebar selects location (free-text search), date, pollutant
and radius; the map shows classified points that open a detail panel when
clicked. Fallback data is flagged with a non-blocking warning.
"""

import sys
import time
from datetime import date
from pathlib import Path
from typing import Optional

# Add project root to Python path to enable imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import streamlit as st
from streamlit_autorefresh import st_autorefresh
import pandas as pd

from airquality.advice_service import AdviceService, tip_at
from airquality.air_quality_map import DEFAULT_LOCATION, AirQualityMap, MapRender
from airquality.config import Settings
from airquality.geocoder import NominatimGeocoder
from airquality.legend_model import LegendModel
from airquality.logging_config import setup_logging
from airquality.map_surface import SelectionTracker, open_map_surface
from airquality.sample import Coordinate


POLLUTANTS = ["SO2", "NO2", "O3", "CO", "PM25", "PM10"]
AUTO_REFRESH_MS = 60000
TIP_ROTATION_SECONDS = 4


settings = Settings.from_env()
setup_logging(settings.log_level)

# Session-owned components: one map orchestrator per browser session
if "air_quality_map" not in st.session_state:
    st.session_state.air_quality_map = AirQualityMap(settings)
if "advice_service" not in st.session_state:
    st.session_state.advice_service = AdviceService(settings.advice_mode)
if "geocoder" not in st.session_state:
    st.session_state.geocoder = NominatimGeocoder(settings.geocoder_url, timeout=settings.fetch_timeout)
if "selection_tracker" not in st.session_state:
    st.session_state.selection_tracker = SelectionTracker()
if "user_location" not in st.session_state:
    st.session_state.user_location = DEFAULT_LOCATION
    st.session_state.location_label = "London (default)"


def handle_location_search(text: str) -> None:
    """
    Moves the map to the first geocoder hit for text.

    Shows an error in the sidebar when the text is blank or nothing matched.
    """
    if not text.strip():
        st.sidebar.error("Please enter a location to search.")
        return

    suggestion = st.session_state.geocoder.first(text)
    if suggestion is None:
        st.sidebar.error("No location found.")
        return

    st.session_state.user_location = suggestion.coordinate
    st.session_state.location_label = suggestion.label


def current_render(air_map: AirQualityMap, query, refresh_tick: Optional[int], live: bool) -> MapRender:
    """Refreshes on a new query or an auto-refresh tick, otherwise reuses the last render."""
    needs_refresh = (
        air_map.last_render is None
        or st.session_state.get("last_query") != query
        or st.session_state.get("last_refresh_tick") != refresh_tick
    )
    if needs_refresh:
        with st.spinner("Loading air quality data..."):
            render = air_map.refresh(query, enable_persistent_logging=live)
        st.session_state.last_query = query
        st.session_state.last_refresh_tick = refresh_tick
        return render
    return air_map.last_render


def render_legend() -> None:
    columns = st.columns(len(LegendModel.ENTRIES))
    for column, entry in zip(columns, LegendModel.entries()):
        column.markdown(
            f"<span style='color:{entry.color}; font-size:1.4em;'>●</span> {entry.label}",
            unsafe_allow_html=True,
        )


def render_points_table(render: MapRender) -> None:
    rows = [
        {
            "Latitude": point.coordinate.lat,
            "Longitude": point.coordinate.lon,
            "Band": point.band.display_name,
            "Color": point.color,
        }
        for point in render.points
    ]
    st.dataframe(pd.DataFrame(rows), use_container_width=True, height=240)


def main() -> None:
    """
    Main function that runs the Streamlit web interface.

    Builds the sidebar query controls, refreshes the overlay when the query
    changes, renders the map and routes overlay clicks to the interaction
    controller before drawing the detail panel.
    """
    st.set_page_config(page_title="Air Quality Map", layout="wide")
    st.title("Air Quality Map")

    air_map: AirQualityMap = st.session_state.air_quality_map

    # Location search
    st.sidebar.header("Location")
    search_text = st.sidebar.text_input("Search location...", key="location_search")
    if st.sidebar.button("Search"):
        handle_location_search(search_text)
    st.sidebar.caption(f"📍 {st.session_state.location_label}")

    # Query parameters
    st.sidebar.header("Data")
    selected_date = st.sidebar.date_input("Date", value=date.today())
    default_pollutant = settings.default_pollutant if settings.default_pollutant in POLLUTANTS else POLLUTANTS[0]
    pollutant = st.sidebar.selectbox("Pollutant", POLLUTANTS, index=POLLUTANTS.index(default_pollutant))
    radius_km = st.sidebar.number_input(
        "Radius (km)",
        min_value=1.0,
        max_value=100.0,
        value=float(settings.default_radius_km),
        step=1.0,
    )

    live = st.sidebar.checkbox("Auto-refresh", help="Re-fetch data every minute and log each render")
    refresh_tick = None
    if live:
        refresh_tick = st_autorefresh(interval=AUTO_REFRESH_MS, limit=None, key="map_refresh")
        st.sidebar.info("🔄 Auto-refresh active: updates every minute")

    location: Coordinate = st.session_state.user_location
    query = air_map.query_for(location, selected_date, pollutant, radius_km)
    render = current_render(air_map, query, refresh_tick, live)

    map_col, detail_col = st.columns([3, 2])

    with map_col:
        if render.degraded:
            st.warning(render.warning)

        # Keyed per render so a rebuilt overlay starts with no selection
        chart_key = f"air_map_{render.request_id}"
        with open_map_surface(render.points, center=render.center, user_location=location) as surface:
            event = st.pydeck_chart(
                surface.deck,
                use_container_width=True,
                on_select="rerun",
                selection_mode="single-object",
                key=chart_key,
            )
            click = st.session_state.selection_tracker.new_click(
                chart_key, event.selection if event is not None else None, surface
            )

        if click is not None:
            air_map.click(click)

        render_legend()

        with st.expander("Overlay points", expanded=False):
            render_points_table(render)

    with detail_col:
        state = air_map.interaction_state
        if state.popup_open:
            content = st.session_state.advice_service.get_advice(state.selected_band)
            with st.container(border=True):
                st.subheader(content.title)
                st.write(content.body)
                if st.button("Close"):
                    air_map.close_popup()
                    st.rerun()
        else:
            st.info("Click a point on the map to see air quality details.")

        tip = tip_at(int(time.time() // TIP_ROTATION_SECONDS))
        icon = "🫁" if tip.category == "Health" else "🌿"
        st.caption(f"{icon} {tip.heading}")
        st.write(tip.text)


if __name__ == "__main__":
    main()
