"""
Air quality map module for the Air Quality Map.

This module contains the AirQualityMap class, the session orchestrator of
the overlay pipeline. It turns a location change into a heatmap query,
fetches samples through the DataSourceAdapter, substitutes the fallback set
when there is nothing to draw, builds overlay points, discards responses
that were superseded by a newer request, and forwards overlay clicks and
popup closes to the InteractionController. Each render can also be written
to a human-readable persistent log.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Optional, Union

from .band_classifier import BandClassifier
from .config import Settings
from .data_source_adapter import DataSourceAdapter, FetchResult, HeatmapQuery
from .interaction_controller import InteractionController, InteractionState, OverlayClickEvent
from .overlay_builder import OverlayBuilder
from .overlay_point import OverlayPoint
from .quality_band import QualityBand
from .sample import FALLBACK_SAMPLE_SET, Coordinate

logger = logging.getLogger(__name__)

# Used when the user's position is unknown (central London)
DEFAULT_LOCATION = Coordinate(lon=-0.09, lat=51.505)

NO_SAMPLES_WARNING = "No samples were returned for this area. Showing sample data instead."
DEGRADED_WARNING = "Live air quality data is unavailable. Showing sample data instead."


@dataclass
class MapRender:
    """
    One rendered state of the map.

    Attributes:
        points: Overlay points to draw
        query: The query the points answer
        degraded: True if fallback data is in use
        warning: Non-blocking message for the user when degraded
        request_id: Adapter request id that produced the points
        timestamp: When the render was built
    """

    points: list[OverlayPoint]
    query: HeatmapQuery
    degraded: bool = False
    warning: Optional[str] = None
    request_id: int = 0
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def center(self) -> Coordinate:
        return Coordinate(lon=self.query.longitude, lat=self.query.latitude)

    def band_counts(self) -> dict[QualityBand, int]:
        counts = Counter(point.band for point in self.points)
        return {band: counts.get(band, 0) for band in QualityBand}


class AirQualityMap:
    """
    Session orchestrator for the air quality overlay.

    Owns one DataSourceAdapter, one OverlayBuilder and one
    InteractionController for the lifetime of a map view session.
    """

    # Logging configuration
    LOG_DIR = Path("logs")
    LOG_FILE_NAME = "map_log.log"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        adapter: Optional[DataSourceAdapter] = None,
        builder: Optional[OverlayBuilder] = None,
        controller: Optional[InteractionController] = None,
        log_dir: Optional[Path] = None,
    ):
        """
        Args:
            settings: Runtime settings. Defaults to Settings.from_env().
            adapter: Data source. Defaults to one built from settings.
            builder: Overlay builder. Defaults to one using settings.thresholds.
            controller: Interaction controller. Defaults to a fresh one.
            log_dir: Directory for the persistent render log.
        """
        self.settings = settings if settings is not None else Settings.from_env()
        self.adapter = adapter if adapter is not None else DataSourceAdapter(
            base_url=self.settings.api_base_url,
            timeout=self.settings.fetch_timeout,
        )
        self.builder = builder if builder is not None else OverlayBuilder(
            BandClassifier(self.settings.thresholds)
        )
        self.controller = controller if controller is not None else InteractionController()
        self.log_dir = Path(log_dir) if log_dir is not None else self.LOG_DIR
        self._last_render: Optional[MapRender] = None

    @property
    def log_file(self) -> Path:
        return self.log_dir / self.LOG_FILE_NAME

    @property
    def last_render(self) -> Optional[MapRender]:
        return self._last_render

    @property
    def interaction_state(self) -> InteractionState:
        return self.controller.state

    def query_for(
        self,
        location: Optional[Coordinate] = None,
        on_date: Optional[Union[str, date]] = None,
        pollutant: Optional[str] = None,
        radius_km: Optional[float] = None,
    ) -> HeatmapQuery:
        """
        Builds a heatmap query, filling gaps from settings.

        Args:
            location: Search center. Defaults to central London.
            on_date: Observation date. Defaults to today.
            pollutant: Pollutant code. Defaults to settings.default_pollutant.
            radius_km: Search radius. Defaults to settings.default_radius_km.
        """
        location = location if location is not None else DEFAULT_LOCATION
        return HeatmapQuery(
            latitude=location.lat,
            longitude=location.lon,
            date=on_date if on_date is not None else date.today(),
            pollutant=(pollutant or self.settings.default_pollutant).upper(),
            radius_km=radius_km if radius_km is not None else self.settings.default_radius_km,
        )

    def refresh(self, query: HeatmapQuery, enable_persistent_logging: bool = False) -> MapRender:
        """
        Fetches and renders the overlay for a query.

        Args:
            query: Location, date, pollutant and radius to show
            enable_persistent_logging: If True, append this render to the log file

        Returns:
            The new MapRender
        """
        result = self.adapter.fetch(query)
        render = self.accept(result, query, enable_persistent_logging=enable_persistent_logging)
        # A synchronous refresh is always the latest request, so never None here
        return render

    def accept(
        self,
        result: FetchResult,
        query: HeatmapQuery,
        enable_persistent_logging: bool = False,
    ) -> Optional[MapRender]:
        """
        Turns a fetch result into a render, unless it has been superseded.

        Step 1 discards results from requests older than the latest one.
        Step 2 substitutes the fallback set for an empty collection. Step 3
        builds the overlay.

        Args:
            result: Result returned by the adapter
            query: The query that produced result
            enable_persistent_logging: If True, append this render to the log file

        Returns:
            The new MapRender, or None if result was stale
        """
        # Step 1: Drop out-of-order responses
        if not self.adapter.is_current(result.request_id):
            logger.info("Discarding stale heatmap result #%d", result.request_id)
            if enable_persistent_logging:
                self._log_render(query, result.request_id, None, stale=True)
            return None

        # Step 2: Never draw against zero points
        samples = result.samples
        degraded = result.degraded
        warning = DEGRADED_WARNING if degraded else None
        if not samples:
            logger.warning("Heatmap result #%d was empty, using fallback samples", result.request_id)
            samples = list(FALLBACK_SAMPLE_SET)
            degraded = True
            warning = NO_SAMPLES_WARNING

        # Step 3: Build overlay
        points = self.builder.build(samples)
        if not points:
            logger.warning("Heatmap result #%d had no classifiable samples, using fallback samples", result.request_id)
            points = self.builder.build(FALLBACK_SAMPLE_SET)
            degraded = True
            warning = NO_SAMPLES_WARNING

        render = MapRender(
            points=points,
            query=query,
            degraded=degraded,
            warning=warning,
            request_id=result.request_id,
        )
        self._last_render = render

        if enable_persistent_logging:
            self._log_render(query, result.request_id, render, stale=False)

        return render

    def click(self, event: Union[OverlayClickEvent, OverlayPoint]) -> InteractionState:
        return self.controller.on_overlay_click(event)

    def close_popup(self) -> InteractionState:
        return self.controller.on_popup_close()

    def _ensure_log_file_exists(self) -> None:
        """Create log directory and header if needed."""
        self.log_dir.mkdir(parents=True, exist_ok=True)

        if not self.log_file.exists():
            with open(self.log_file, 'w', encoding='utf-8') as f:
                f.write("# Air Quality Map Log\n")
                f.write("# Format: [TIMESTAMP] #REQUEST | LOCATION | POLLUTANT | POINTS (G/M/P) | DATA | STATUS\n")
                f.write("# " + "=" * 80 + "\n\n")

    def _log_render(
        self,
        query: HeatmapQuery,
        request_id: int,
        render: Optional[MapRender],
        stale: bool,
    ) -> None:
        """
        Append one line describing a render (or a discarded result) to the log file.

        Args:
            query: The query the result answers
            request_id: Adapter request id
            render: The render, or None for a stale result
            stale: True if the result was discarded
        """
        location_str = f"{query.latitude:.4f},{query.longitude:.4f}"

        if render is not None:
            counts = render.band_counts()
            points_str = (
                f"{counts[QualityBand.GOOD]}/{counts[QualityBand.MODERATE]}/{counts[QualityBand.POOR]}"
            )
            data_str = "FALLBACK" if render.degraded else "LIVE"
        else:
            points_str = "-"
            data_str = "-"

        status_str = "[STALE]" if stale else "[NEW]"

        try:
            self._ensure_log_file_exists()
            with open(self.log_file, 'a', encoding='utf-8') as f:
                timestamp_str = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
                f.write(
                    f"[{timestamp_str}] #{request_id:<4d} | "
                    f"{location_str:20s} | "
                    f"{query.pollutant:6s} {query.iso_date} r={query.radius_km:g}km | "
                    f"{points_str:10s} | "
                    f"{data_str:8s} | "
                    f"{status_str}\n"
                )
        except OSError as exc:
            # Logging must not break rendering
            logger.warning("Could not write map log %s: %s", self.log_file, exc)
