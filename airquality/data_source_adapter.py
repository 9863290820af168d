"""
Data source adapter module for the Air Quality Map.

This module contains the DataSourceAdapter class which fetches a pollutant
sample collection from the heatmap API for a location, date, pollutant and
radius. It is a best-effort, fail-fast adapter: one attempt per request with
a bounded timeout, and on any failure it returns the fixed fallback sample
set and flags the result as degraded instead of raising.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional, Union

import requests

from .config import DEFAULT_API_BASE_URL, DEFAULT_FETCH_TIMEOUT
from .errors import DataFetchError
from .sample import FALLBACK_SAMPLE_SET, Coordinate, Sample

logger = logging.getLogger(__name__)

HEATMAP_PATH = "/api/geo/heatmap"


@dataclass(frozen=True)
class HeatmapQuery:
    """
    Parameters of one heatmap request.

    Attributes:
        latitude: Latitude of the search center
        longitude: Longitude of the search center
        date: Observation date (ISO 8601 string or datetime.date)
        pollutant: Short pollutant code, e.g. "SO2"
        radius_km: Search radius in kilometers
    """

    latitude: float
    longitude: float
    date: Union[str, date]
    pollutant: str
    radius_km: float

    @property
    def iso_date(self) -> str:
        return self.date.isoformat() if isinstance(self.date, date) else str(self.date)

    def to_params(self) -> dict[str, Any]:
        return {
            "lat": self.latitude,
            "lon": self.longitude,
            "date": self.iso_date,
            "pollutant": self.pollutant,
            "radius_km": self.radius_km,
        }


@dataclass
class FetchResult:
    """
    Outcome of one fetch.

    Attributes:
        samples: Parsed samples, or the fallback set when degraded
        degraded: True if the fallback set is in use
        error: Description of the failure when degraded, else None
        request_id: Sequence number of the request that produced this result
    """

    samples: list[Sample]
    degraded: bool
    error: Optional[str]
    request_id: int


class DataSourceAdapter:
    """
    Fetches sample collections from the heatmap API.

    Each call to fetch() is stamped with an increasing request id. A newer
    request supersedes older ones; callers use is_current() to discard a
    result that arrives after a newer request was issued.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """
        Args:
            base_url: API base URL. Defaults to the public heatmap API.
            timeout: Seconds to wait for the response. Defaults to 10.
        """
        self.base_url = (base_url or DEFAULT_API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else DEFAULT_FETCH_TIMEOUT
        self._latest_request_id = 0

    @property
    def url(self) -> str:
        return f"{self.base_url}{HEATMAP_PATH}"

    def fetch(self, query: HeatmapQuery) -> FetchResult:
        """
        Fetches the sample collection for a query.

        Makes exactly one request. On success the parsed samples are returned
        verbatim (not classified). On any failure (connection error, timeout,
        non-success status, malformed body) the fallback sample set is
        returned with degraded=True.

        Args:
            query: Location, date, pollutant and radius to fetch

        Returns:
            FetchResult for this request
        """
        self._latest_request_id += 1
        request_id = self._latest_request_id

        try:
            samples = self._fetch_remote(query)
        except DataFetchError as exc:
            logger.warning(
                "Heatmap fetch #%d failed (%s), using %d fallback samples",
                request_id, exc, len(FALLBACK_SAMPLE_SET),
            )
            return FetchResult(
                samples=list(FALLBACK_SAMPLE_SET),
                degraded=True,
                error=str(exc),
                request_id=request_id,
            )

        logger.info("Heatmap fetch #%d returned %d samples", request_id, len(samples))
        return FetchResult(samples=samples, degraded=False, error=None, request_id=request_id)

    def is_current(self, request_id: int) -> bool:
        """Returns True if no newer request has been issued since request_id."""
        return request_id == self._latest_request_id

    def _fetch_remote(self, query: HeatmapQuery) -> list[Sample]:
        try:
            response = requests.get(
                self.url,
                params=query.to_params(),
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.Timeout as exc:
            raise DataFetchError(f"request timed out after {self.timeout}s") from exc
        except requests.RequestException as exc:
            raise DataFetchError(f"request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise DataFetchError("response body is not valid JSON") from exc

        return self.parse_feature_collection(payload)

    @staticmethod
    def parse_feature_collection(payload: Any) -> list[Sample]:
        """
        Converts a GeoJSON FeatureCollection into samples.

        Each feature needs geometry.coordinates = [lon, lat] and a numeric
        properties.value; properties.band and properties.unit are optional
        metadata.

        Raises:
            DataFetchError: If the payload does not have that shape
        """
        if not isinstance(payload, dict) or not isinstance(payload.get("features"), list):
            raise DataFetchError("response is not a FeatureCollection")

        samples = []
        for index, feature in enumerate(payload["features"]):
            try:
                lon, lat = feature["geometry"]["coordinates"][:2]
                properties = feature["properties"]
                value = properties["value"]
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise TypeError(f"value {value!r} is not a number")
                samples.append(
                    Sample(
                        coordinate=Coordinate(lon=float(lon), lat=float(lat)),
                        value=float(value),
                        band_hint=properties.get("band"),
                        unit=properties.get("unit"),
                    )
                )
            except (KeyError, IndexError, TypeError, ValueError, AttributeError) as exc:
                raise DataFetchError(f"malformed feature at index {index}: {exc}") from exc
        return samples
