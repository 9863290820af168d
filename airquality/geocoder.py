"""
Geocoder for the Air Quality Map location search.

Turns free text ("Camden, London") into coordinate suggestions using a
Nominatim-compatible search endpoint. Search failures are logged and
reported as "no suggestions" so the map stays usable.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from .config import DEFAULT_FETCH_TIMEOUT, DEFAULT_GEOCODER_URL
from .sample import Coordinate

logger = logging.getLogger(__name__)

USER_AGENT = "air-quality-map/0.1"


@dataclass(frozen=True)
class LocationSuggestion:
    label: str
    coordinate: Coordinate


class NominatimGeocoder:
    """Free-text place search returning (label, coordinate) suggestions."""

    def __init__(self, url: Optional[str] = None, timeout: Optional[float] = None, limit: int = 5) -> None:
        self.url = url or DEFAULT_GEOCODER_URL
        self.timeout = timeout if timeout is not None else DEFAULT_FETCH_TIMEOUT
        self.limit = limit

    def search(self, text: str) -> list[LocationSuggestion]:
        """
        Looks up a place name.

        Args:
            text: Free-text place name

        Returns:
            Suggestions in the geocoder's ranking order; empty if the text is
            blank, nothing matched, or the request failed
        """
        query = (text or "").strip()
        if not query:
            return []

        try:
            response = requests.get(
                self.url,
                params={"format": "json", "q": query, "limit": self.limit},
                headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            results = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("Location search for %r failed: %s", query, exc)
            return []

        suggestions = []
        for item in results if isinstance(results, list) else []:
            try:
                coordinate = Coordinate(lon=float(item["lon"]), lat=float(item["lat"]))
            except (KeyError, TypeError, ValueError):
                logger.debug("Skipping geocoder result without coordinates: %r", item)
                continue
            suggestions.append(LocationSuggestion(item.get("display_name", query), coordinate))
        return suggestions

    def first(self, text: str) -> Optional[LocationSuggestion]:
        """Returns the best match for text, or None."""
        suggestions = self.search(text)
        return suggestions[0] if suggestions else None
