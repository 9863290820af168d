"""
Advice service module for the Air Quality Map.

This module contains the AdviceService class which produces the copy shown
in the detail popup for a selected quality band. Supports two modes:
- "mock": Fixed band-specific copy (offline, always available)
- "grok": Advice text generated via the Groq API (requires API key)

It also holds the rotating list of health and environment tips shown under
the popup.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from groq import Groq

from .overlay_point import tooltip_for
from .quality_band import QualityBand

load_dotenv()

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetailContent:
    """
    Text rendered by the detail popup.

    Attributes:
        title: Heading, e.g. "Air Quality: Poor"
        body: Explanation and recommended behaviour
        band: The band the copy describes, or None if unavailable
    """

    title: str
    body: str
    band: Optional[QualityBand] = None


@dataclass(frozen=True)
class Tip:
    title: str
    text: str
    category: str

    @property
    def heading(self) -> str:
        label = "Health Tip" if self.category == "Health" else "Eco Tip"
        return f"{label}: {self.title}"


BAND_COPY = {
    QualityBand.GOOD: (
        "The air is clean and safe for everyone. Outdoor activities can be done "
        "normally without health risks."
    ),
    QualityBand.MODERATE: (
        "The air quality is acceptable, but sensitive groups may experience minor "
        "issues. Consider reducing intense outdoor activities if you feel discomfort."
    ),
    QualityBand.POOR: (
        "The air quality is unhealthy, especially for sensitive groups. Avoid outdoor "
        "activities and keep indoor spaces well-ventilated."
    ),
}

UNAVAILABLE_CONTENT = DetailContent(
    title="Air Quality: Unavailable",
    body="No information is available about air quality at the moment.",
)

TIPS = (
    Tip("Stay Indoors", "Keep windows closed and use air purifiers if available.", "Health"),
    Tip("Avoid Outdoor Exercise", "Postpone outdoor physical activities until air quality improves.", "Health"),
    Tip("Wear a Mask", "Use N95 or similar masks to filter harmful particles.", "Health"),
    Tip("Stay Hydrated", "Drink plenty of water to help your body flush out pollutants.", "Health"),
    Tip("Check Updates", "Monitor air quality apps for live health alerts.", "Health"),
    Tip("Reduce Car Use", "Prefer walking, biking, or public transportation.", "Environment"),
    Tip("Plant Trees", "Trees absorb pollutants and release clean oxygen.", "Environment"),
    Tip("Avoid Burning Trash", "Burning releases toxic gases that pollute the air.", "Environment"),
    Tip("Save Energy", "Turn off lights and electronics when not in use.", "Environment"),
    Tip("Use Renewable Sources", "Choose solar or wind energy whenever possible.", "Environment"),
)


def tip_at(index: int) -> Tip:
    """Returns the tip for a rotation step; cycles through TIPS."""
    return TIPS[index % len(TIPS)]


class AdviceService:
    """
    Service for obtaining popup copy for a quality band.

    Mode is selected via the AIRQUALITY_ADVICE_MODE environment variable or
    the constructor parameter. If mode is "grok" but the API key is missing
    or the call fails, the fixed copy is used instead.
    """

    MODEL = "llama-3.1-8b-instant"
    MAX_BODY_CHARS = 400

    def __init__(self, mode: Optional[str] = None):
        """
        Args:
            mode: Optional mode override ("mock" or "grok"). If None, reads
                  AIRQUALITY_ADVICE_MODE; defaults to "mock".
        """
        env_mode = os.getenv("AIRQUALITY_ADVICE_MODE", "").lower()
        requested = mode.lower() if mode else env_mode
        self.mode = requested if requested in ("mock", "grok") else "mock"

        self._grok_client = None
        if self.mode == "grok":
            self._grok_client = self._init_grok_client()
            if self._grok_client is None:
                self.mode = "mock"
                logger.warning("Grok advice mode requested but unavailable, falling back to mock mode")

    def _init_grok_client(self):
        api_key = os.getenv("GROQ_API_KEY")
        if not api_key:
            logger.warning("GROQ_API_KEY not found, Grok advice mode unavailable")
            return None
        try:
            return Groq(api_key=api_key)
        except Exception as exc:
            logger.error("Failed to initialize Groq client: %s", exc)
            return None

    def get_advice(self, band: Optional[QualityBand]) -> DetailContent:
        """
        Gets the popup copy for a band.

        Args:
            band: Selected quality band, or None if nothing is known

        Returns:
            DetailContent; the "Unavailable" copy when band is None
        """
        if band is None:
            return UNAVAILABLE_CONTENT

        if self.mode == "grok":
            content = self._advice_grok(band)
            if content is not None:
                return content
        return self._advice_mock(band)

    def _advice_mock(self, band: QualityBand) -> DetailContent:
        return DetailContent(title=tooltip_for(band), body=BAND_COPY[band], band=band)

    def _advice_grok(self, band: QualityBand) -> Optional[DetailContent]:
        """
        Asks the LLM for a short advice paragraph.

        Returns:
            DetailContent with generated body, or None if the call failed or
            returned nothing usable
        """
        if self._grok_client is None:
            return None

        prompt = (
            f"The outdoor air quality at the user's location is classified as "
            f"'{band.display_name}' on a Good/Moderate/Poor scale. "
            f"In at most two sentences, tell a member of the public what this means "
            f"and what they should do. Return only the advice text."
        )

        try:
            chat_completion = self._grok_client.chat.completions.create(
                messages=[{"role": "user", "content": prompt}],
                model=self.MODEL,
                temperature=0.3,
                max_tokens=120,
            )
            body = (chat_completion.choices[0].message.content or "").strip()
        except Exception as exc:
            logger.warning("Grok advice call failed: %s", exc)
            return None

        if not body:
            logger.warning("Grok returned empty advice for %s", band.display_name)
            return None

        return DetailContent(title=tooltip_for(band), body=body[:self.MAX_BODY_CHARS], band=band)
