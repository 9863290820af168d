"""
Tests for AdviceService component.

Tests cover:
- Mock mode: fixed copy per band, unavailable copy
- Grok mode: generated copy, fallback on errors and empty answers
- Mode selection: env var, constructor override, missing API key
- Tips rotation
"""

import os
from unittest.mock import MagicMock, patch

import pytest

from airquality.advice_service import TIPS, UNAVAILABLE_CONTENT, AdviceService, BAND_COPY, tip_at
from airquality.quality_band import QualityBand


def make_completion(text):
    completion = MagicMock()
    completion.choices = [MagicMock()]
    completion.choices[0].message.content = text
    return completion


class TestAdviceServiceMockMode:
    """Test suite for AdviceService in mock mode (deterministic copy)."""

    @pytest.fixture
    def advice_mock(self):
        """Fixture providing AdviceService in mock mode."""
        return AdviceService(mode="mock")

    def test_poor_copy(self, advice_mock):
        content = advice_mock.get_advice(QualityBand.POOR)
        assert content.title == "Air Quality: Poor"
        assert "Avoid outdoor activities" in content.body
        assert content.band is QualityBand.POOR

    def test_each_band_has_copy(self, advice_mock):
        for band in QualityBand:
            content = advice_mock.get_advice(band)
            assert content.title == f"Air Quality: {band.display_name}"
            assert content.body == BAND_COPY[band]

    def test_unknown_band_is_unavailable(self, advice_mock):
        assert advice_mock.get_advice(None) == UNAVAILABLE_CONTENT
        assert UNAVAILABLE_CONTENT.title == "Air Quality: Unavailable"


class TestAdviceServiceGrokMode:
    """Test suite for AdviceService in grok mode (mocked Groq client)."""

    @pytest.fixture
    def advice_grok(self):
        """Fixture providing AdviceService with a mocked Groq client."""
        with patch.dict(os.environ, {"GROQ_API_KEY": "test_key"}, clear=False):
            with patch("airquality.advice_service.Groq") as mock_groq:
                service = AdviceService(mode="grok")
        assert service.mode == "grok"
        assert service._grok_client is mock_groq.return_value
        return service

    def test_generated_body(self, advice_grok):
        advice_grok._grok_client.chat.completions.create.return_value = make_completion(
            "  Limit time outdoors today.  "
        )
        content = advice_grok.get_advice(QualityBand.POOR)
        assert content.title == "Air Quality: Poor"
        assert content.body == "Limit time outdoors today."

    def test_prompt_mentions_band(self, advice_grok):
        advice_grok._grok_client.chat.completions.create.return_value = make_completion("ok")
        advice_grok.get_advice(QualityBand.MODERATE)
        kwargs = advice_grok._grok_client.chat.completions.create.call_args.kwargs
        assert "Moderate" in kwargs["messages"][0]["content"]

    def test_long_body_truncated(self, advice_grok):
        advice_grok._grok_client.chat.completions.create.return_value = make_completion("x" * 1000)
        content = advice_grok.get_advice(QualityBand.GOOD)
        assert len(content.body) == AdviceService.MAX_BODY_CHARS

    def test_api_error_falls_back_to_mock(self, advice_grok):
        advice_grok._grok_client.chat.completions.create.side_effect = Exception("API Error")
        content = advice_grok.get_advice(QualityBand.POOR)
        assert content.body == BAND_COPY[QualityBand.POOR]

    def test_empty_answer_falls_back_to_mock(self, advice_grok):
        advice_grok._grok_client.chat.completions.create.return_value = make_completion("   ")
        content = advice_grok.get_advice(QualityBand.GOOD)
        assert content.body == BAND_COPY[QualityBand.GOOD]


class TestAdviceServiceModeSelection:
    """Test suite for AdviceService mode selection."""

    def test_default_mode_is_mock(self):
        with patch.dict(os.environ, {}, clear=True):
            assert AdviceService().mode == "mock"

    def test_env_var_grok_mode(self):
        with patch.dict(os.environ, {"AIRQUALITY_ADVICE_MODE": "grok", "GROQ_API_KEY": "k"}, clear=False):
            with patch("airquality.advice_service.Groq"):
                assert AdviceService().mode == "grok"

    def test_constructor_overrides_env(self):
        with patch.dict(os.environ, {"AIRQUALITY_ADVICE_MODE": "grok"}, clear=False):
            assert AdviceService(mode="mock").mode == "mock"

    def test_missing_api_key_falls_back_to_mock(self):
        with patch.dict(os.environ, {"AIRQUALITY_ADVICE_MODE": "grok"}, clear=True):
            service = AdviceService()
            assert service.mode == "mock"
            assert service.get_advice(QualityBand.POOR).body == BAND_COPY[QualityBand.POOR]

    def test_client_init_error_falls_back_to_mock(self):
        with patch.dict(os.environ, {"GROQ_API_KEY": "k"}, clear=False):
            with patch("airquality.advice_service.Groq", side_effect=Exception("bad key")):
                assert AdviceService(mode="grok").mode == "mock"

    def test_invalid_mode_defaults_to_mock(self):
        with patch.dict(os.environ, {"AIRQUALITY_ADVICE_MODE": "invalid"}, clear=False):
            assert AdviceService().mode == "mock"


class TestTips:
    """Test suite for the rotating tips."""

    def test_ten_tips(self):
        assert len(TIPS) == 10

    def test_rotation_cycles(self):
        assert tip_at(0) == TIPS[0]
        assert tip_at(len(TIPS)) == TIPS[0]
        assert tip_at(len(TIPS) + 3) == TIPS[3]

    def test_headings(self):
        assert tip_at(0).heading == "Health Tip: Stay Indoors"
        assert tip_at(5).heading == "Eco Tip: Reduce Car Use"
