"""Tests for the vision model factory (get_vision_model)."""

import pytest

from study_partner.ai.factory import get_vision_model
from study_partner.ai.model_base import BaseVisionModel, MockVisionModel
from study_partner.ai.model_gemini import GeminiVisionModel
from study_partner.core.config import Settings

pytestmark = [pytest.mark.fast]


def test_get_vision_model_mock_returns_mock_model():
    """get_vision_model('mock') returns a MockVisionModel."""
    model = get_vision_model("mock")
    assert isinstance(model, MockVisionModel)
    assert isinstance(model, BaseVisionModel)
    assert model.get_model_card().name == "mock-model"
    assert model.get_model_card().version == "1.0"


def test_get_vision_model_gemini_uses_settings():
    """get_vision_model('gemini') is configured from the given settings."""
    cfg = Settings(model_name="gemini-custom", gemini_base_url="https://example.test/v1/", request_timeout_seconds=12)
    model = get_vision_model("gemini", cfg)
    assert isinstance(model, GeminiVisionModel)
    assert model.get_model_card().name == "gemini-custom"
    assert model._base_url == "https://example.test/v1"
    assert model._timeout == 12


def test_get_vision_model_unknown_raises():
    """get_vision_model with unknown name raises ValueError."""
    with pytest.raises(ValueError, match=r"Unknown vision model: unknown"):
        get_vision_model("unknown")
