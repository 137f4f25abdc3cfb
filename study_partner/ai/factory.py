"""Factory for vision models. Imports are lazy so unused adapters cost nothing at startup."""

from study_partner.ai.model_base import BaseVisionModel
from study_partner.core.config import Settings, get_config


def get_vision_model(model_name: str, settings: Settings | None = None) -> BaseVisionModel:
    """Return a vision model by name ("mock" or "gemini"), configured from settings."""
    if model_name == "mock":
        from study_partner.ai.model_base import MockVisionModel

        return MockVisionModel()
    if model_name == "gemini":
        from study_partner.ai.model_gemini import GeminiVisionModel

        cfg = settings or get_config()
        return GeminiVisionModel(
            model_name=cfg.model_name,
            base_url=cfg.gemini_base_url,
            timeout=cfg.request_timeout_seconds,
        )
    raise ValueError(f"Unknown vision model: {model_name}")
