"""AI module: data contracts, prompt building, reply interpretation, and model abstraction."""

from study_partner.ai.schema import (
    AnalysisData,
    AnalysisRequest,
    AnalysisResult,
    Card,
    ImagePayload,
    Mode,
    ModelCard,
)
from study_partner.ai.prompts import build_prompt
from study_partner.ai.interpreter import Empty, Extracted, extract_cards, extract_score, interpret
from study_partner.ai.model_base import BaseVisionModel, MockVisionModel
from study_partner.ai.factory import get_vision_model

__all__ = [
    "AnalysisData",
    "AnalysisRequest",
    "AnalysisResult",
    "BaseVisionModel",
    "Card",
    "Empty",
    "Extracted",
    "ImagePayload",
    "MockVisionModel",
    "Mode",
    "ModelCard",
    "build_prompt",
    "extract_cards",
    "extract_score",
    "get_vision_model",
    "interpret",
]
