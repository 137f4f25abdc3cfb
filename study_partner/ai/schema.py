"""Pydantic data contracts for analysis requests, results, and model identity."""

from enum import Enum

from pydantic import BaseModel, Field


class Mode(str, Enum):
    """Analysis mode. Selects both the instruction and the interpretation strategy."""

    SOLVE = "SOLVE"
    GRADE = "GRADE"
    OCR = "OCR"
    ANKI = "ANKI"


VALID_MODES: tuple[str, ...] = tuple(m.value for m in Mode)


class ModelCard(BaseModel):
    """Metadata identifying a generative model adapter."""

    name: str
    version: str


class Card(BaseModel):
    """One flashcard: question on the front, answer on the back."""

    front: str
    back: str


class ImagePayload(BaseModel):
    """Base64 image data split from its MIME type."""

    mime_type: str = "image/jpeg"
    data: str


class AnalysisRequest(BaseModel):
    """A validated request: image, mode, and optional context and credential."""

    image: str = Field(min_length=1)
    mode: Mode
    context: str | None = None
    credential: str | None = None


class AnalysisData(BaseModel):
    """
    Mode-specific payload.

    score is only set for GRADE and cards only for ANKI; both are omitted from JSON
    output when absent.
    """

    content: str = ""
    score: int | None = Field(default=None, ge=0, le=100)
    cards: list[Card] | None = None


class AnalysisResult(BaseModel):
    """Uniform response envelope returned for every request."""

    success: bool
    data: AnalysisData = Field(default_factory=AnalysisData)
    error: str | None = None

    def to_response(self) -> dict:
        """JSON-ready dict with absent optional fields dropped."""
        return self.model_dump(mode="json", exclude_none=True)

    @classmethod
    def failure(cls, message: str) -> "AnalysisResult":
        return cls(success=False, data=AnalysisData(content=""), error=message)
