"""Abstract base and mock implementation for generative vision models."""

from abc import ABC, abstractmethod

from study_partner.ai.schema import ImagePayload, ModelCard

MOCK_REPLY = "A placeholder answer."


class BaseVisionModel(ABC):
    """Abstract base for a model that answers a prompt about an image with free-form text."""

    @abstractmethod
    def get_model_card(self) -> ModelCard:
        """Return model identity (name, version)."""
        ...

    @abstractmethod
    def generate(self, image: ImagePayload, prompt: str, credential: str) -> str:
        """
        Send image and prompt to the model and return its text reply.

        Raises InvocationFailure on network error, non-success status, or timeout.
        """
        ...


class MockVisionModel(BaseVisionModel):
    """Canned-reply model for tests and offline development. Records every call."""

    def __init__(self, reply: str = MOCK_REPLY) -> None:
        self.reply = reply
        self.calls: list[tuple[ImagePayload, str, str]] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def get_model_card(self) -> ModelCard:
        return ModelCard(name="mock-model", version="1.0")

    def generate(self, image: ImagePayload, prompt: str, credential: str) -> str:
        self.calls.append((image, prompt, credential))
        return self.reply
