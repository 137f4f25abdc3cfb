"""Vision model that calls the Gemini generateContent REST endpoint.

Uses a persistent requests.Session with connection pooling so concurrent API
requests share connections. The credential travels in the x-goog-api-key header,
never in the URL, so request exceptions cannot carry it into logs.
"""

import logging

import requests

from study_partner.ai.model_base import BaseVisionModel
from study_partner.ai.schema import ImagePayload, ModelCard
from study_partner.core.config import DEFAULT_GEMINI_BASE_URL, DEFAULT_MODEL_NAME
from study_partner.core.errors import InvocationFailure

_log = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 90.0
GENERATION_CONFIG = {
    "temperature": 0.2,
    "topP": 0.8,
    "maxOutputTokens": 8192,
}


def _reply_text(data: dict) -> str:
    """Text of the first part of the first candidate, or '' when the response has none."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return ""
    return text if isinstance(text, str) else ""


class GeminiVisionModel(BaseVisionModel):
    """Gemini multimodal model over HTTPS. One request per call; no retries."""

    def __init__(
        self,
        model_name: str = DEFAULT_MODEL_NAME,
        base_url: str = DEFAULT_GEMINI_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._model_name = model_name
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = requests.Session()
        adapter = requests.adapters.HTTPAdapter(pool_connections=10, pool_maxsize=20)
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)

    def get_model_card(self) -> ModelCard:
        return ModelCard(name=self._model_name, version="v1beta")

    def _build_payload(self, image: ImagePayload, prompt: str) -> dict:
        return {
            "contents": [
                {
                    "parts": [
                        {"inlineData": {"mimeType": image.mime_type, "data": image.data}},
                        {"text": prompt},
                    ]
                }
            ],
            "generationConfig": dict(GENERATION_CONFIG),
        }

    def generate(self, image: ImagePayload, prompt: str, credential: str) -> str:
        url = f"{self._base_url}/{self._model_name}:generateContent"
        try:
            resp = self._session.post(
                url,
                json=self._build_payload(image, prompt),
                headers={"Content-Type": "application/json", "x-goog-api-key": credential},
                timeout=self._timeout,
            )
        except requests.Timeout as e:
            raise InvocationFailure(f"Gemini request timed out after {self._timeout}s") from e
        except requests.RequestException as e:
            raise InvocationFailure(f"Gemini request failed: {e}") from e

        if not resp.ok:
            raise InvocationFailure(
                f"Gemini API error: {resp.status_code} {resp.text}",
                status_code=resp.status_code,
            )
        try:
            data = resp.json()
        except ValueError as e:
            raise InvocationFailure("Gemini API returned a non-JSON body") from e
        text = _reply_text(data)
        _log.debug("Gemini reply: %s chars", len(text))
        return text
