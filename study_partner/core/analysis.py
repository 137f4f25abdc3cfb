"""
Analysis boundary: validate a raw request, call the model, interpret the reply.

Everything that can go wrong before or during the model call ends up as a failure
envelope with a fixed message. Upstream detail is logged, never returned.
"""

import logging
import re
import uuid
from typing import Any, Mapping

from study_partner.ai.interpreter import CardPolicy, interpret
from study_partner.ai.model_base import BaseVisionModel
from study_partner.ai.prompts import build_prompt
from study_partner.ai.schema import VALID_MODES, AnalysisRequest, AnalysisResult, ImagePayload, Mode
from study_partner.core.config import Settings, get_config
from study_partner.core.errors import CredentialError, InvocationFailure, RequestValidationError
from study_partner.core.logging import get_flight_logger

_log = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/jpeg"
IMAGE_REQUIRED_MESSAGE = "image is required."
INVALID_MODE_MESSAGE = f"mode must be one of {' / '.join(VALID_MODES)}."
GENERIC_FAILURE_MESSAGE = (
    "Something went wrong while analyzing the image. "
    "Please check your network connection and API key, then try again."
)

_DATA_URL_RE = re.compile(r"^data:(image/[\w.+-]+);base64,(.+)$", re.DOTALL)


def validate_request(body: Any) -> AnalysisRequest:
    """
    Check a decoded request body and return an AnalysisRequest.

    image is checked before mode. Optional fields that are not strings are ignored.
    """
    if not isinstance(body, Mapping):
        raise RequestValidationError(IMAGE_REQUIRED_MESSAGE)
    image = body.get("image")
    if not isinstance(image, str) or not image:
        raise RequestValidationError(IMAGE_REQUIRED_MESSAGE)
    mode = body.get("mode")
    if not isinstance(mode, str) or mode not in VALID_MODES:
        raise RequestValidationError(INVALID_MODE_MESSAGE)
    context = body.get("context")
    credential = body.get("credential")
    return AnalysisRequest(
        image=image,
        mode=Mode(mode),
        context=context if isinstance(context, str) and context else None,
        credential=credential if isinstance(credential, str) and credential else None,
    )


def parse_image(image: str) -> ImagePayload:
    """Split a data URL into MIME type and payload; a bare base64 string gets the default MIME type."""
    match = _DATA_URL_RE.match(image)
    if match:
        return ImagePayload(mime_type=match.group(1), data=match.group(2))
    return ImagePayload(mime_type=DEFAULT_MIME_TYPE, data=image)


class AnalysisService:
    """
    Runs one request through prompt building, model invocation, and interpretation.

    Holds no per-request state, so one instance can serve concurrent requests.
    """

    def __init__(
        self,
        model: BaseVisionModel,
        settings: Settings | None = None,
        *,
        card_policy: CardPolicy = "strict",
    ) -> None:
        self._model = model
        self._settings = settings or get_config()
        self._card_policy = card_policy

    def _resolve_credential(self, request: AnalysisRequest) -> str:
        credential = request.credential or self._settings.gemini_api_key
        if not credential:
            raise CredentialError("No API key provided by the caller or configuration")
        return credential

    def _dump_forensics(self, request_id: str) -> None:
        if not self._settings.forensic_dump_on_failure:
            return
        flight = get_flight_logger()
        if flight is None:
            return
        try:
            path = flight.dump(f"analyze_{request_id}")
        except OSError as e:
            _log.warning("Could not write forensic dump for %s: %s", request_id, e)
            return
        _log.info("Forensic dump for %s written to %s", request_id, path)

    def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """Return a success envelope with the interpreted reply, or a generic failure envelope."""
        request_id = uuid.uuid4().hex[:12]
        card = self._model.get_model_card()
        _log.debug("Request %s: mode=%s model=%s", request_id, request.mode.value, card.name)
        try:
            credential = self._resolve_credential(request)
            prompt = build_prompt(request.mode, request.context)
            raw_text = self._model.generate(parse_image(request.image), prompt, credential)
        except CredentialError as e:
            _log.error("Request %s: %s", request_id, e)
            return AnalysisResult.failure(GENERIC_FAILURE_MESSAGE)
        except InvocationFailure as e:
            _log.error(
                "Request %s: model invocation failed (status=%s): %s",
                request_id,
                e.status_code,
                e,
                exc_info=True,
            )
            self._dump_forensics(request_id)
            return AnalysisResult.failure(GENERIC_FAILURE_MESSAGE)

        data = interpret(raw_text, request.mode, card_policy=self._card_policy)
        _log.debug(
            "Request %s: score=%s cards=%s",
            request_id,
            data.score,
            None if data.cards is None else len(data.cards),
        )
        return AnalysisResult(success=True, data=data)

    def analyze_body(self, body: Any) -> AnalysisResult:
        """Validate a raw body and analyze it. RequestValidationError propagates to the caller."""
        return self.analyze(validate_request(body))
