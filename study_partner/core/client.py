"""HTTP client for the analyze endpoint, used by the CLI and the session state machine.

The base URL is a single configured string; the client never guesses a host.
Any transport problem becomes a failure envelope rather than an exception.
"""

import logging

import requests
from pydantic import ValidationError

from study_partner.ai.schema import AnalysisRequest, AnalysisResult

_log = logging.getLogger(__name__)

ANALYZE_PATH = "/v1/analyze"
DEFAULT_CLIENT_TIMEOUT_SECONDS = 120.0
CLIENT_FAILURE_MESSAGE = (
    "Something went wrong while analyzing the image. Please check your network connection."
)


class StudyClient:
    """Posts analysis requests to a running Study Partner API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_CLIENT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self._url = base_url.rstrip("/") + ANALYZE_PATH
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def url(self) -> str:
        return self._url

    def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        payload = request.model_dump(mode="json", exclude_none=True)
        try:
            resp = self._session.post(self._url, json=payload, timeout=self._timeout)
        except requests.RequestException as e:
            _log.error("Analyze request to %s failed: %s", self._url, e)
            return AnalysisResult.failure(CLIENT_FAILURE_MESSAGE)

        try:
            result = AnalysisResult.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            _log.error("Analyze response from %s (HTTP %s) not understood: %s", self._url, resp.status_code, e)
            return AnalysisResult.failure(CLIENT_FAILURE_MESSAGE)
        if not resp.ok and result.success:
            _log.error("Analyze returned HTTP %s with a success body", resp.status_code)
            return AnalysisResult.failure(CLIENT_FAILURE_MESSAGE)
        return result
