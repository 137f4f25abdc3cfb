"""
Client application state as an explicit finite-state machine.

    idle --start_capture--> capturing --submit--> processing --complete--> showing_result
                                                                       +--> showing_error

cancel returns capturing/processing to idle; reset returns showing_* to idle;
select_mode is allowed whenever nothing is in flight and clears the last result.
SessionState is immutable: every transition returns a new value.
"""

from enum import Enum
from typing import Protocol

from pydantic import BaseModel

from study_partner.ai.schema import AnalysisRequest, AnalysisResult, Mode
from study_partner.core.errors import InvalidTransitionError


class Phase(str, Enum):
    idle = "idle"
    capturing = "capturing"
    processing = "processing"
    showing_result = "showing_result"
    showing_error = "showing_error"


_SETTLED = frozenset({Phase.idle, Phase.showing_result, Phase.showing_error})


class AnalysisClient(Protocol):
    def analyze(self, request: AnalysisRequest) -> AnalysisResult: ...


class SessionState(BaseModel):
    model_config = {"frozen": True}

    phase: Phase = Phase.idle
    mode: Mode = Mode.SOLVE
    credential: str | None = None
    result: AnalysisResult | None = None

    def _require(self, action: str, *allowed: Phase) -> None:
        if self.phase not in allowed:
            raise InvalidTransitionError(f"Cannot {action} while {self.phase.value}")

    def select_mode(self, mode: Mode) -> "SessionState":
        self._require("select mode", *_SETTLED)
        return self.model_copy(update={"phase": Phase.idle, "mode": mode, "result": None})

    def with_credential(self, credential: str | None) -> "SessionState":
        return self.model_copy(update={"credential": credential or None})

    def start_capture(self) -> "SessionState":
        self._require("start capture", Phase.idle)
        return self.model_copy(update={"phase": Phase.capturing, "result": None})

    def submit(self) -> "SessionState":
        self._require("submit", Phase.capturing)
        return self.model_copy(update={"phase": Phase.processing})

    def complete(self, result: AnalysisResult) -> "SessionState":
        self._require("complete", Phase.processing)
        phase = Phase.showing_result if result.success else Phase.showing_error
        return self.model_copy(update={"phase": phase, "result": result})

    def cancel(self) -> "SessionState":
        self._require("cancel", Phase.capturing, Phase.processing)
        return self.model_copy(update={"phase": Phase.idle, "result": None})

    def reset(self) -> "SessionState":
        self._require("reset", Phase.showing_result, Phase.showing_error)
        return self.model_copy(update={"phase": Phase.idle, "result": None})

    def build_request(self, image: str, context: str | None = None) -> AnalysisRequest:
        return AnalysisRequest(
            image=image,
            mode=self.mode,
            context=context or None,
            credential=self.credential,
        )


def run_analysis(
    state: SessionState,
    client: AnalysisClient,
    image: str,
    context: str | None = None,
) -> SessionState:
    """Drive a capturing session through submit and complete with the client's result."""
    processing = state.submit()
    result = client.analyze(processing.build_request(image, context))
    return processing.complete(result)
