"""Exception taxonomy shared by the analysis boundary, model adapters, and client state."""


class StudyPartnerError(Exception):
    """Base for all application errors."""


class RequestValidationError(StudyPartnerError):
    """Malformed or missing request fields. Raised before any model call."""


class CredentialError(StudyPartnerError):
    """No credential available from the caller or from configuration."""


class InvocationFailure(StudyPartnerError):
    """
    The model call failed: network error, non-success status, or timeout.

    The message may contain upstream detail and must only be logged, never returned to callers.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidModeError(StudyPartnerError, ValueError):
    """Mode is not one of SOLVE, GRADE, OCR, ANKI."""


class InvalidTransitionError(StudyPartnerError):
    """A session state transition was requested from a state that does not allow it."""
