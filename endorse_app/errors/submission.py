"""
Submission error classifications for the endorsement flow.

These exceptions categorize the outcomes of composing and posting an
endorsement so callers can pick the matching recovery path.
"""

from typing import Any, Dict, Optional

from .recovery import GracefulDegradationError, RecoverableError, UnrecoverableError


class SubmissionError(Exception):
    """Base class for endorsement submission issues handled locally."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class SelectionValidationError(SubmissionError):
    """Selection or note rejected before reaching the network."""

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field


class EmptySelectionError(SelectionValidationError):
    """Submit attempted with no tapped signals."""

    def __init__(self, message: str = "At least one signal is required", **kwargs):
        super().__init__(message, field="signals", **kwargs)


class AuthRequiredError(SubmissionError, RecoverableError):
    """Server asked for a login (requireLogin=true)."""

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code


class TransientNetworkError(SubmissionError, RecoverableError):
    """The request failed before any response was received."""

    def __init__(self, message: str, url: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.url = url


class PermanentServerError(SubmissionError, UnrecoverableError):
    """Non-2xx response without requireLogin; retrying the same payload is futile."""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 server_message: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.server_message = server_message
        self.recoverable = False


class PartialDataError(SubmissionError, GracefulDegradationError):
    """Success response missing aggregate fields."""

    def __init__(self, message: str, missing_fields: Optional[list] = None,
                 available_fields: Optional[list] = None,
                 fallback_strategy: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.missing_fields = missing_fields or []
        self.available_fields = available_fields or []
        self.fallback_strategy = fallback_strategy
