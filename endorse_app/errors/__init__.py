"""
Error classification system for the endorsement flow.

Submission errors describe what happened to one endorsement attempt, system
failures describe broken local machinery, and the recovery mixins tell the
controllers which recovery path applies.
"""

from .submission import (
    SubmissionError,
    SelectionValidationError,
    EmptySelectionError,
    AuthRequiredError,
    TransientNetworkError,
    PermanentServerError,
    PartialDataError,
)
from .system_failures import (
    SystemFailureError,
    PersistenceError,
    VaultCorruptionError,
    ConfigurationError,
)
from .recovery import (
    RecoverableError,
    UnrecoverableError,
    GracefulDegradationError,
)

__all__ = [
    # Submission Errors
    "SubmissionError",
    "SelectionValidationError",
    "EmptySelectionError",
    "AuthRequiredError",
    "TransientNetworkError",
    "PermanentServerError",
    "PartialDataError",
    # System Failures
    "SystemFailureError",
    "PersistenceError",
    "VaultCorruptionError",
    "ConfigurationError",
    # Recovery Categories
    "RecoverableError",
    "UnrecoverableError",
    "GracefulDegradationError",
]
