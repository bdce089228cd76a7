"""
System failure error classifications.

These exceptions represent failures of the local machinery (durable storage,
configuration) rather than of a particular submission.
"""

from typing import Any, Dict, Optional


class SystemFailureError(Exception):
    """Base class for local system failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class PersistenceError(SystemFailureError):
    """Durable storage read or write failures."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 target: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.target = target


class VaultCorruptionError(PersistenceError):
    """The vault slot holds something that is not a valid pending endorsement."""

    def __init__(self, message: str, raw_value: Optional[str] = None, **kwargs):
        super().__init__(message, operation="read", **kwargs)
        self.raw_value = raw_value


class ConfigurationError(SystemFailureError):
    """Configuration failed validation."""

    def __init__(self, message: str, issues: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.issues = issues or []
