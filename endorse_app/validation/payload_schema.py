"""Structural validation for vault entries."""

from typing import Any, Mapping

import structlog

from ..state.models import STORED_INTENSITIES

logger = structlog.get_logger(__name__)

CURRENT_VAULT_VERSION = 1

# Fields a vault entry cannot be resumed without
REQUIRED_PENDING_FIELDS = ("cardId", "signals")

# Optional fields that must be strings when present
OPTIONAL_TEXT_FIELDS = ("cardSlug", "note", "idempotencyKey", "savedAt")


class PayloadValidationError(Exception):
    """Raised when a vault entry does not have the expected shape."""
    pass


class PayloadValidator:
    """Validates decoded vault entries before they are resumed."""

    def __init__(self, max_version: int = CURRENT_VAULT_VERSION):
        self.max_version = max_version
        self.logger = logger

    def validate_pending(self, data: Any) -> bool:
        """
        Validate a decoded vault entry.

        Args:
            data: Decoded JSON from the vault slot

        Returns:
            True if valid

        Raises:
            PayloadValidationError: If validation fails
        """
        try:
            if not isinstance(data, Mapping):
                raise ValueError("vault entry must be an object")

            self._validate_required_fields(data)
            self._validate_version(data)
            self._validate_signals(data.get("signals"), data.get("intensities"))

            for text_field in OPTIONAL_TEXT_FIELDS:
                value = data.get(text_field)
                if value is not None and not isinstance(value, str):
                    raise ValueError(f"{text_field} must be a string")

            return True

        except ValueError as e:
            error_msg = f"Pending endorsement validation failed: {str(e)}"
            self.logger.warning(error_msg)
            raise PayloadValidationError(error_msg) from e

    def _validate_required_fields(self, data: Mapping[str, Any]) -> None:
        missing_fields = [field for field in REQUIRED_PENDING_FIELDS if field not in data]
        if missing_fields:
            raise ValueError(f"Missing required fields: {missing_fields}")

        if not isinstance(data["cardId"], str) or not data["cardId"]:
            raise ValueError("cardId must be a non-empty string")

    def _validate_version(self, data: Mapping[str, Any]) -> None:
        version = data.get("version", 1)
        if isinstance(version, bool) or not isinstance(version, int) or version < 1:
            raise ValueError(f"Invalid version: {version!r}")
        if version > self.max_version:
            raise ValueError(f"Unsupported vault version {version} (max {self.max_version})")

    def _validate_signals(self, signals: Any, intensities: Any) -> None:
        if not isinstance(signals, list) or not all(isinstance(s, str) and s for s in signals):
            raise ValueError("signals must be a list of non-empty strings")

        if intensities is None:
            return
        if not isinstance(intensities, Mapping):
            raise ValueError("intensities must be an object")

        for signal_id, intensity in intensities.items():
            if (isinstance(intensity, bool) or not isinstance(intensity, int)
                    or intensity not in STORED_INTENSITIES):
                raise ValueError(f"intensity for {signal_id} must be 1, 2 or 3, got: {intensity!r}")
