"""
State machine data models for endorsement capture and resubmission.

This module defines the per-signal tap intensity cycle, the resume lifecycle
states, and the immutable payload structures that travel to the server and
through the durable vault.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional


class TapIntensity(int, Enum):
    """Per-signal tap state; NONE is never stored in a selection."""
    NONE = 0
    SELECTED = 1
    STRONG = 2
    STRONGEST = 3

    def next(self) -> "TapIntensity":
        """Advance one tap: NONE -> SELECTED -> STRONG -> STRONGEST -> NONE."""
        if self >= TapIntensity.STRONGEST:
            return TapIntensity.NONE
        return TapIntensity(self.value + 1)


STORED_INTENSITIES = frozenset(
    intensity.value for intensity in TapIntensity if intensity is not TapIntensity.NONE
)


class ResumeState(str, Enum):
    """Lifecycle of a pending endorsement across a login redirect."""
    NO_PENDING = "no_pending"
    AWAITING_AUTH = "awaiting_auth"
    RESUME_SCANNING = "resume_scanning"
    RESUME_SUBMITTING = "resume_submitting"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class EndorsementSubmission:
    """Wire payload for one endorsement attempt."""

    card_id: str
    signals: tuple[str, ...]
    intensities: Mapping[str, int]
    note: str = ""
    idempotency_key: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        """Request body for the submission endpoint."""
        return {
            "cardId": self.card_id,
            "signals": list(self.signals),
            "intensities": dict(self.intensities),
            "note": self.note,
        }

    def to_pending(self, card_slug: str) -> "PendingEndorsement":
        """Vault entry preserving this attempt across a login redirect."""
        return PendingEndorsement(
            card_id=self.card_id,
            card_slug=card_slug,
            signals=self.signals,
            intensities=dict(self.intensities),
            note=self.note,
            idempotency_key=self.idempotency_key,
        )


@dataclass(frozen=True)
class PendingEndorsement:
    """Unsent endorsement held in the single durable vault slot."""

    card_id: str
    card_slug: str
    signals: tuple[str, ...]
    intensities: Mapping[str, int] = field(default_factory=dict)
    note: str = ""
    idempotency_key: Optional[str] = None
    saved_at: Optional[str] = None
    version: int = 1

    def to_dict(self) -> dict[str, Any]:
        """Storage representation of the vault slot."""
        data: dict[str, Any] = {
            "version": self.version,
            "cardId": self.card_id,
            "cardSlug": self.card_slug,
            "signals": list(self.signals),
            "intensities": dict(self.intensities),
            "note": self.note,
        }
        if self.idempotency_key:
            data["idempotencyKey"] = self.idempotency_key
        if self.saved_at:
            data["savedAt"] = self.saved_at
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PendingEndorsement":
        """Build from a storage representation already checked by the payload validator."""
        return cls(
            card_id=data["cardId"],
            card_slug=data.get("cardSlug") or "",
            signals=tuple(data.get("signals") or ()),
            intensities=dict(data.get("intensities") or {}),
            note=data.get("note") or "",
            idempotency_key=data.get("idempotencyKey"),
            saved_at=data.get("savedAt"),
            version=data.get("version", 1),
        )

    def to_submission(self) -> EndorsementSubmission:
        """Rebuild the original wire payload, keeping its idempotency key."""
        return EndorsementSubmission(
            card_id=self.card_id,
            signals=self.signals,
            intensities=dict(self.intensities),
            note=self.note,
            idempotency_key=self.idempotency_key,
        )

    def with_saved_at(self, saved_at: str) -> "PendingEndorsement":
        """Copy stamped with the time it was written to the vault."""
        return PendingEndorsement(
            card_id=self.card_id,
            card_slug=self.card_slug,
            signals=self.signals,
            intensities=dict(self.intensities),
            note=self.note,
            idempotency_key=self.idempotency_key,
            saved_at=saved_at,
            version=self.version,
        )
