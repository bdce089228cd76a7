"""Assembles an endorsement submission from the current taps and note."""

import uuid
from typing import Mapping, Optional

from ..errors import EmptySelectionError, SelectionValidationError
from ..state.models import STORED_INTENSITIES, EndorsementSubmission


def new_idempotency_key() -> str:
    return str(uuid.uuid4())


def compose_submission(
    card_id: str,
    selection: Mapping[str, int],
    note: Optional[str] = None,
    max_note_length: Optional[int] = None,
    idempotency_key: Optional[str] = None
) -> EndorsementSubmission:
    """
    Build the wire payload for the current selection.

    Args:
        card_id: Card being endorsed
        selection: Signal id -> intensity, every value in 1..3
        note: Optional free-text note
        max_note_length: Reject longer notes when set
        idempotency_key: Reuse an existing key; a fresh one is generated otherwise

    Returns:
        Submission ready for the client

    Raises:
        EmptySelectionError: If nothing is tapped
        SelectionValidationError: If an intensity or the note is out of range
    """
    if not card_id:
        raise SelectionValidationError("cardId is required", field="cardId")

    if not selection:
        raise EmptySelectionError()

    for signal_id, intensity in selection.items():
        if intensity not in STORED_INTENSITIES:
            raise SelectionValidationError(
                f"Intensity for {signal_id} must be 1, 2 or 3, got {intensity!r}",
                field="intensities",
            )

    note = note or ""
    if max_note_length is not None and len(note) > max_note_length:
        raise SelectionValidationError(
            f"Note is longer than {max_note_length} characters",
            field="note",
        )

    return EndorsementSubmission(
        card_id=card_id,
        signals=tuple(selection.keys()),
        intensities={signal_id: int(intensity) for signal_id, intensity in selection.items()},
        note=note,
        idempotency_key=idempotency_key or new_idempotency_key(),
    )


def build_headers(
    access_token: Optional[str],
    idempotency_key: Optional[str] = None
) -> dict[str, str]:
    """Authorization only when a token exists; Idempotency-Key when known."""
    headers = {}
    if access_token:
        headers['Authorization'] = f"Bearer {access_token}"
    if idempotency_key:
        headers['Idempotency-Key'] = idempotency_key
    return headers
