"""Single-slot durable vault for an endorsement waiting on a login."""

import json
from typing import Optional

import structlog

from ..config.defaults import VaultParams
from ..errors import PersistenceError, VaultCorruptionError
from ..state.models import PendingEndorsement
from ..utils.time import format_timestamp, utc_now
from ..validation.payload_schema import PayloadValidationError, PayloadValidator
from .slot_store import SlotStorage


class PendingEndorsementVault:
    """
    Holds at most one pending endorsement under a fixed key.

    Writes overwrite whatever is there (last write wins). The slot is not
    locked; concurrent writers race.
    """

    def __init__(self, storage: SlotStorage, params: Optional[VaultParams] = None):
        self.storage = storage
        self.params = params or VaultParams()
        self.validator = PayloadValidator(max_version=self.params.schema_version)
        self.logger = structlog.get_logger("endorse.vault")

    @property
    def key(self) -> str:
        return self.params.storage_key

    def write(self, pending: PendingEndorsement) -> PendingEndorsement:
        """
        Store a pending endorsement, replacing any prior entry.

        Raises:
            PersistenceError: If the slot cannot be written
        """
        stamped = pending.with_saved_at(format_timestamp(utc_now()))
        try:
            encoded = json.dumps(stamped.to_dict(), ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise PersistenceError(
                f"Pending endorsement is not serializable: {e}",
                operation="write",
                target=self.key
            ) from e

        self.storage.set(self.key, encoded)
        self.logger.info(
            "Pending endorsement stored",
            card_id=stamped.card_id,
            signal_count=len(stamped.signals),
            note_length=len(stamped.note)
        )
        return stamped

    def read(self) -> Optional[PendingEndorsement]:
        """
        Load the pending endorsement, if any.

        Returns:
            The stored entry, or None when the slot is empty

        Raises:
            VaultCorruptionError: If the slot holds an unusable value
        """
        raw = self.storage.get(self.key)
        if raw is None:
            return None

        try:
            data = json.loads(raw)
        except ValueError as e:
            raise VaultCorruptionError(
                f"Vault entry is not valid JSON: {e}",
                raw_value=raw,
                target=self.key
            ) from e

        try:
            self.validator.validate_pending(data)
        except PayloadValidationError as e:
            raise VaultCorruptionError(str(e), raw_value=raw, target=self.key) from e

        return PendingEndorsement.from_dict(data)

    def has_entry(self) -> bool:
        return self.storage.get(self.key) is not None

    def clear(self) -> bool:
        """Empty the slot."""
        removed = self.storage.remove(self.key)
        if removed:
            self.logger.info("Pending endorsement cleared")
        else:
            self.logger.warning("Pending endorsement could not be cleared")
        return removed

    def clear_for_card(self, card_id: str) -> bool:
        """Empty the slot only if it belongs to card_id; corrupt entries are left alone."""
        try:
            pending = self.read()
        except VaultCorruptionError:
            return False

        if pending is None or pending.card_id != card_id:
            return False
        return self.clear()
