"""Read-only signal catalog scoped to a card's category."""

from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Optional

import structlog

logger = structlog.get_logger(__name__)

UNIVERSAL_CATEGORY = "universal"
DEFAULT_EMOJI = "⭐"


@dataclass(frozen=True)
class Signal:
    """A predefined positive trait a visitor can tap."""
    id: str
    label: str
    emoji: str = DEFAULT_EMOJI
    category: str = UNIVERSAL_CATEGORY


def categories_to_show(card_category: Optional[str]) -> list[str]:
    """Universal signals always apply; a specific category adds its own."""
    if not card_category or card_category == UNIVERSAL_CATEGORY:
        return [UNIVERSAL_CATEGORY]
    return [UNIVERSAL_CATEGORY, card_category]


class SignalCatalog:
    """Ordered, immutable set of signals available on one card."""

    def __init__(self, signals: Iterable[Signal] = ()):
        self._signals = tuple(signals)
        self._by_id = {signal.id: signal for signal in self._signals}

    @classmethod
    def from_records(
        cls,
        records: Iterable[dict[str, Any]],
        card_category: Optional[str] = None,
        default_emoji: str = DEFAULT_EMOJI
    ) -> "SignalCatalog":
        """
        Build a catalog from page-load rows.

        Args:
            records: Rows shaped {id, label, emoji, category}
            card_category: The card's professional category
            default_emoji: Emoji used when a row has none

        Returns:
            Catalog holding only rows in the categories shown for this card
        """
        allowed = set(categories_to_show(card_category))
        signals = []
        skipped = 0

        for record in records:
            signal_id = record.get("id")
            label = record.get("label")
            if not signal_id or not label:
                skipped += 1
                continue

            category = record.get("category") or UNIVERSAL_CATEGORY
            if category not in allowed:
                skipped += 1
                continue

            signals.append(Signal(
                id=str(signal_id),
                label=label,
                emoji=record.get("emoji") or default_emoji,
                category=category,
            ))

        if skipped:
            logger.debug("Skipped catalog rows", skipped=skipped, card_category=card_category)

        return cls(signals)

    def group_by_category(self) -> dict[str, list[Signal]]:
        """Signals grouped by category, categories in first-appearance order."""
        groups: dict[str, list[Signal]] = {}
        for signal in self._signals:
            groups.setdefault(signal.category, []).append(signal)
        return groups

    def get(self, signal_id: str) -> Optional[Signal]:
        return self._by_id.get(signal_id)

    def __contains__(self, signal_id: object) -> bool:
        return signal_id in self._by_id

    def __iter__(self) -> Iterator[Signal]:
        return iter(self._signals)

    def __len__(self) -> int:
        return len(self._signals)
