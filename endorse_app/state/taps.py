"""
Tap state machine for a single card view.

Each signal cycles independently through NONE -> SELECTED -> STRONG ->
STRONGEST -> NONE. Only non-NONE intensities are kept, so the selection
size is always the number of tapped signals.
"""

from typing import Optional

import structlog

from .models import TapIntensity

logger = structlog.get_logger(__name__)

FLAME = "\U0001F525"


class TapStateMachine:
    """In-memory signal selection scoped to one page view."""

    def __init__(self) -> None:
        self._selection: dict[str, TapIntensity] = {}

    def handle_signal_tap(self, signal_id: str) -> TapIntensity:
        """Advance the tapped signal one step and return its new intensity."""
        current = self._selection.get(signal_id, TapIntensity.NONE)
        updated = current.next()

        if updated is TapIntensity.NONE:
            del self._selection[signal_id]
        else:
            self._selection[signal_id] = updated

        logger.debug(
            "Signal tapped",
            signal_id=signal_id,
            from_intensity=current.value,
            to_intensity=updated.value,
            selected_signal_count=len(self._selection)
        )
        return updated

    def intensity_of(self, signal_id: str) -> TapIntensity:
        return self._selection.get(signal_id, TapIntensity.NONE)

    @property
    def selected_signal_count(self) -> int:
        return len(self._selection)

    @property
    def can_submit(self) -> bool:
        return self.selected_signal_count > 0

    def selection(self) -> dict[str, int]:
        """Snapshot of the selection as plain signal id -> 1..3."""
        return {signal_id: intensity.value for signal_id, intensity in self._selection.items()}

    def reset(self) -> None:
        self._selection.clear()


def flames_for(intensity: Optional[int]) -> str:
    """Flame glyphs shown under a tile: one per intensity step above SELECTED."""
    return FLAME * max(0, int(intensity or 0) - 1)
