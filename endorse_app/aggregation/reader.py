"""
Aggregation reader for the endorsement totals shown on a card.

The page-load aggregate is the authoritative baseline. A success response is
the authoritative update; when it omits a field the reader degrades to an
optimistic count increment and leaves the tags as they were.
"""

from typing import Any, Mapping, Optional

import structlog

from ..config.defaults import AggregationParams
from ..errors import PartialDataError
from ..models.aggregation import (
    AggregationResult,
    CardAggregate,
    RecentEndorsement,
    coerce_count,
    normalize_top_tags,
)

logger = structlog.get_logger(__name__)


class AggregationReader:
    """Holds the displayed aggregate for one card view."""

    def __init__(self, baseline: CardAggregate, params: Optional[AggregationParams] = None):
        self.params = params or AggregationParams()
        self._current = baseline

    @classmethod
    def from_page_data(
        cls,
        card_data: Mapping[str, Any],
        params: Optional[AggregationParams] = None
    ) -> "AggregationReader":
        """
        Build the baseline from page-load card data.

        Args:
            card_data: Card fields including endorsementCount, tapCount,
                topEndorsementTags and recentEndorsements
            params: Display limits

        Returns:
            Reader seeded with the normalized baseline
        """
        params = params or AggregationParams()

        recent = []
        for entry in (card_data.get("recentEndorsements") or [])[:params.max_recent_endorsements]:
            recent.append(RecentEndorsement(
                endorser_name=entry.get("endorserName") or params.anonymous_endorser_name,
                note=entry.get("note") or "",
                created_at=entry.get("createdAt") or "",
            ))

        baseline = CardAggregate(
            endorsement_count=coerce_count(card_data.get("endorsementCount")) or 0,
            tap_count=coerce_count(card_data.get("tapCount")) or 0,
            top_endorsement_tags=normalize_top_tags(
                card_data.get("topEndorsementTags") or [],
                params.max_top_tags,
                params.default_emoji,
            ),
            recent_endorsements=tuple(recent),
        )
        return cls(baseline, params)

    @property
    def current(self) -> CardAggregate:
        return self._current

    def apply_success(
        self,
        result: Optional[AggregationResult],
        submitted_signal_count: int
    ) -> CardAggregate:
        """
        Fold a successful submission into the displayed aggregate.

        Args:
            result: Aggregate fields parsed from the success response
            submitted_signal_count: Signals in the submitted payload

        Returns:
            The updated aggregate
        """
        previous = self._current
        increment = max(submitted_signal_count, 1)
        result = result or AggregationResult()

        try:
            result.require_complete()
            endorsement_count = result.endorsement_count
            top_tags = result.top_endorsement_tags
        except PartialDataError as e:
            logger.warning(
                "Aggregate fields missing, applying optimistic increment",
                missing_fields=e.missing_fields,
                fallback_strategy=e.fallback_strategy,
                increment=increment
            )
            endorsement_count = (
                result.endorsement_count
                if result.endorsement_count is not None
                else previous.endorsement_count + increment
            )
            top_tags = (
                result.top_endorsement_tags
                if result.top_endorsement_tags is not None
                else previous.top_endorsement_tags
            )

        self._current = previous.with_result(
            endorsement_count=endorsement_count,
            tap_count=previous.tap_count + increment,
            top_endorsement_tags=top_tags,
        )

        logger.info(
            "Aggregate updated",
            endorsement_count=self._current.endorsement_count,
            tap_count=self._current.tap_count,
            top_tag_count=len(self._current.top_endorsement_tags)
        )
        return self._current
