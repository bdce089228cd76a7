"""
Aggregate data structures for card endorsements.

The server owns these numbers; the client only carries them and applies a
fallback increment when a success response leaves a field out.
"""

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from ..errors import PartialDataError

MAX_TOP_TAGS = 8


def coerce_count(value: Any) -> Optional[int]:
    """Non-negative integer count, 0 when absent, None when the value is not a number."""
    if value is None:
        return 0
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, (int, float)):
        return max(int(value), 0)
    if isinstance(value, str):
        try:
            return max(int(value.strip()), 0)
        except ValueError:
            return None
    return None


@dataclass(frozen=True)
class TopTag:
    """One aggregated signal with its tap count."""
    label: str
    emoji: str
    count: int

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], default_emoji: str = "⭐") -> "TopTag":
        """
        Build a tag from a response or page-data row.

        Raises:
            ValueError: If count is present but not a number
        """
        count = coerce_count(data.get("count"))
        if count is None:
            raise ValueError(f"Invalid tag count: {data.get('count')!r}")
        return cls(
            label=str(data.get("label") or ""),
            emoji=data.get("emoji") or default_emoji,
            count=count,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label, "emoji": self.emoji, "count": self.count}


@dataclass(frozen=True)
class RecentEndorsement:
    """A recent endorsement shown with the aggregate."""
    endorser_name: str
    note: str
    created_at: str


def normalize_top_tags(
    tags: Iterable[Mapping[str, Any]],
    limit: int = MAX_TOP_TAGS,
    default_emoji: str = "⭐"
) -> tuple[TopTag, ...]:
    """Highest counts first, at most `limit` entries; rows with a bad count are dropped."""
    parsed = []
    for tag in tags:
        if not isinstance(tag, Mapping) or not tag.get("label"):
            continue
        try:
            parsed.append(TopTag.from_dict(tag, default_emoji))
        except ValueError:
            continue
    parsed.sort(key=lambda tag: tag.count, reverse=True)
    return tuple(parsed[:limit])


@dataclass(frozen=True)
class AggregationResult:
    """Aggregate fields carried by a success response; either may be missing."""

    endorsement_count: Optional[int] = None
    top_endorsement_tags: Optional[tuple[TopTag, ...]] = None

    @classmethod
    def from_response(
        cls,
        body: Mapping[str, Any],
        limit: int = MAX_TOP_TAGS,
        default_emoji: str = "⭐"
    ) -> "AggregationResult":
        """Parse the optional aggregate fields of a 2xx response body."""
        count = body.get("endorsementCount")
        if (isinstance(count, bool) or not isinstance(count, (int, float))
                or (isinstance(count, float) and not math.isfinite(count)) or count < 0):
            count = None

        tags = body.get("topEndorsementTags")
        if isinstance(tags, list):
            top_tags: Optional[tuple[TopTag, ...]] = normalize_top_tags(tags, limit, default_emoji)
        else:
            top_tags = None

        return cls(
            endorsement_count=int(count) if count is not None else None,
            top_endorsement_tags=top_tags,
        )

    @property
    def missing_fields(self) -> list[str]:
        missing = []
        if self.endorsement_count is None:
            missing.append("endorsementCount")
        if self.top_endorsement_tags is None:
            missing.append("topEndorsementTags")
        return missing

    def require_complete(self) -> "AggregationResult":
        """Return self, or raise PartialDataError naming the missing fields."""
        missing = self.missing_fields
        if missing:
            available = [
                name for name in ("endorsementCount", "topEndorsementTags")
                if name not in missing
            ]
            raise PartialDataError(
                "Success response missing aggregate fields",
                missing_fields=missing,
                available_fields=available,
                fallback_strategy="increment_count_keep_tags",
            )
        return self


@dataclass(frozen=True)
class CardAggregate:
    """Aggregate view of a card as currently displayed."""

    endorsement_count: int = 0
    tap_count: int = 0
    top_endorsement_tags: tuple[TopTag, ...] = ()
    recent_endorsements: tuple[RecentEndorsement, ...] = ()

    def with_result(
        self,
        endorsement_count: int,
        tap_count: int,
        top_endorsement_tags: tuple[TopTag, ...]
    ) -> "CardAggregate":
        """Create new aggregate with updated counts and tags."""
        return CardAggregate(
            endorsement_count=endorsement_count,
            tap_count=tap_count,
            top_endorsement_tags=top_endorsement_tags,
            recent_endorsements=self.recent_endorsements,
        )

    @property
    def top_tag(self) -> Optional[TopTag]:
        return self.top_endorsement_tags[0] if self.top_endorsement_tags else None
