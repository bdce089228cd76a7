"""Default configuration parameters for the endorsement flow."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class EndpointParams:
    """Submission endpoint and login redirect target."""
    base_url: str = "http://localhost:3000"
    endorse_path: str = "/api/ecard/endorse"
    login_path: str = "/app/login"
    return_param: str = "returnUrl"
    timeout_seconds: int = 15
    user_agent: str = "endorse-app/0.1"


@dataclass(frozen=True)
class ResumePolicy:
    """Bounded session polling after a login redirect."""
    max_attempts: int = 10                 # Session lookups before giving up
    interval_ms: int = 500                 # Pause after each empty lookup
    use_refresh: bool = False              # Also call refresh_session when a lookup is empty

    @property
    def budget_ms(self) -> int:
        """Total time spent sleeping when every attempt comes back empty."""
        return self.max_attempts * self.interval_ms


@dataclass(frozen=True)
class VaultParams:
    """Durable single-slot storage for an unsent endorsement."""
    storage_key: str = "pending_endorsement"
    db_path: str = "endorse_vault.db"
    schema_version: int = 1


@dataclass(frozen=True)
class AggregationParams:
    """Display limits for server-computed aggregates."""
    max_top_tags: int = 8
    max_recent_endorsements: int = 5
    default_emoji: str = "⭐"
    anonymous_endorser_name: str = "Tavvy User"


@dataclass(frozen=True)
class NoteParams:
    """Free-text note constraints."""
    max_length: Optional[int] = None       # None leaves length to the server


@dataclass(frozen=True)
class MessageParams:
    """User-facing messages."""
    submit_failed: str = "Failed to submit endorsement."
    network_error: str = "Network error. Please try again."


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    endpoint: EndpointParams
    resume: ResumePolicy
    vault: VaultParams
    aggregation: AggregationParams
    note: NoteParams
    messages: MessageParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        endpoint=EndpointParams(),
        resume=ResumePolicy(),
        vault=VaultParams(),
        aggregation=AggregationParams(),
        note=NoteParams(),
        messages=MessageParams(),
    )
