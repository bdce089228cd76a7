"""Session-provider capability consumed by the submission and resume paths."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Session:
    """Authenticated session as reported by the external auth system."""
    access_token: Optional[str] = None
    user_id: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return bool(self.access_token)


class SessionProvider(ABC):
    """Source of the visitor's current session."""

    @abstractmethod
    def get_session(self) -> Optional[Session]:
        """Return the current session, or None when the visitor is anonymous."""
        pass

    def refresh_session(self) -> Optional[Session]:
        """Ask the auth system to refresh; defaults to a plain lookup."""
        return self.get_session()


def access_token_of(session: Optional[Session]) -> Optional[str]:
    """Bearer token of a session, or None."""
    if session is None or not session.is_valid:
        return None
    return session.access_token
