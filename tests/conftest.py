"""Pytest configuration and shared fixtures."""

import pytest
from typing import Any, Dict, List, Optional, Union

from endorse_app.config.defaults import get_default_config
from endorse_app.delivery.base import BaseTransport, HttpResponse
from endorse_app.delivery.session import Session, SessionProvider
from endorse_app.delivery.submission import SubmissionClient
from endorse_app.persistence.slot_store import MemorySlotStorage
from endorse_app.persistence.vault import PendingEndorsementVault
from endorse_app.state.models import PendingEndorsement


class FakeSessionProvider(SessionProvider):
    """Returns queued tokens one lookup at a time, then repeats the last."""

    def __init__(self, tokens: Optional[List[Optional[str]]] = None):
        self.tokens = list(tokens) if tokens else [None]
        self.calls = 0
        self.refresh_calls = 0

    def get_session(self) -> Optional[Session]:
        index = min(self.calls, len(self.tokens) - 1)
        self.calls += 1
        token = self.tokens[index]
        return Session(access_token=token) if token else None

    def refresh_session(self) -> Optional[Session]:
        self.refresh_calls += 1
        return None


class FakeTransport(BaseTransport):
    """Replays queued responses or raises queued exceptions; records requests."""

    def __init__(self, responses: Optional[List[Union[HttpResponse, Exception]]] = None):
        super().__init__("fake")
        self.responses = list(responses or [])
        self.requests: List[Dict[str, Any]] = []

    def queue(self, response: Union[HttpResponse, Exception]) -> None:
        self.responses.append(response)

    def post_json(self, url, payload, headers, timeout_seconds) -> HttpResponse:
        self.requests.append({
            "url": url,
            "payload": payload,
            "headers": dict(headers),
            "timeout": timeout_seconds,
        })
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class RecordingSleeper:
    """Sleeper that records requested delays instead of blocking."""

    def __init__(self):
        self.delays: List[int] = []

    def __call__(self, milliseconds: int) -> None:
        self.delays.append(milliseconds)


@pytest.fixture
def config():
    return get_default_config()


@pytest.fixture
def storage() -> MemorySlotStorage:
    return MemorySlotStorage()


@pytest.fixture
def vault(storage, config) -> PendingEndorsementVault:
    return PendingEndorsementVault(storage, config.vault)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def sleeper() -> RecordingSleeper:
    return RecordingSleeper()


@pytest.fixture
def anonymous_sessions() -> FakeSessionProvider:
    return FakeSessionProvider([None])


@pytest.fixture
def client(transport, anonymous_sessions, config) -> SubmissionClient:
    return SubmissionClient(
        transport,
        anonymous_sessions,
        endpoint=config.endpoint,
        messages=config.messages,
        aggregation=config.aggregation,
    )


@pytest.fixture
def sample_card_data() -> Dict[str, Any]:
    """Page-load card fields consumed by the endorsement flow."""
    return {
        "id": "card-a",
        "slug": "jane-doe",
        "professionalCategory": "sales",
        "endorsementCount": 4,
        "tapCount": 4,
        "topEndorsementTags": [
            {"label": "Responsive", "emoji": "⚡", "count": 1},
            {"label": "Trustworthy", "emoji": "⭐", "count": 3},
        ],
        "recentEndorsements": [
            {"endorserName": "Sam", "note": "Great to work with", "createdAt": "2026-01-02T10:00:00Z"},
            {"endorserName": None, "note": None, "createdAt": "2026-01-01T10:00:00Z"},
        ],
    }


@pytest.fixture
def sample_signal_records() -> List[Dict[str, Any]]:
    """Catalog rows for universal plus sales signals."""
    return [
        {"id": "trustworthy", "label": "Trustworthy", "emoji": "⭐", "category": "universal"},
        {"id": "responsive", "label": "Responsive", "emoji": "⚡", "category": "universal"},
        {"id": "great-closer", "label": "Great Closer", "emoji": "🤝", "category": "sales"},
        {"id": "great-food", "label": "Great Food", "emoji": "🍽", "category": "food_dining"},
    ]


@pytest.fixture
def sample_pending() -> PendingEndorsement:
    return PendingEndorsement(
        card_id="card-a",
        card_slug="jane-doe",
        signals=("trustworthy", "responsive"),
        intensities={"trustworthy": 2, "responsive": 1},
        note="Helped me close fast",
        idempotency_key="11111111-2222-3333-4444-555555555555",
    )
