"""Unit tests for the card endorsement controller."""

import pytest
from unittest.mock import Mock

from conftest import FakeSessionProvider, RecordingSleeper
from endorse_app.delivery.base import HttpResponse, SubmissionStatus
from endorse_app.engine import CardContext, CardEndorsementController, build_login_url
from endorse_app.errors import PersistenceError, TransientNetworkError
from endorse_app.persistence.slot_store import MemorySlotStorage
from endorse_app.state.models import PendingEndorsement, TapIntensity


@pytest.fixture
def navigate():
    return Mock()


def make_controller(card_data, transport, storage, navigate, sessions=None, records=None):
    return CardEndorsementController.create(
        card_data,
        sessions or FakeSessionProvider([None]),
        navigate,
        transport=transport,
        storage=storage,
        signal_records=records,
        sleeper=RecordingSleeper(),
    )


class TestBuildLoginUrl:
    """Test login redirect target."""

    def test_return_url_is_encoded_public_path(self):
        assert build_login_url("jane-doe") == "/app/login?returnUrl=%2Fjane-doe"

    def test_card_context_public_path(self):
        assert CardContext(card_id="c", slug="jane-doe").public_path == "/jane-doe"


class TestTapFlow:
    """Test tap handling through the controller."""

    def test_tap_and_count(self, sample_card_data, transport, storage, navigate, sample_signal_records):
        controller = make_controller(sample_card_data, transport, storage, navigate,
                                     records=sample_signal_records)
        controller.open_endorse_flow()

        assert controller.tap("trustworthy") is TapIntensity.SELECTED
        assert controller.tap("great-closer") is TapIntensity.SELECTED
        assert controller.selected_signal_count == 2
        assert controller.can_submit is True

    def test_unknown_signal_ignored(self, sample_card_data, transport, storage, navigate, sample_signal_records):
        controller = make_controller(sample_card_data, transport, storage, navigate,
                                     records=sample_signal_records)

        assert controller.tap("great-food") is TapIntensity.NONE
        assert controller.selected_signal_count == 0

    def test_without_catalog_every_tap_counts(self, sample_card_data, transport, storage, navigate):
        controller = make_controller(sample_card_data, transport, storage, navigate)

        controller.tap("anything")

        assert controller.selected_signal_count == 1

    def test_open_endorse_flow_resets(self, sample_card_data, transport, storage, navigate):
        controller = make_controller(sample_card_data, transport, storage, navigate)
        controller.tap("x")
        controller.set_note("hello")

        controller.open_endorse_flow()

        assert controller.selected_signal_count == 0
        assert controller.note == ""
        assert controller.show_endorse_flow is True


class TestSubmit:
    """Test interactive submission outcomes."""

    def test_empty_selection_never_reaches_network(self, sample_card_data, transport, storage, navigate):
        controller = make_controller(sample_card_data, transport, storage, navigate)

        result = controller.submit()

        assert result.status is SubmissionStatus.INVALID
        assert controller.message is None
        assert transport.requests == []

    def test_success_updates_aggregate(self, sample_card_data, transport, storage, navigate):
        controller = make_controller(sample_card_data, transport, storage, navigate)
        controller.open_endorse_flow()
        controller.tap("trustworthy")
        controller.tap("trustworthy")
        transport.queue(HttpResponse(200, {
            "endorsementCount": 5,
            "topEndorsementTags": [{"label": "Trustworthy", "emoji": "⭐", "count": 3}],
        }))

        result = controller.submit()

        assert result.succeeded
        assert controller.aggregate.endorsement_count == 5
        assert controller.aggregate.top_tag.label == "Trustworthy"
        assert controller.endorsement_submitted is True
        assert controller.show_summary is True
        assert controller.show_endorse_flow is False
        assert controller.selected_signal_count == 0

    def test_success_clears_vault_entry_for_this_card(
        self, sample_card_data, transport, storage, navigate, sample_pending
    ):
        controller = make_controller(sample_card_data, transport, storage, navigate)
        controller.vault.write(sample_pending)
        controller.tap("trustworthy")
        transport.queue(HttpResponse(200, {}))

        controller.submit()

        assert controller.vault.has_entry() is False

    def test_success_keeps_vault_entry_for_other_card(self, sample_card_data, transport, storage, navigate):
        controller = make_controller(sample_card_data, transport, storage, navigate)
        controller.vault.write(PendingEndorsement(
            card_id="card-b", card_slug="b", signals=("x",), intensities={"x": 1}
        ))
        controller.tap("trustworthy")
        transport.queue(HttpResponse(200, {}))

        controller.submit()

        assert controller.vault.read().card_id == "card-b"

    def test_require_login_writes_vault_and_redirects(self, sample_card_data, transport, storage, navigate):
        controller = make_controller(sample_card_data, transport, storage, navigate)
        controller.tap("trustworthy")
        controller.set_note("solid")
        transport.queue(HttpResponse(401, {"error": "Authentication required", "requireLogin": True}))

        result = controller.submit()

        assert result.status is SubmissionStatus.AUTH_REQUIRED
        navigate.assert_called_once_with("/app/login?returnUrl=%2Fjane-doe")
        pending = controller.vault.read()
        assert pending.card_id == "card-a"
        assert pending.card_slug == "jane-doe"
        assert pending.signals == ("trustworthy",)
        assert dict(pending.intensities) == {"trustworthy": 1}
        assert pending.note == "solid"
        assert pending.idempotency_key == transport.requests[0]["headers"]["Idempotency-Key"]

    def test_vault_write_failure_blocks_redirect(self, sample_card_data, transport, navigate):
        storage = Mock(spec=MemorySlotStorage)
        storage.set.side_effect = PersistenceError("quota exceeded", operation="write")
        controller = make_controller(sample_card_data, transport, storage, navigate)
        controller.tap("trustworthy")
        transport.queue(HttpResponse(401, {"requireLogin": True}))

        controller.submit()

        navigate.assert_not_called()
        assert controller.message == "Network error. Please try again."

    def test_permanent_failure_keeps_selection(self, sample_card_data, transport, storage, navigate):
        controller = make_controller(sample_card_data, transport, storage, navigate)
        controller.tap("trustworthy")
        controller.tap("responsive")
        transport.queue(HttpResponse(404, {"error": "Card not found", "requireLogin": False}))

        result = controller.submit()

        assert result.status is SubmissionStatus.REJECTED
        assert controller.message == "Card not found"
        assert controller.taps.selection() == {"trustworthy": 1, "responsive": 1}
        assert controller.endorsement_submitted is False
        navigate.assert_not_called()

    def test_network_failure_shows_retry_message(self, sample_card_data, transport, storage, navigate):
        controller = make_controller(sample_card_data, transport, storage, navigate)
        controller.tap("trustworthy")
        transport.queue(TransientNetworkError("offline"))

        result = controller.submit()

        assert result.status is SubmissionStatus.NETWORK_ERROR
        assert controller.message == "Network error. Please try again."
        assert controller.taps.selection() == {"trustworthy": 1}
        assert controller.vault.has_entry() is False

    def test_retry_after_failure(self, sample_card_data, transport, storage, navigate):
        controller = make_controller(sample_card_data, transport, storage, navigate)
        controller.tap("trustworthy")
        transport.queue(TransientNetworkError("offline"))
        transport.queue(HttpResponse(200, {"endorsementCount": 5, "topEndorsementTags": []}))

        controller.submit()
        result = controller.submit()

        assert result.succeeded
        assert controller.message is None
        assert len(transport.requests) == 2

    def test_retry_reuses_idempotency_key(self, sample_card_data, transport, storage, navigate):
        controller = make_controller(sample_card_data, transport, storage, navigate)
        controller.tap("trustworthy")
        transport.queue(TransientNetworkError("offline"))
        transport.queue(HttpResponse(200, {}))

        controller.submit()
        controller.submit()

        first, second = (request["headers"]["Idempotency-Key"] for request in transport.requests)
        assert first == second

    def test_changed_selection_gets_new_idempotency_key(self, sample_card_data, transport, storage, navigate):
        controller = make_controller(sample_card_data, transport, storage, navigate)
        controller.tap("trustworthy")
        transport.queue(TransientNetworkError("offline"))
        transport.queue(TransientNetworkError("offline"))
        transport.queue(HttpResponse(200, {}))

        controller.submit()
        controller.tap("responsive")
        controller.submit()
        controller.set_note("thanks")
        controller.submit()

        keys = [request["headers"]["Idempotency-Key"] for request in transport.requests]
        assert len(set(keys)) == 3

    def test_new_flow_after_success_gets_new_idempotency_key(
        self, sample_card_data, transport, storage, navigate
    ):
        controller = make_controller(sample_card_data, transport, storage, navigate)
        transport.queue(HttpResponse(200, {}))
        transport.queue(HttpResponse(200, {}))

        controller.tap("trustworthy")
        controller.submit()
        controller.tap("trustworthy")
        controller.submit()

        keys = [request["headers"]["Idempotency-Key"] for request in transport.requests]
        assert keys[0] != keys[1]

    def test_note_limit_from_config(self, sample_card_data, transport, storage, navigate):
        from endorse_app.config.loader import ConfigLoader

        config = ConfigLoader.create().load({"note": {"max_length": 5}})
        controller = CardEndorsementController.create(
            sample_card_data, FakeSessionProvider(), navigate,
            config=config, transport=transport, storage=storage,
        )
        controller.tap("trustworthy")
        controller.set_note("too long")

        result = controller.submit()

        assert result.status is SubmissionStatus.INVALID
        assert "5" in controller.message
        assert transport.requests == []


class TestOnPageLoad:
    """Test page-load resume through the controller."""

    def test_resume_success_applies_fallback_increment(
        self, sample_card_data, transport, storage, navigate, sample_pending
    ):
        controller = make_controller(sample_card_data, transport, storage, navigate,
                                     sessions=FakeSessionProvider(["tok"]))
        controller.vault.write(sample_pending)
        transport.queue(HttpResponse(200, {"success": True}))

        outcome = controller.on_page_load()

        assert outcome.submitted is True
        assert controller.aggregate.endorsement_count == 6
        assert controller.aggregate.tap_count == 6
        assert controller.endorsement_submitted is True
        assert controller.show_summary is True

    def test_resume_without_entry_does_nothing(self, sample_card_data, transport, storage, navigate):
        sessions = FakeSessionProvider(["tok"])
        controller = make_controller(sample_card_data, transport, storage, navigate, sessions=sessions)

        outcome = controller.on_page_load()

        assert outcome.submitted is False
        assert sessions.calls == 0
        assert controller.endorsement_submitted is False
