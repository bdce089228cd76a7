"""
Error handling tests for the endorsement flow.

Tests cover the error classification hierarchy, recovery categories, and how
the client and controllers route each failure.
"""

import pytest

from conftest import FakeSessionProvider, RecordingSleeper
from endorse_app.delivery.base import HttpResponse, SubmissionStatus
from endorse_app.errors import (
    AuthRequiredError,
    ConfigurationError,
    EmptySelectionError,
    GracefulDegradationError,
    PartialDataError,
    PermanentServerError,
    PersistenceError,
    RecoverableError,
    SelectionValidationError,
    SubmissionError,
    SystemFailureError,
    TransientNetworkError,
    UnrecoverableError,
    VaultCorruptionError,
)
from endorse_app.models.aggregation import AggregationResult
from endorse_app.state.models import EndorsementSubmission
from endorse_app.state.resume import ResumeController


class TestErrorClassification:
    """Test error classification system."""

    def test_submission_error_hierarchy(self):
        """Test that submission errors share a base and carry their fields."""
        base_error = SubmissionError("base error")
        assert base_error.recoverable is True
        assert base_error.context == {}

        empty = EmptySelectionError()
        assert isinstance(empty, SelectionValidationError)
        assert empty.field == "signals"
        assert str(empty) == "At least one signal is required"

        auth = AuthRequiredError("login", status_code=401)
        assert isinstance(auth, SubmissionError)
        assert auth.status_code == 401

        network = TransientNetworkError("offline", url="https://cards.example.com")
        assert network.url == "https://cards.example.com"

    def test_system_failure_error_hierarchy(self):
        """Test that system failures are not recoverable by default."""
        persistence = PersistenceError("disk full", operation="write", target="pending_endorsement")
        assert persistence.recoverable is False
        assert persistence.operation == "write"
        assert isinstance(persistence, SystemFailureError)

        corrupt = VaultCorruptionError("bad json", raw_value="{", target="pending_endorsement")
        assert isinstance(corrupt, PersistenceError)
        assert corrupt.operation == "read"
        assert corrupt.raw_value == "{"

        config_error = ConfigurationError("invalid", issues=["a"])
        assert config_error.issues == ["a"]

    def test_recovery_categories(self):
        """Test that each failure maps to exactly one recovery path."""
        assert isinstance(AuthRequiredError("x"), RecoverableError)
        assert isinstance(TransientNetworkError("x"), RecoverableError)
        assert AuthRequiredError("x").keeps_pending is True
        assert TransientNetworkError("x").keeps_pending is True

        permanent = PermanentServerError("x", status_code=404, server_message="Card not found")
        assert isinstance(permanent, UnrecoverableError)
        assert not isinstance(permanent, RecoverableError)
        assert permanent.recoverable is False
        assert permanent.keeps_pending is False
        assert permanent.server_message == "Card not found"

        partial = PartialDataError("x", missing_fields=["endorsementCount"])
        assert isinstance(partial, GracefulDegradationError)
        assert partial.fallback_strategy is None

    def test_incomplete_result_names_fallback(self):
        """Test that an incomplete success response carries the fallback it triggers."""
        with pytest.raises(PartialDataError) as exc_info:
            AggregationResult.from_response({"endorsementCount": 3}).require_complete()

        assert exc_info.value.fallback_strategy == "increment_count_keep_tags"

    def test_context_preserved(self):
        """Test that error context is kept for logging."""
        error = TransientNetworkError("offline", context={"attempt": 2})
        assert error.context == {"attempt": 2}


class TestClientErrorRouting:
    """Test that the submission client attaches the right error to each result."""

    def submission(self):
        return EndorsementSubmission(card_id="card-a", signals=("trustworthy",),
                                     intensities={"trustworthy": 1})

    def test_require_login_attaches_auth_error(self, client, transport):
        transport.queue(HttpResponse(401, {"requireLogin": True}))

        result = client.submit(self.submission())

        assert isinstance(result.error, AuthRequiredError)
        assert result.error.status_code == 401

    def test_rejection_attaches_permanent_error(self, client, transport):
        transport.queue(HttpResponse(400, {"error": "Invalid signals"}))

        result = client.submit(self.submission())

        assert isinstance(result.error, PermanentServerError)
        assert result.message == "Invalid signals"

    def test_network_failure_attaches_transient_error(self, client, transport):
        transport.queue(TransientNetworkError("offline"))

        result = client.submit(self.submission())

        assert isinstance(result.error, TransientNetworkError)
        assert client.in_flight is False

    def test_unexpected_transport_error_propagates(self, client, transport):
        """Test that programming errors are not disguised as network failures."""
        transport.queue(RuntimeError("bug"))

        with pytest.raises(RuntimeError):
            client.submit(self.submission())

        assert client.in_flight is False


class TestResumeRecovery:
    """Test vault handling for each recovery category during resume."""

    @pytest.mark.parametrize("response, keeps_entry", [
        (HttpResponse(401, {"requireLogin": True}), True),
        (TransientNetworkError("offline"), True),
        (HttpResponse(404, {"error": "Card not found"}), False),
        (HttpResponse(500, {}), False),
    ])
    def test_vault_kept_only_for_recoverable(self, vault, client, transport, sample_pending,
                                             response, keeps_entry):
        vault.write(sample_pending)
        transport.queue(response)
        controller = ResumeController(vault, client, FakeSessionProvider(["tok"]),
                                      sleeper=RecordingSleeper())

        controller.resume("card-a")

        assert vault.has_entry() is keeps_entry

    def test_corrupt_vault_entry_cleared(self, storage, vault, client, transport):
        storage.set(vault.key, "{not json")
        controller = ResumeController(vault, client, FakeSessionProvider(["tok"]),
                                      sleeper=RecordingSleeper())

        outcome = controller.resume("card-a")

        assert outcome.reason == "no_matching_entry"
        assert vault.has_entry() is False
        assert transport.requests == []
