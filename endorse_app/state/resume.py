"""
Resume controller for endorsements interrupted by a login redirect.

On page load the controller looks for a vaulted endorsement for the card on
screen, polls the session provider within a bounded policy, and submits the
vaulted payload exactly once when a token appears. The vault is cleared on
success or on a permanent rejection and kept in every other case.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from ..config.defaults import ResumePolicy
from ..delivery.base import SubmissionResult, SubmissionStatus
from ..delivery.session import SessionProvider, access_token_of
from ..delivery.submission import SubmissionClient
from ..errors import VaultCorruptionError
from ..logging.config import get_flow_logger, log_state_transition
from ..persistence.vault import PendingEndorsementVault
from ..utils.time import sleep_ms
from .models import PendingEndorsement, ResumeState

flow_logger = get_flow_logger(__name__)


@dataclass(frozen=True)
class ResumeOutcome:
    """What a page-load resume attempt did."""

    state: ResumeState
    reason: str
    pending: Optional[PendingEndorsement] = None
    result: Optional[SubmissionResult] = None
    poll_attempts: int = 0

    @property
    def submitted(self) -> bool:
        return self.result is not None and self.result.succeeded


class ResumeController:
    """Drives one resume attempt per page load."""

    def __init__(
        self,
        vault: PendingEndorsementVault,
        client: SubmissionClient,
        session_provider: SessionProvider,
        policy: Optional[ResumePolicy] = None,
        sleeper: Callable[[int], None] = sleep_ms
    ):
        self.vault = vault
        self.client = client
        self.session_provider = session_provider
        self.policy = policy or ResumePolicy()
        self.sleeper = sleeper
        self.logger = flow_logger
        self.state = ResumeState.NO_PENDING
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    def _transition(self, card_id: str, to_state: ResumeState, trigger: str,
                    context: Optional[dict] = None) -> None:
        log_state_transition(
            self.logger,
            card_id=card_id,
            from_state=self.state.value,
            to_state=to_state.value,
            trigger=trigger,
            context=context,
        )
        self.state = to_state

    def scan(self, card_id: str) -> Optional[PendingEndorsement]:
        """
        Return the vaulted endorsement if it belongs to card_id.

        A corrupt entry is cleared. An entry for another card is left untouched.
        """
        try:
            pending = self.vault.read()
        except VaultCorruptionError as e:
            self.logger.warning("Discarding corrupt pending endorsement", card_id=card_id, error=str(e))
            self.vault.clear()
            return None

        if pending is None:
            return None

        if pending.card_id != card_id:
            self.logger.debug(
                "Pending endorsement belongs to another card",
                card_id=card_id,
                pending_card_id=pending.card_id
            )
            return None

        self.state = ResumeState.AWAITING_AUTH
        self._transition(card_id, ResumeState.RESUME_SCANNING, "vault_match")
        return pending

    def wait_for_token(self) -> tuple[Optional[str], int]:
        """
        Poll the session provider within the resume policy.

        Returns:
            (token or None, number of attempts made)
        """
        for attempt in range(1, self.policy.max_attempts + 1):
            token = self._lookup_token(self.session_provider.get_session)
            if token is None and self.policy.use_refresh:
                token = self._lookup_token(self.session_provider.refresh_session)

            if token is not None:
                return token, attempt

            self.sleeper(self.policy.interval_ms)

        return None, self.policy.max_attempts

    def _lookup_token(self, lookup: Callable) -> Optional[str]:
        try:
            return access_token_of(lookup())
        except Exception as e:
            self.logger.debug("Session lookup failed during resume poll", error=str(e))
            return None

    def resume(self, card_id: str) -> ResumeOutcome:
        """
        Run the resume protocol for the card on screen.

        Only the first call per controller does anything; the controller is
        created once per page load.
        """
        if self._started:
            return ResumeOutcome(state=self.state, reason="already_started")
        self._started = True

        pending = self.scan(card_id)
        if pending is None:
            return ResumeOutcome(state=self.state, reason="no_matching_entry")

        token, attempts = self.wait_for_token()
        if token is None:
            self._transition(
                card_id, ResumeState.AWAITING_AUTH, "poll_budget_exhausted",
                {"attempts": attempts, "interval_ms": self.policy.interval_ms}
            )
            return ResumeOutcome(
                state=self.state,
                reason="no_session",
                pending=pending,
                poll_attempts=attempts,
            )

        self._transition(card_id, ResumeState.RESUME_SUBMITTING, "session_ready", {"attempts": attempts})
        result = self.client.submit(pending.to_submission(), access_token=token, interactive=False)

        return self._resolve(card_id, pending, result, attempts)

    def _resolve(self, card_id: str, pending: PendingEndorsement,
                 result: SubmissionResult, attempts: int) -> ResumeOutcome:
        if result.status == SubmissionStatus.SUCCESS:
            self.vault.clear()
            self._transition(card_id, ResumeState.RESOLVED, "submitted")
            reason = "submitted"

        elif result.error is not None and not result.error.keeps_pending:
            self.vault.clear()
            self._transition(
                card_id, ResumeState.RESOLVED, "rejected",
                {"http_status": result.http_status}
            )
            reason = "rejected"

        else:
            # login required again, network failure or a busy client: keep the entry
            self._transition(
                card_id, ResumeState.AWAITING_AUTH, result.status.value,
                {"http_status": result.http_status}
            )
            reason = result.status.value

        return ResumeOutcome(
            state=self.state,
            reason=reason,
            pending=pending,
            result=result,
            poll_attempts=attempts,
        )
