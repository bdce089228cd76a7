"""
Card endorsement controller.

Coordinates one card page view: tap state, interactive submission, the
vault write and login redirect on an auth failure, and the page-load resume
of a vaulted endorsement.

Visitor taps → Composer → SubmissionClient → (login redirect → reload →
ResumeController) → AggregationReader
"""

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional
from urllib.parse import quote, urlencode

import structlog

from .aggregation.reader import AggregationReader
from .config.defaults import DefaultConfig, EndpointParams, get_default_config
from .delivery.base import BaseTransport, SubmissionResult, SubmissionStatus
from .delivery.composer import compose_submission
from .delivery.http_delivery import UrllibTransport
from .delivery.session import SessionProvider
from .delivery.submission import SubmissionClient
from .errors import PersistenceError, SelectionValidationError
from .models.aggregation import CardAggregate
from .persistence.slot_store import SlotStorage, SqliteSlotStorage
from .persistence.vault import PendingEndorsementVault
from .signals.catalog import SignalCatalog
from .state.models import EndorsementSubmission, TapIntensity
from .state.resume import ResumeController, ResumeOutcome
from .state.taps import TapStateMachine

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CardContext:
    """Identity of the card on screen."""
    card_id: str
    slug: str
    category: Optional[str] = None

    @property
    def public_path(self) -> str:
        return f"/{self.slug}"


def build_login_url(card_slug: str, endpoint: Optional[EndpointParams] = None) -> str:
    """Login entry point carrying the card's public path as the return URL."""
    endpoint = endpoint or EndpointParams()
    query = urlencode({endpoint.return_param: f"/{card_slug}"}, quote_via=quote)
    return f"{endpoint.login_path}?{query}"


class CardEndorsementController:
    """
    Endorsement flow for one card page view.

    In-memory state (taps, note, flags) lives only as long as this object;
    the vault is what survives a login redirect.
    """

    def __init__(
        self,
        card: CardContext,
        reader: AggregationReader,
        client: SubmissionClient,
        vault: PendingEndorsementVault,
        resume_controller: ResumeController,
        navigate: Callable[[str], None],
        config: Optional[DefaultConfig] = None,
        catalog: Optional[SignalCatalog] = None
    ):
        self.card = card
        self.reader = reader
        self.client = client
        self.vault = vault
        self.resume_controller = resume_controller
        self.navigate = navigate
        self.config = config or get_default_config()
        self.catalog = catalog
        self.taps = TapStateMachine()
        self.logger = logger.bind(card_id=card.card_id)

        self.note = ""
        self.endorsement_submitted = False
        self.show_endorse_flow = False
        self.show_summary = False
        self.message: Optional[str] = None
        # Reused across retries until the selection or note changes or a submit succeeds
        self._idempotency_key: Optional[str] = None

    @classmethod
    def create(
        cls,
        card_data: Mapping[str, Any],
        session_provider: SessionProvider,
        navigate: Callable[[str], None],
        config: Optional[DefaultConfig] = None,
        transport: Optional[BaseTransport] = None,
        storage: Optional[SlotStorage] = None,
        signal_records: Optional[list[dict[str, Any]]] = None,
        sleeper: Optional[Callable[[int], None]] = None
    ) -> "CardEndorsementController":
        """
        Wire a controller from page-load card data.

        Args:
            card_data: Card fields: id, slug, professionalCategory and the
                aggregate fields read by AggregationReader
            session_provider: Source of the visitor's session
            navigate: Called with the login URL on an auth redirect
            config: Loaded configuration; defaults when None
            transport: Network boundary; urllib transport when None
            storage: Vault backing store; SQLite at config.vault.db_path when None
            signal_records: Catalog rows for this card
            sleeper: Poll delay function taking milliseconds
        """
        config = config or get_default_config()
        card = CardContext(
            card_id=str(card_data["id"]),
            slug=str(card_data.get("slug") or ""),
            category=card_data.get("professionalCategory"),
        )

        transport = transport or UrllibTransport(user_agent=config.endpoint.user_agent)
        storage = storage or SqliteSlotStorage(config.vault.db_path)

        client = SubmissionClient(
            transport,
            session_provider,
            endpoint=config.endpoint,
            messages=config.messages,
            aggregation=config.aggregation,
        )
        vault = PendingEndorsementVault(storage, config.vault)
        resume_kwargs = {"sleeper": sleeper} if sleeper is not None else {}
        resume_controller = ResumeController(
            vault, client, session_provider, config.resume, **resume_kwargs
        )

        catalog = None
        if signal_records is not None:
            catalog = SignalCatalog.from_records(
                signal_records, card.category, config.aggregation.default_emoji
            )

        return cls(
            card=card,
            reader=AggregationReader.from_page_data(card_data, config.aggregation),
            client=client,
            vault=vault,
            resume_controller=resume_controller,
            navigate=navigate,
            config=config,
            catalog=catalog,
        )

    @property
    def aggregate(self) -> CardAggregate:
        return self.reader.current

    @property
    def is_submitting(self) -> bool:
        return self.client.in_flight

    @property
    def can_submit(self) -> bool:
        return self.taps.can_submit and not self.is_submitting

    @property
    def selected_signal_count(self) -> int:
        return self.taps.selected_signal_count

    @property
    def login_url(self) -> str:
        return build_login_url(self.card.slug, self.config.endpoint)

    def open_endorse_flow(self) -> None:
        """Start a fresh selection."""
        self.taps.reset()
        self.note = ""
        self.message = None
        self._idempotency_key = None
        self.show_summary = False
        self.show_endorse_flow = True

    def tap(self, signal_id: str) -> TapIntensity:
        """Tap a signal tile; ids outside the card's catalog are ignored."""
        if self.catalog is not None and signal_id not in self.catalog:
            self.logger.warning("Ignoring tap on unknown signal", signal_id=signal_id)
            return TapIntensity.NONE
        self._idempotency_key = None
        return self.taps.handle_signal_tap(signal_id)

    def set_note(self, note: str) -> None:
        note = note or ""
        if note != self.note:
            self._idempotency_key = None
        self.note = note

    def submit(self) -> SubmissionResult:
        """Submit the current selection from the tap flow."""
        if self.is_submitting:
            return SubmissionResult(status=SubmissionStatus.BUSY)

        try:
            submission = compose_submission(
                self.card.card_id,
                self.taps.selection(),
                self.note,
                max_note_length=self.config.note.max_length,
                idempotency_key=self._idempotency_key,
            )
        except SelectionValidationError as e:
            self.logger.info("Submission blocked before sending", field=e.field, reason=str(e))
            self.message = None if e.field == "signals" else str(e)
            return SubmissionResult(status=SubmissionStatus.INVALID, message=self.message, error=e)

        self.message = None
        self._idempotency_key = submission.idempotency_key
        result = self.client.submit(submission, interactive=True)

        if result.status == SubmissionStatus.SUCCESS:
            self._apply_success(result, len(submission.signals))
            self.taps.reset()
            self._idempotency_key = None
            self.vault.clear_for_card(self.card.card_id)

        elif result.status == SubmissionStatus.AUTH_REQUIRED:
            self._redirect_to_login(submission)

        elif result.status in (SubmissionStatus.REJECTED, SubmissionStatus.NETWORK_ERROR):
            self.message = result.message

        return result

    def _redirect_to_login(self, submission: EndorsementSubmission) -> None:
        try:
            self.vault.write(submission.to_pending(self.card.slug))
        except PersistenceError as e:
            self.logger.error("Could not store pending endorsement", error=str(e))
            self.message = self.config.messages.network_error
            return

        login_url = self.login_url
        self.logger.info("Redirecting to login", login_url=login_url)
        self.navigate(login_url)

    def on_page_load(self) -> ResumeOutcome:
        """Resume a vaulted endorsement for this card, if there is one."""
        outcome = self.resume_controller.resume(self.card.card_id)

        if outcome.submitted and outcome.pending is not None:
            self._apply_success(outcome.result, len(outcome.pending.signals))

        return outcome

    def _apply_success(self, result: SubmissionResult, submitted_signal_count: int) -> None:
        self.reader.apply_success(result.aggregation, submitted_signal_count)
        self.endorsement_submitted = True
        self.show_endorse_flow = False
        self.show_summary = True
