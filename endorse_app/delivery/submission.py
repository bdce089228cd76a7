"""
Submission client for endorsements.

Executes the POST, classifies the response and reports a SubmissionResult.
Nothing raised at the network boundary escapes this module.
"""

import time
from typing import Any, Mapping, Optional
from urllib.parse import urljoin

from ..config.defaults import AggregationParams, EndpointParams, MessageParams
from ..errors import AuthRequiredError, PermanentServerError, TransientNetworkError
from ..logging.config import get_submission_logger, log_submission_outcome
from ..models.aggregation import AggregationResult
from ..state.models import EndorsementSubmission
from ..utils.time import elapsed_ms
from .base import BaseTransport, HttpResponse, SubmissionResult, SubmissionStatus
from .composer import build_headers
from .session import SessionProvider, access_token_of

logger = get_submission_logger(__name__)


class SubmissionClient:
    """Posts endorsements; at most one request is in flight at a time."""

    def __init__(
        self,
        transport: BaseTransport,
        session_provider: SessionProvider,
        endpoint: Optional[EndpointParams] = None,
        messages: Optional[MessageParams] = None,
        aggregation: Optional[AggregationParams] = None
    ):
        self.transport = transport
        self.session_provider = session_provider
        self.endpoint = endpoint or EndpointParams()
        self.messages = messages or MessageParams()
        self.aggregation = aggregation or AggregationParams()
        self.logger = logger
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def url(self) -> str:
        return urljoin(self.endpoint.base_url, self.endpoint.endorse_path)

    def current_token(self) -> Optional[str]:
        """Access token from the session provider; lookup failures count as anonymous."""
        try:
            return access_token_of(self.session_provider.get_session())
        except Exception as e:
            self.logger.warning("Session lookup failed, submitting anonymously", error=str(e))
            return None

    def submit(
        self,
        submission: EndorsementSubmission,
        access_token: Optional[str] = None,
        interactive: bool = True
    ) -> SubmissionResult:
        """
        Post one endorsement.

        Args:
            submission: Composed payload
            access_token: Token to attach; looked up from the session provider when None
            interactive: False on the resume path, which keeps network errors silent

        Returns:
            Classified result; BUSY if another submission is still in flight
        """
        if self._in_flight:
            self.logger.info("Submission already in flight", card_id=submission.card_id)
            return SubmissionResult(status=SubmissionStatus.BUSY)

        self._in_flight = True
        try:
            token = access_token if access_token is not None else self.current_token()
            headers = build_headers(token, submission.idempotency_key)

            start = time.monotonic()
            try:
                response = self.transport.post_json(
                    self.url,
                    submission.to_payload(),
                    headers,
                    self.endpoint.timeout_seconds,
                )
            except TransientNetworkError as e:
                result = SubmissionResult(
                    status=SubmissionStatus.NETWORK_ERROR,
                    message=self.messages.network_error if interactive else None,
                    delivery_time_ms=elapsed_ms(start),
                    error=e,
                )
            else:
                result = self.classify(response)
                result.delivery_time_ms = elapsed_ms(start)

            log_submission_outcome(
                self.logger,
                card_id=submission.card_id,
                status=result.status.value,
                signal_count=len(submission.signals),
                interactive=interactive,
                context={
                    "http_status": result.http_status,
                    "authenticated": token is not None,
                    "note_length": len(submission.note),
                    "delivery_time_ms": result.delivery_time_ms,
                },
            )
            return result

        finally:
            self._in_flight = False

    def classify(self, response: HttpResponse) -> SubmissionResult:
        """Map an HTTP response onto success / login required / permanent failure."""
        body: Mapping[str, Any] = response.body if isinstance(response.body, Mapping) else {}

        if response.ok:
            return SubmissionResult(
                status=SubmissionStatus.SUCCESS,
                aggregation=AggregationResult.from_response(
                    body,
                    self.aggregation.max_top_tags,
                    self.aggregation.default_emoji,
                ),
                http_status=response.status,
            )

        server_message = body.get("error") if isinstance(body.get("error"), str) else None

        if body.get("requireLogin") is True:
            return SubmissionResult(
                status=SubmissionStatus.AUTH_REQUIRED,
                message=server_message,
                http_status=response.status,
                error=AuthRequiredError(
                    server_message or "Authentication required",
                    status_code=response.status,
                ),
            )

        message = server_message or self.messages.submit_failed
        return SubmissionResult(
            status=SubmissionStatus.REJECTED,
            message=message,
            http_status=response.status,
            error=PermanentServerError(
                message,
                status_code=response.status,
                server_message=server_message,
            ),
        )
