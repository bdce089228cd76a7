"""Base classes for endorsement submission transports."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

import structlog

from ..models.aggregation import AggregationResult


class SubmissionStatus(Enum):
    """Classified outcome of one submission attempt."""
    SUCCESS = "success"
    AUTH_REQUIRED = "auth_required"
    REJECTED = "rejected"
    NETWORK_ERROR = "network_error"
    INVALID = "invalid"
    BUSY = "busy"


@dataclass
class SubmissionResult:
    """Result of a submission attempt."""
    status: SubmissionStatus
    aggregation: Optional[AggregationResult] = None
    message: Optional[str] = None
    http_status: Optional[int] = None
    delivery_time_ms: Optional[int] = None
    error: Optional[Exception] = None

    @property
    def succeeded(self) -> bool:
        return self.status == SubmissionStatus.SUCCESS


@dataclass(frozen=True)
class HttpResponse:
    """Status code and decoded JSON body of a completed request."""
    status: int
    body: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class BaseTransport(ABC):
    """Base class for the network boundary of the submission client."""

    def __init__(self, name: str):
        self.name = name
        self.logger = structlog.get_logger(f"endorse.transport.{name}")
        self._request_count = 0
        self._error_count = 0

    @abstractmethod
    def post_json(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str],
        timeout_seconds: float
    ) -> HttpResponse:
        """
        POST a JSON body.

        Returns:
            The response, whatever its status code

        Raises:
            TransientNetworkError: If no response was received
        """
        pass

    def get_stats(self) -> dict[str, Any]:
        """Get transport statistics."""
        return {
            "name": self.name,
            "request_count": self._request_count,
            "error_count": self._error_count,
        }

    def reset_stats(self) -> None:
        self._request_count = 0
        self._error_count = 0
