"""HTTP POST transport for endorsement submissions."""

import json
import socket
from http.client import HTTPException
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlparse
from urllib.request import Request, urlopen

from ..errors import TransientNetworkError
from .base import BaseTransport, HttpResponse


def _decode_body(raw: bytes) -> dict[str, Any]:
    """JSON object body, or {} when the server sent something else."""
    if not raw:
        return {}
    try:
        decoded = json.loads(raw.decode('utf-8'))
    except (UnicodeDecodeError, ValueError):
        return {}
    return decoded if isinstance(decoded, dict) else {}


class UrllibTransport(BaseTransport):
    """HTTP POST transport built on urllib."""

    def __init__(self, name: str = "http", user_agent: str = "endorse-app/0.1"):
        super().__init__(name)
        self.user_agent = user_agent

    def post_json(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str],
        timeout_seconds: float
    ) -> HttpResponse:
        """POST payload as JSON and return status plus decoded body."""
        parsed = urlparse(url)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError(f"Invalid URL: {url}")

        data = json.dumps(payload).encode('utf-8')
        request_headers = {
            'Content-Type': 'application/json',
            'Content-Length': str(len(data)),
            'User-Agent': self.user_agent,
        }
        request_headers.update(headers)

        req = Request(url, data=data, headers=request_headers, method="POST")
        self._request_count += 1

        try:
            with urlopen(req, timeout=timeout_seconds) as response:
                status = response.getcode()
                body = _decode_body(response.read())

        except HTTPError as e:
            # urllib raises for 4xx/5xx; the error body still carries {error, requireLogin}
            status = e.code
            try:
                body = _decode_body(e.read() or b"")
            except (OSError, HTTPException) as read_error:
                self.logger.debug("Error body unreadable", status=status, error=str(read_error))
                body = {}
            self.logger.debug("Endorsement endpoint returned error status", status=status, url=url)

        except (OSError, URLError, socket.timeout, HTTPException) as e:
            # HTTPException covers truncated or malformed responses (IncompleteRead, BadStatusLine)
            self._error_count += 1
            self.logger.warning("Endorsement request network error", url=url, error=str(e))
            raise TransientNetworkError(f"Network error: {str(e)}", url=url) from e

        return HttpResponse(status=status, body=body)
