"""
Time utilities for the endorsement flow.
"""

import time
from datetime import datetime, timezone


def sleep_ms(milliseconds: int) -> None:
    """Block for the given number of milliseconds."""
    if milliseconds > 0:
        time.sleep(milliseconds / 1000.0)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """ISO format with a trailing Z for UTC timestamps."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')


def elapsed_ms(start: float) -> int:
    """Milliseconds since a time.monotonic() reading."""
    return int((time.monotonic() - start) * 1000)
