"""
Utility functions for the endorsement flow.
"""
from .time import elapsed_ms, format_timestamp, sleep_ms, utc_now

__all__ = [
    "elapsed_ms",
    "format_timestamp",
    "sleep_ms",
    "utc_now",
]
