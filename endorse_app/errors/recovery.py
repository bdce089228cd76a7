"""
Recovery categories for endorsement errors.

Each mixin names what the flow does with a vaulted endorsement after a
failure carrying it: keep it for a later page load, drop it, or carry on
with a substitute value.
"""

from typing import Optional


class RecoverableError(Exception):
    """Failure fixed by a later attempt (after login or on the next page load)."""

    keeps_pending = True


class UnrecoverableError(Exception):
    """Failure where replaying the same payload cannot succeed."""

    keeps_pending = False


class GracefulDegradationError(Exception):
    """Failure absorbed by substituting a fallback value."""

    fallback_strategy: Optional[str] = None
