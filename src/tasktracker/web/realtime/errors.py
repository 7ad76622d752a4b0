"""Realtime error taxonomy."""

from __future__ import annotations

# RFC 6455 close codes used when rejecting or dropping a connection.
POLICY_VIOLATION = 1008
TRY_AGAIN_LATER = 1013


class RealtimeError(Exception):
    """Base class for realtime subsystem errors."""


class UpgradeRejected(RealtimeError):
    """The upgrade request failed origin, board, auth or ownership checks."""

    close_code = POLICY_VIOLATION

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class RateLimited(UpgradeRejected):
    """Too many upgrade attempts from one client."""

    close_code = TRY_AGAIN_LATER


class TransientIOError(RealtimeError):
    """A read or write failed on one established connection."""


class EncodeError(RealtimeError):
    """A task change event could not be serialized."""
