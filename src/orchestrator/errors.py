"""Session-level error taxonomy.

Every error here is contained inside the session that raised it. None of them
abort sibling sessions or the scheduler. Operator cancellation is not an
error and is modelled as ``SessionStatus.CANCELLED`` instead.
"""

from __future__ import annotations


class SessionError(RuntimeError):
    """Base class for failures contained within a single session."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class RoutingPathExhausted(SessionError):
    """Raised when the routing path source has nothing to hand out."""

    def __init__(self, reason: str = "no routing paths available") -> None:
        super().__init__(reason)


class CredentialAcquisitionFailed(SessionError):
    """Raised when the session provider cannot issue an access token."""


class DialFailed(SessionError):
    """Raised when the transport cannot open a connection."""


class SendFailed(SessionError):
    """Raised when a message cannot be written to an open connection."""


class TargetResolutionFailed(RuntimeError):
    """Raised when the target identifier cannot be resolved before a run."""

    def __init__(self, target_name: str, reason: str = "") -> None:
        message = f"Failed to resolve target {target_name!r}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.target_name = target_name
        self.reason = reason


RETRYABLE_ERRORS = (RoutingPathExhausted, CredentialAcquisitionFailed, DialFailed)


__all__ = [
    "CredentialAcquisitionFailed",
    "DialFailed",
    "RETRYABLE_ERRORS",
    "RoutingPathExhausted",
    "SendFailed",
    "SessionError",
    "TargetResolutionFailed",
]
