"""Helper modules for the per-session state machine."""

from .keepalive import HANDSHAKE_MESSAGE_TYPE, PING_MESSAGE_TYPE, KeepaliveMessages
from .timing import DEFAULT_MAX_ATTEMPTS, SessionTiming

__all__ = [
    "DEFAULT_MAX_ATTEMPTS",
    "HANDSHAKE_MESSAGE_TYPE",
    "KeepaliveMessages",
    "PING_MESSAGE_TYPE",
    "SessionTiming",
]
