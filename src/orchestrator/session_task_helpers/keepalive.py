"""Keepalive message construction."""

from __future__ import annotations

from typing import Any, Dict

HANDSHAKE_MESSAGE_TYPE = "handshake"
PING_MESSAGE_TYPE = "ping"


class KeepaliveMessages:
    """Alternates a target handshake (odd iterations) with a liveness ping (even iterations)."""

    def __init__(self, target_id: str) -> None:
        self.target_id = target_id

    def handshake(self) -> Dict[str, Any]:
        return {"type": HANDSHAKE_MESSAGE_TYPE, "data": {"target_id": self.target_id}}

    @staticmethod
    def ping() -> Dict[str, Any]:
        return {"type": PING_MESSAGE_TYPE}

    def for_iteration(self, iteration: int) -> Dict[str, Any]:
        """Message to send on the 1-based ``iteration`` of the keepalive loop."""
        if iteration < 1:
            raise ValueError(f"iteration is 1-based (got {iteration})")
        if iteration % 2 == 0:
            return self.ping()
        return self.handshake()
