"""Boundary contracts for the collaborators the orchestrator drives."""

from __future__ import annotations

from typing import Any, Mapping, Protocol

from .routing import RoutingPath


class Connection(Protocol):
    """An open duplex connection owned by a single session."""

    async def send_structured(self, message: Mapping[str, Any]) -> None: ...

    async def close(self) -> None: ...


class SessionProvider(Protocol):
    """Resolves targets and issues per-session access tokens."""

    async def resolve_target(self, name: str) -> str: ...

    async def acquire_credential(self, path: RoutingPath) -> str: ...


class Transport(Protocol):
    """Dials persistent connections through a routing path."""

    async def dial(self, token: str, path: RoutingPath) -> Connection: ...


class RoutingPathSource(Protocol):
    """Read-only pool of outbound routing paths."""

    def select(self) -> RoutingPath: ...


__all__ = ["Connection", "RoutingPathSource", "SessionProvider", "Transport"]
