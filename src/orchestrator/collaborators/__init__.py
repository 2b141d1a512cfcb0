"""Collaborators the orchestrator drives: provider, transport and routing paths."""

from .http_provider import HTTPSessionProvider
from .interfaces import Connection, RoutingPathSource, SessionProvider, Transport
from .routing import RoutingPath, RoutingPathPool
from .websocket_transport import WebSocketConnection, WebSocketTransport

__all__ = [
    "Connection",
    "HTTPSessionProvider",
    "RoutingPath",
    "RoutingPathPool",
    "RoutingPathSource",
    "SessionProvider",
    "Transport",
    "WebSocketConnection",
    "WebSocketTransport",
]
