"""websockets-backed transport dialing through HTTP proxies."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Mapping, Optional
from urllib.parse import urlencode, urlsplit, urlunsplit

import orjson
import websockets
from websockets.exceptions import WebSocketException

from ..errors import DialFailed, SendFailed
from ..network_errors import describe_error
from .routing import RoutingPath

logger = logging.getLogger(__name__)

DEFAULT_DIAL_TIMEOUT_SECONDS = 30.0
DEFAULT_CLOSE_TIMEOUT_SECONDS = 5.0
MAX_MESSAGE_BYTES = 1024 * 1024

ConnectionFactory = Callable[..., Any]


def build_connect_url(base_url: str, token: str) -> str:
    """Append ``token`` to the query string of ``base_url``."""
    parts = urlsplit(base_url)
    if parts.scheme not in {"ws", "wss"}:
        raise ValueError(f"Unsupported websocket URL scheme: {base_url}")
    query = urlencode({"token": token})
    if parts.query:
        query = f"{parts.query}&{query}"
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


class WebSocketConnection:
    """One open websocket owned by a session."""

    def __init__(self, websocket: Any, *, close_timeout: float = DEFAULT_CLOSE_TIMEOUT_SECONDS) -> None:
        self.websocket = websocket
        self.close_timeout = close_timeout
        self._closed = False

    async def send_structured(self, message: Mapping[str, Any]) -> None:
        try:
            payload = orjson.dumps(dict(message)).decode()
            await self.websocket.send(payload)
        except (WebSocketException, OSError, TypeError) as exc:
            raise SendFailed(describe_error(exc)) from exc

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await asyncio.wait_for(self.websocket.close(), timeout=self.close_timeout)
        except (asyncio.TimeoutError, WebSocketException, OSError):
            logger.warning("Error closing WebSocket")


class WebSocketTransport:
    """Dials ``{url}?token=...`` through the session's routing path."""

    def __init__(
        self,
        url: str,
        *,
        dial_timeout: float = DEFAULT_DIAL_TIMEOUT_SECONDS,
        connection_factory: Optional[ConnectionFactory] = None,
    ) -> None:
        self.url = url
        self.dial_timeout = dial_timeout
        self.connection_factory = connection_factory or websockets.connect

    async def dial(self, token: str, path: RoutingPath) -> WebSocketConnection:
        try:
            connect_url = build_connect_url(self.url, token)
        except ValueError as exc:
            raise DialFailed(str(exc)) from exc

        try:
            websocket = await asyncio.wait_for(
                self.connection_factory(
                    connect_url,
                    proxy=path.url,
                    open_timeout=self.dial_timeout,
                    ping_interval=None,
                    close_timeout=DEFAULT_CLOSE_TIMEOUT_SECONDS,
                    max_size=MAX_MESSAGE_BYTES,
                ),
                timeout=self.dial_timeout,
            )
        except asyncio.TimeoutError as exc:
            raise DialFailed(f"websocket dial via {path.display} timed out") from exc
        except (WebSocketException, OSError, ValueError) as exc:
            raise DialFailed(f"websocket dial via {path.display} failed: {describe_error(exc)}") from exc

        logger.debug("WebSocket connection established via %s", path.display)
        return WebSocketConnection(websocket)


__all__ = ["WebSocketConnection", "WebSocketTransport", "build_connect_url"]
