"""aiohttp-backed session provider: target lookup and per-session tokens."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import aiohttp
import orjson

from ..cancellation import ShutdownSignal
from ..errors import CredentialAcquisitionFailed, RoutingPathExhausted, TargetResolutionFailed
from ..network_errors import describe_error, is_network_unreachable_error
from .interfaces import RoutingPathSource
from .routing import RoutingPath

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER_ATTEMPTS = 5
DEFAULT_RETRY_PAUSE_SECONDS = 1.0
HTTP_OK = 200
_RESPONSE_PREVIEW_CHARS = 100

_REQUEST_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OSError)


class ProviderResponseError(ValueError):
    """Raised when an endpoint answers with an unusable payload."""


class HTTPSessionProvider:
    """
    Talks to two JSON endpoints through routing paths.

    ``resolve_url`` must contain ``{name}`` and answer ``{"id": ...}``.
    ``token_url`` answers ``{"token": ...}`` or ``{"data": {"token": ...}}``.
    Each public call retries internally before giving up. When a ``shutdown``
    signal is given, a retry pause ends early and the call gives up at once.
    """

    def __init__(
        self,
        resolve_url: str,
        token_url: str,
        routing: RoutingPathSource,
        *,
        request_timeout: float = 30.0,
        attempts: int = DEFAULT_PROVIDER_ATTEMPTS,
        retry_pause: float = DEFAULT_RETRY_PAUSE_SECONDS,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[aiohttp.ClientSession] = None,
        shutdown: Optional[ShutdownSignal] = None,
    ) -> None:
        if "{name}" not in resolve_url:
            raise ValueError("resolve_url must contain a '{name}' placeholder")
        if attempts < 1:
            raise ValueError(f"attempts must be at least 1 (got {attempts})")
        self.resolve_url = resolve_url
        self.token_url = token_url
        self.routing = routing
        self.request_timeout = request_timeout
        self.attempts = attempts
        self.retry_pause = retry_pause
        self.headers = dict(headers or {})
        self._session = session
        self._owns_session = session is None
        self.shutdown = shutdown

    async def __aenter__(self) -> "HTTPSessionProvider":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.request_timeout)
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                headers=self.headers,
                connector=aiohttp.TCPConnector(limit=0, ttl_dns_cache=300),
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._session is None or not self._owns_session:
            return
        try:
            await asyncio.wait_for(self._session.close(), timeout=5.0)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError):
            logger.warning("Error closing HTTP session")
        finally:
            self._session = None

    async def resolve_target(self, name: str) -> str:
        url = self.resolve_url.format(name=quote(name, safe=""))
        last_error = ""
        for attempt in range(1, self.attempts + 1):
            logger.info("Resolving target %r, attempt %d/%d", name, attempt, self.attempts)
            try:
                path = self.routing.select()
            except RoutingPathExhausted as exc:
                raise TargetResolutionFailed(name, str(exc)) from exc

            try:
                payload = await self._get_json(url, path)
                return _extract_target_id(payload)
            except _REQUEST_ERRORS + (ProviderResponseError,) as exc:
                last_error = describe_error(exc)
                if is_network_unreachable_error(exc):
                    logger.warning("Routing path %s unreachable during target lookup: %s", path.display, last_error)
                else:
                    logger.warning("Target lookup via %s failed: %s", path.display, last_error)
            if attempt < self.attempts and await self._pause():
                raise TargetResolutionFailed(name, "shutdown requested")

        raise TargetResolutionFailed(name, f"gave up after {self.attempts} attempts: {last_error}")

    async def acquire_credential(self, path: RoutingPath) -> str:
        last_error = ""
        for attempt in range(1, self.attempts + 1):
            try:
                payload = await self._get_json(self.token_url, path)
                token = _extract_token(payload)
            except _REQUEST_ERRORS + (ProviderResponseError,) as exc:
                last_error = describe_error(exc)
                logger.debug("Token request %d/%d via %s failed: %s", attempt, self.attempts, path.display, last_error)
            else:
                logger.debug("Acquired token via %s", path.display)
                return token
            if attempt < self.attempts and await self._pause():
                raise CredentialAcquisitionFailed(f"token request abandoned on shutdown: {last_error}")

        raise CredentialAcquisitionFailed(f"failed to get token after {self.attempts} attempts: {last_error}")

    async def _pause(self) -> bool:
        """Wait between attempts; True when shutdown cut the pause short."""
        if self.shutdown is None:
            await asyncio.sleep(self.retry_pause)
            return False
        return await self.shutdown.wait_or_cancelled(self.retry_pause)

    async def _get_json(self, url: str, path: RoutingPath) -> Any:
        session = self._get_session()
        proxy_auth = aiohttp.BasicAuth(path.username, path.password) if path.username else None
        async with session.get(url, proxy=path.address_url, proxy_auth=proxy_auth) as response:
            body = await response.read()
            if response.status != HTTP_OK:
                raise ProviderResponseError(f"status {response.status} from {url}")
        try:
            return orjson.loads(body)
        except orjson.JSONDecodeError as exc:
            preview = body[:_RESPONSE_PREVIEW_CHARS].decode("utf-8", errors="replace")
            raise ProviderResponseError(f"invalid JSON from {url}: {preview!r}") from exc


def _extract_target_id(payload: Any) -> str:
    if not isinstance(payload, dict) or payload.get("id") in (None, ""):
        raise ProviderResponseError("target response has no 'id'")
    return str(payload["id"])


def _extract_token(payload: Any) -> str:
    if not isinstance(payload, dict):
        raise ProviderResponseError("token response is not an object")
    token = payload.get("token")
    if token is None and isinstance(payload.get("data"), dict):
        token = payload["data"].get("token")
    if not isinstance(token, str) or not token:
        raise ProviderResponseError("token response has no token")
    return token


__all__ = ["HTTPSessionProvider", "ProviderResponseError"]
