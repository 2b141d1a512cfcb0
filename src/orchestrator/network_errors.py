"""
Network error detection and classification.

Canonical place to decide whether a collaborator failure is a network-level
problem (worth a retry through another attempt) or something else.
"""

import asyncio
import socket

import aiohttp
from websockets.exceptions import WebSocketException

NETWORK_ERROR_TYPES = (
    aiohttp.ClientConnectorError,
    aiohttp.ClientProxyConnectionError,
    aiohttp.ClientHttpProxyError,
    aiohttp.ServerTimeoutError,
    aiohttp.ServerDisconnectedError,
    WebSocketException,
    asyncio.TimeoutError,
    socket.gaierror,
    OSError,
)


def is_network_unreachable_error(exception: BaseException) -> bool:
    """
    Determine if an exception represents a network connectivity failure.

    Args:
        exception: Exception to check

    Returns:
        True if this is a network-level error that indicates connectivity issues
    """
    if isinstance(exception, NETWORK_ERROR_TYPES):
        return True

    os_error = getattr(exception, "os_error", None)
    return isinstance(os_error, OSError)


def describe_error(exception: BaseException) -> str:
    """Short ``Type: message`` text for status displays."""
    message = str(exception)
    name = type(exception).__name__
    return f"{name}: {message}" if message else name


__all__ = ["NETWORK_ERROR_TYPES", "describe_error", "is_network_unreachable_error"]
