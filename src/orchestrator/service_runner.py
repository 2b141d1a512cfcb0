from __future__ import annotations

"""Utilities for running the async orchestrator with consistent Ctrl+C handling."""

import asyncio
import logging
from typing import Any, Callable, Coroutine, Optional, TypeVar

T = TypeVar("T")

ServiceFactory = Callable[[], Coroutine[Any, Any, T]]


def run_async_service(
    factory: ServiceFactory,
    *,
    service_name: str,
    logger_name: Optional[str] = None,
    shutdown_message: Optional[str] = None,
) -> Optional[T]:
    """Run an async service, turning a stray ``KeyboardInterrupt`` into a log line.

    Args:
        factory: Callable returning the coroutine to execute.
        service_name: Identifier used in log messages.
        logger_name: Optional logger name override.
        shutdown_message: Optional custom message when interrupted.

    Returns:
        The coroutine's result, or ``None`` when interrupted.
    """

    logger = logging.getLogger(logger_name or f"orchestrator.{service_name}")
    try:
        return asyncio.run(factory())
    except KeyboardInterrupt:
        if shutdown_message:
            logger.info(shutdown_message)
        else:
            logger.info("%s interrupted by user", service_name)
        return None
