"""
Centralized logging configuration.

Console output goes to stdout. While the dashboard owns the terminal only
warnings and errors are shown; in verbose mode every session transition is.
An optional file handler writes ``{log_dir}/{service_name}.log``, truncated on
each start.
"""

import logging
import sys
import threading
from pathlib import Path
from typing import Optional, Union

_config_lock = threading.Lock()
_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_NOISY_LOGGERS = ("asyncio", "aiohttp", "websockets")


def _build_console_handler(verbose: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    handler.setLevel(logging.INFO if verbose else logging.WARNING)
    return handler


def _build_file_handler(service_name: str, log_dir: Path) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_dir / f"{service_name}.log", mode="w")
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    handler.setLevel(logging.INFO)
    return handler


def _suppress_noisy_third_parties() -> None:
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_logging(
    service_name: str,
    *,
    verbose: bool = False,
    debug: bool = False,
    log_dir: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """Configure the root logger once per process; later calls replace the handlers."""
    with _config_lock:
        root_logger = logging.getLogger()
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()

        console = _build_console_handler(verbose)
        if debug:
            console.setLevel(logging.DEBUG)
        root_logger.addHandler(console)
        if log_dir is not None:
            root_logger.addHandler(_build_file_handler(service_name, Path(log_dir)))

        root_logger.setLevel(logging.DEBUG if debug else logging.INFO)
        _suppress_noisy_third_parties()

    return logging.getLogger(service_name)


__all__ = ["setup_logging"]
