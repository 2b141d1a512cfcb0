"""Routing path (proxy) loading and selection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union
from urllib.parse import quote

from ..config import ConfigurationError
from ..errors import RoutingPathExhausted
from ..jitter import JitterSource

logger = logging.getLogger(__name__)

_PROXY_FORMAT = "host:port or host:port:user:pass"


@dataclass(frozen=True)
class RoutingPath:
    """One outbound HTTP proxy."""

    host: str
    port: int
    username: str = ""
    password: str = ""

    @property
    def url(self) -> str:
        if self.username:
            credentials = f"{quote(self.username, safe='')}:{quote(self.password, safe='')}@"
        else:
            credentials = ""
        return f"http://{credentials}{self.host}:{self.port}"

    @property
    def address_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def display(self) -> str:
        """Address without credentials, safe for logs."""
        return f"{self.host}:{self.port}"


def parse_routing_line(line: str) -> RoutingPath:
    """
    Parse one line of a proxy list.

    Raises:
        ConfigurationError: If the line is neither ``host:port`` nor ``host:port:user:pass``
    """
    parts = line.strip().split(":")
    if len(parts) not in (2, 4):
        raise ConfigurationError.invalid_format("proxy", line, _PROXY_FORMAT)
    host, raw_port = parts[0].strip(), parts[1].strip()
    if not host:
        raise ConfigurationError.invalid_format("proxy", line, _PROXY_FORMAT)
    try:
        port = int(raw_port)
    except ValueError as exc:
        raise ConfigurationError.invalid_format("proxy port", raw_port, "an integer") from exc
    if not 0 < port < 65536:
        raise ConfigurationError.invalid_value("proxy port", port, "Must be between 1 and 65535")
    if len(parts) == 4:
        return RoutingPath(host=host, port=port, username=parts[2], password=parts[3])
    return RoutingPath(host=host, port=port)


def parse_routing_lines(lines: Iterable[str]) -> Tuple[List[RoutingPath], int]:
    """Parse every usable line, returning the paths and the count of skipped malformed lines."""
    paths: List[RoutingPath] = []
    skipped = 0
    for line_number, raw_line in enumerate(lines, start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            paths.append(parse_routing_line(line))
        except ConfigurationError as exc:
            skipped += 1
            logger.warning("Invalid proxy format on line %d: %s", line_number, exc)
    return paths, skipped


class RoutingPathPool:
    """Immutable list of routing paths with random selection."""

    def __init__(self, paths: Sequence[RoutingPath], jitter: Optional[JitterSource] = None) -> None:
        self._paths: Tuple[RoutingPath, ...] = tuple(paths)
        self._jitter = jitter or JitterSource()

    @classmethod
    def from_file(cls, path: Union[str, Path], jitter: Optional[JitterSource] = None) -> "RoutingPathPool":
        """
        Load a proxy list file.

        Raises:
            ConfigurationError: If the file cannot be read or holds no valid entry
        """
        file_path = Path(path)
        try:
            text = file_path.read_text()
        except OSError as exc:
            raise ConfigurationError.load_failed("proxy file", str(file_path)) from exc

        paths, skipped = parse_routing_lines(text.splitlines())
        if not paths:
            raise ConfigurationError.no_routing_paths(str(file_path))
        logger.info("Loaded %d proxies from file: %s (%d skipped)", len(paths), file_path, skipped)
        return cls(paths, jitter)

    def __len__(self) -> int:
        return len(self._paths)

    def select(self) -> RoutingPath:
        if not self._paths:
            raise RoutingPathExhausted()
        return self._jitter.choice(self._paths)


__all__ = ["RoutingPath", "RoutingPathPool", "parse_routing_line", "parse_routing_lines"]
