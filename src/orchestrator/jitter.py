"""Deterministic-friendly random helpers for retry and keepalive jitter."""

from __future__ import annotations

import random as _random
from dataclasses import dataclass
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


class JitterSource:
    """Private random stream so tests can seed delays without touching global state."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self._random = _random.Random(seed)

    def uniform(self, low: float, high: float) -> float:
        return self._random.uniform(low, high)

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            raise IndexError("cannot choose from an empty sequence")
        return items[self._random.randrange(len(items))]

    def spawn(self) -> "JitterSource":
        """Derive an independent child stream, reproducible from this one."""
        return JitterSource(self._random.getrandbits(64))


@dataclass(frozen=True)
class DelayRange:
    """Inclusive range of seconds sampled uniformly for each wait."""

    low: float
    high: float

    def __post_init__(self) -> None:
        if self.low < 0:
            raise ValueError(f"delay lower bound must be non-negative (got {self.low})")
        if self.high < self.low:
            raise ValueError(f"delay upper bound {self.high} is below lower bound {self.low}")

    def sample(self, source: JitterSource) -> float:
        if self.low == self.high:
            return self.low
        return source.uniform(self.low, self.high)


__all__ = ["DelayRange", "JitterSource"]
