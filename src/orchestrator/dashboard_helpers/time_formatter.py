"""
Time and duration formatting utilities.

Converts seconds into the compact clock strings shown on the dashboard.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

_SECONDS_PER_MINUTE = 60
_SECONDS_PER_HOUR = 3600


def format_duration(seconds: float) -> str:
    """``MM:SS`` below one hour, ``HH:MM:SS`` from one hour on."""
    total = max(0, int(seconds))
    hours, remainder = divmod(total, _SECONDS_PER_HOUR)
    minutes, secs = divmod(remainder, _SECONDS_PER_MINUTE)
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def format_clock(timestamp: Optional[float]) -> str:
    if timestamp is None:
        return "--:--:--"
    return datetime.fromtimestamp(timestamp).strftime("%H:%M:%S")
