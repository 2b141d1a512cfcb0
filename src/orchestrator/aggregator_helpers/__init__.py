"""Helper modules for session statistics aggregation."""

from .models import SessionInfo, StatsSnapshot
from .stats_calculator import StatsCalculator, StatusTotals

__all__ = ["SessionInfo", "StatsCalculator", "StatsSnapshot", "StatusTotals"]
