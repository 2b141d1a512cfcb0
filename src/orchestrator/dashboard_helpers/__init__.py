"""Helper modules for the terminal dashboard."""

from .renderer import DashboardRenderer, format_final_summary
from .time_formatter import format_clock, format_duration

__all__ = ["DashboardRenderer", "format_clock", "format_duration", "format_final_summary"]
