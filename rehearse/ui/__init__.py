"""Terminal rendering."""

from .report import render_analysis, render_record, format_stats

__all__ = ["render_analysis", "render_record", "format_stats"]
