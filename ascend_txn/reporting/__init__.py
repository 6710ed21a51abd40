"""Read-only reporting over stored transactions."""

from .summary import ActivitySummary, filter_by_plan, summarize_activity

__all__ = ["ActivitySummary", "filter_by_plan", "summarize_activity"]
