"""
Dashboard module for Outcome Tracker.

Provides output scheduling and weekly progress, daily aggregation, logging
workflows, and CLI formatting for the Today dashboard.
"""

from .schedule import (
    WeeklyProgress,
    scheduled_on_date,
    compute_weekly_progress,
)
from .aggregator import (
    DashboardAggregator,
    DailyDashboard,
    DashboardOutcome,
    DashboardOutput,
    DailyStats,
)
from .formatter import DashboardFormatter

__all__ = [
    # Schedule
    'WeeklyProgress',
    'scheduled_on_date',
    'compute_weekly_progress',
    # Aggregator
    'DashboardAggregator',
    'DailyDashboard',
    'DashboardOutcome',
    'DashboardOutput',
    'DailyStats',
    # Formatter
    'DashboardFormatter',
]
