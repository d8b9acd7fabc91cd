"""Service modules for Horizon."""

from .sessions import (
    calculate_sessions,
    derive_session,
    calculate_active_time,
)
from .statistics import (
    calculate_weekly_stats,
    calculate_daily_breakdown,
    calculate_project_breakdown,
    calculate_agent_breakdown,
    calculate_machine_breakdown,
    calculate_agent_project_breakdown,
    calculate_streak,
    calculate_project_stats,
)

__all__ = [
    'calculate_sessions',
    'derive_session',
    'calculate_active_time',
    'calculate_weekly_stats',
    'calculate_daily_breakdown',
    'calculate_project_breakdown',
    'calculate_agent_breakdown',
    'calculate_machine_breakdown',
    'calculate_agent_project_breakdown',
    'calculate_streak',
    'calculate_project_stats',
]
