"""Type definitions for Horizon.

This module provides TypedDict definitions for the interaction rows read
from the store and the derived structures returned by the API.
"""

from typing import Literal, TypedDict
from typing_extensions import NotRequired


EventType = Literal["prompt-start", "response-end", "session-end"]


class Interaction(TypedDict):
    """A single lifecycle event reported by an AI coding agent."""
    project: str
    timestamp: str  # ISO 8601
    machine: str
    agent: str
    session_id: str
    event_type: EventType
    id: NotRequired[int]
    created_at: NotRequired[str]


class Session(TypedDict):
    """A coding session derived from all interactions sharing a session_id."""
    session_id: str
    project: str
    start: str
    end: str | None  # None while the session is still active
    span_minutes: int
    active_minutes: float
    machine: str
    agent: str
    interaction_count: int
    explicit_end: bool


class ProjectSummary(TypedDict):
    name: str
    hours: float
    sessions: int


class DailyBreakdown(TypedDict):
    """One day of the weekly breakdown."""
    date: str  # YYYY-MM-DD
    hours: float
    sessions: int
    projects: list[ProjectSummary]


class AgentSummary(TypedDict):
    name: str
    hours: float
    percentage: int


class MachineSummary(TypedDict):
    name: str
    hours: float
    percentage: int


class AgentProjectSummary(TypedDict):
    """Projects an agent actually worked on, with the agent's total hours."""
    agent: str
    projects: list[str]
    hours: float


class WeeklyComparison(TypedDict):
    vs_last_week: float


class WeeklyStats(TypedDict):
    """Response of GET /api/stats/weekly."""
    total_hours: float
    total_sessions: int
    streak_days: int
    daily_breakdown: list[DailyBreakdown]
    projects: list[ProjectSummary]
    agents: list[AgentSummary]
    machines: list[MachineSummary]
    agent_projects: list[AgentProjectSummary]
    comparison: WeeklyComparison


class ProjectStats(TypedDict):
    """Per-project totals with hours split by agent."""
    name: str
    total_hours: float
    total_sessions: int
    agents: dict[str, float]
