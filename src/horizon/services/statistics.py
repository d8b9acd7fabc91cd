"""Statistics aggregation over derived sessions.

Every function here is pure: sessions and interactions come in, plain
dicts ready for JSON come out. Hours are rounded to one decimal place,
percentages to whole numbers, and a zero total yields a zero percentage.
Roll-ups sort by hours descending; equal hours keep first-seen order.
"""

from datetime import date, datetime, timedelta, timezone

from ..config import STREAK_MAX_DAYS
from ..logging_config import get_logger
from ..types import (
    AgentProjectSummary,
    AgentSummary,
    DailyBreakdown,
    Interaction,
    MachineSummary,
    ProjectStats,
    ProjectSummary,
    Session,
    WeeklyStats,
)
from ..utils import (
    local_date_str,
    minutes_to_hours,
    parse_timestamp,
    round_half_up,
    utc_now,
)
from .sessions import calculate_sessions

logger = get_logger(__name__, namespace='stats')


def calculate_weekly_stats(
    interactions: list[Interaction],
    week_start: datetime,
    timezone_offset: int = 0,
    now: datetime | None = None,
) -> WeeklyStats:
    """Calculate weekly statistics from interactions.

    Args:
        interactions: Interactions falling inside the week
        week_start: Monday 00:00:00 UTC of the week being reported
        timezone_offset: Minutes east of UTC used to group by local day
        now: Reference time for the streak (defaults to the current time)

    Returns:
        WeeklyStats dict. comparison.vs_last_week is always 0.
    """
    sessions = calculate_sessions(interactions)

    total_minutes = sum(s['active_minutes'] for s in sessions)
    total_hours = minutes_to_hours(total_minutes)

    stats: WeeklyStats = {
        'total_hours': total_hours,
        'total_sessions': len(sessions),
        'streak_days': calculate_streak(interactions, timezone_offset, now=now),
        'daily_breakdown': calculate_daily_breakdown(sessions, week_start, timezone_offset),
        'projects': calculate_project_breakdown(sessions),
        'agents': calculate_agent_breakdown(sessions, total_hours),
        'machines': calculate_machine_breakdown(sessions, total_hours),
        'agent_projects': calculate_agent_project_breakdown(sessions),
        'comparison': {
            'vs_last_week': 0,
        },
    }

    logger.debug(
        f"Weekly stats for {week_start.date().isoformat()}: "
        f"{stats['total_sessions']} sessions, {total_hours}h"
    )
    return stats


def calculate_daily_breakdown(
    sessions: list[Session],
    week_start: datetime,
    timezone_offset: int = 0,
) -> list[DailyBreakdown]:
    """Break a week's sessions down into 7 days, Monday first.

    A session counts toward the day its start falls on once shifted by
    timezone_offset minutes. Each day carries its own project breakdown.
    """
    local_dates = [
        local_date_str(parse_timestamp(s['start']), timezone_offset) for s in sessions
    ]

    if week_start.tzinfo is not None:
        week_start = week_start.astimezone(timezone.utc)

    breakdown = []
    for i in range(7):
        date_str = (week_start + timedelta(days=i)).date().isoformat()

        day_sessions = [
            s for s, local_date in zip(sessions, local_dates) if local_date == date_str
        ]
        total_minutes = sum(s['active_minutes'] for s in day_sessions)

        breakdown.append({
            'date': date_str,
            'hours': minutes_to_hours(total_minutes),
            'sessions': len(day_sessions),
            'projects': calculate_project_breakdown(day_sessions),
        })

    return breakdown


def calculate_project_breakdown(sessions: list[Session]) -> list[ProjectSummary]:
    """Group sessions by project with summed hours and session counts."""
    project_map: dict[str, dict] = {}

    for session in sessions:
        entry = project_map.setdefault(session['project'], {'hours': 0.0, 'sessions': 0})
        entry['hours'] += session['active_minutes'] / 60
        entry['sessions'] += 1

    projects = [
        {
            'name': name,
            'hours': round_half_up(data['hours'], 1),
            'sessions': data['sessions'],
        }
        for name, data in project_map.items()
    ]
    projects.sort(key=lambda p: p['hours'], reverse=True)
    return projects


def _share_breakdown(sessions: list[Session], field: str, total_hours: float) -> list[dict]:
    """Hours and percentage of total_hours per distinct value of field."""
    hours_map: dict[str, float] = {}
    for session in sessions:
        name = session[field]
        hours_map[name] = hours_map.get(name, 0.0) + session['active_minutes'] / 60

    result = [
        {
            'name': name,
            'hours': round_half_up(hours, 1),
            'percentage': round_half_up(hours / total_hours * 100) if total_hours > 0 else 0,
        }
        for name, hours in hours_map.items()
    ]
    result.sort(key=lambda r: r['hours'], reverse=True)
    return result


def calculate_agent_breakdown(sessions: list[Session], total_hours: float) -> list[AgentSummary]:
    """Hours and share of total per agent."""
    return _share_breakdown(sessions, 'agent', total_hours)


def calculate_machine_breakdown(sessions: list[Session], total_hours: float) -> list[MachineSummary]:
    """Hours and share of total per machine."""
    return _share_breakdown(sessions, 'machine', total_hours)


def calculate_agent_project_breakdown(sessions: list[Session]) -> list[AgentProjectSummary]:
    """Map each agent to the projects it has sessions in.

    Only projects the agent actually worked on are listed, sorted
    alphabetically. Agents are sorted by their total hours descending.
    """
    agent_map: dict[str, dict] = {}

    for session in sessions:
        entry = agent_map.setdefault(session['agent'], {'projects': set(), 'minutes': 0.0})
        entry['projects'].add(session['project'])
        entry['minutes'] += session['active_minutes']

    result = [
        {
            'agent': agent,
            'projects': sorted(data['projects']),
            'hours': minutes_to_hours(data['minutes']),
        }
        for agent, data in agent_map.items()
    ]
    result.sort(key=lambda a: a['hours'], reverse=True)
    return result


def calculate_streak(
    interactions: list[Interaction],
    timezone_offset: int = 0,
    now: datetime | None = None,
) -> int:
    """Count consecutive local days with at least one interaction.

    Counting goes backwards from today. Today may be missing without
    breaking the streak (it just isn't counted); any earlier gap ends it.

    Args:
        interactions: Interactions to scan for active days
        timezone_offset: Minutes east of UTC defining the local day
        now: Reference time (defaults to the current time)
    """
    if not interactions:
        return 0

    active_dates = {
        local_date_str(parse_timestamp(i['timestamp']), timezone_offset)
        for i in interactions
    }

    if now is None:
        now = utc_now()
    today = date.fromisoformat(local_date_str(now, timezone_offset))

    streak = 0
    for i in range(STREAK_MAX_DAYS):
        date_str = (today - timedelta(days=i)).isoformat()
        if date_str in active_dates:
            streak += 1
        elif i > 0:
            break

    return streak


def calculate_project_stats(interactions: list[Interaction]) -> list[ProjectStats]:
    """Per-project totals with each agent's hours inside that project.

    Returns:
        Projects sorted by total_hours descending; empty for no interactions
    """
    if not interactions:
        return []

    sessions = calculate_sessions(interactions)

    project_map: dict[str, dict] = {}
    for session in sessions:
        entry = project_map.setdefault(
            session['project'],
            {'sessions': 0, 'minutes': 0.0, 'agent_minutes': {}},
        )
        entry['sessions'] += 1
        entry['minutes'] += session['active_minutes']
        agent_minutes = entry['agent_minutes']
        agent_minutes[session['agent']] = agent_minutes.get(session['agent'], 0.0) + session['active_minutes']

    project_stats = [
        {
            'name': name,
            'total_hours': minutes_to_hours(data['minutes']),
            'total_sessions': data['sessions'],
            'agents': {
                agent: minutes_to_hours(minutes)
                for agent, minutes in data['agent_minutes'].items()
            },
        }
        for name, data in project_map.items()
    ]
    project_stats.sort(key=lambda p: p['total_hours'], reverse=True)
    return project_stats
