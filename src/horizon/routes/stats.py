"""Statistics routes."""

from datetime import date, datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from ..config import DEFAULT_PROJECT_SESSIONS_DAYS, DEFAULT_PROJECT_STATS_DAYS
from ..logging_config import get_logger
from ..services.sessions import calculate_sessions
from ..services.statistics import calculate_project_stats, calculate_weekly_stats
from ..storage import get_interactions, project_exists
from ..utils import get_monday, utc_now

logger = get_logger(__name__, namespace='api')

router = APIRouter(prefix="/api", tags=["stats"])


def _days_ago_midnight(days: int) -> datetime:
    """UTC midnight of the day `days` days before today."""
    today = utc_now().replace(hour=0, minute=0, second=0, microsecond=0)
    return today - timedelta(days=days)


@router.get("/stats/weekly")
def get_weekly_stats(
    week_start: Optional[str] = None,
    tz_offset: int = Query(0, ge=-720, le=840),
):
    """Get weekly statistics.

    Args:
        week_start: Monday of the week as YYYY-MM-DD (defaults to the current week)
        tz_offset: Minutes east of UTC used to group activity by local day

    Returns:
        Totals, daily/project/agent/machine breakdowns and the day streak
    """
    now = utc_now()

    if week_start:
        try:
            start = datetime.combine(date.fromisoformat(week_start), datetime.min.time(), timezone.utc)
        except ValueError:
            raise HTTPException(400, "Invalid week_start. Use YYYY-MM-DD.")
    else:
        start = get_monday(now + timedelta(minutes=tz_offset))

    # Local Monday 00:00 is offset minutes away from UTC Monday 00:00
    query_start = start - timedelta(minutes=tz_offset)
    query_end = query_start + timedelta(days=7)

    interactions = get_interactions(query_start, query_end)
    logger.debug(f"Weekly stats for {start.date()} over {len(interactions)} interactions")

    return calculate_weekly_stats(interactions, start, tz_offset, now=now)


@router.get("/stats/projects")
def get_project_stats(days: int = Query(DEFAULT_PROJECT_STATS_DAYS, ge=0)):
    """Get statistics for all projects over the last `days` days.

    Returns:
        {"projects": [...]} sorted by total_hours descending
    """
    interactions = get_interactions(_days_ago_midnight(days))
    return {"projects": calculate_project_stats(interactions)}


@router.get("/projects/{name}/sessions")
def get_project_sessions(name: str, days: int = Query(DEFAULT_PROJECT_SESSIONS_DAYS, ge=0)):
    """Get the sessions of one project over the last `days` days.

    Raises:
        HTTPException: 404 if the project has never been recorded

    Returns:
        {"project": name, "sessions": [...]} most recent first
    """
    interactions = get_interactions(_days_ago_midnight(days), project=name)

    if not interactions:
        if not project_exists(name):
            raise HTTPException(404, "Project not found")
        return {"project": name, "sessions": []}

    return {"project": name, "sessions": calculate_sessions(interactions)}
