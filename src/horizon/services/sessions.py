"""Session derivation from raw interactions.

Interactions sharing a session_id are grouped, ordered by timestamp and
turned into one Session each. Sessions are never stored; they are rebuilt
from the interaction rows on every request.
"""

from collections import deque
from datetime import datetime

from ..config import DEFAULT_DURATION_MINUTES
from ..logging_config import get_logger
from ..types import Interaction, Session
from ..utils import minutes_between, parse_timestamp, round_half_up

logger = get_logger(__name__, namespace='sessions')

# Tie-break for events sharing a timestamp
_EVENT_ORDER = {'prompt-start': 0, 'response-end': 1, 'session-end': 2}


def _sort_key(item: tuple[datetime, Interaction]):
    dt, event = item
    return (
        dt,
        _EVENT_ORDER.get(event['event_type'], len(_EVENT_ORDER)),
        event['project'],
        event['machine'],
        event['agent'],
        event['timestamp'],
    )


def _order_events(events: list[Interaction]) -> list[tuple[datetime, Interaction]]:
    """Sort events chronologically and drop exact duplicates.

    Two events are duplicates when they share timestamp and event_type,
    the same key the interaction store treats as unique.
    """
    ordered = sorted(((parse_timestamp(e['timestamp']), e) for e in events), key=_sort_key)

    result = []
    seen = set()
    for dt, event in ordered:
        key = (dt, event['event_type'])
        if key in seen:
            continue
        seen.add(key)
        result.append((dt, event))
    return result


def calculate_sessions(interactions: list[Interaction]) -> list[Session]:
    """Derive sessions from a list of interactions.

    Input order does not matter: each session's events are re-sorted by
    timestamp before anything is derived from them.

    Args:
        interactions: Interaction rows, possibly spanning many sessions

    Returns:
        Sessions sorted by start time, most recent first
    """
    if not interactions:
        return []

    grouped: dict[str, list[Interaction]] = {}
    for interaction in interactions:
        grouped.setdefault(interaction['session_id'], []).append(interaction)

    sessions = [derive_session(session_id, events) for session_id, events in grouped.items()]

    sessions.sort(
        key=lambda s: (parse_timestamp(s['start']), s['session_id']),
        reverse=True,
    )

    logger.debug(f"Derived {len(sessions)} sessions from {len(interactions)} interactions")
    return sessions


def derive_session(session_id: str, events: list[Interaction]) -> Session:
    """Derive a single session from its events.

    The session is considered active (end is None) when it has no
    session-end event and its last prompt-start has no response-end after
    it. The span of an active session runs to its last known event.

    Raises:
        ValueError: If events is empty
    """
    if not events:
        raise ValueError("Cannot derive session from empty events")

    ordered = _order_events(events)

    first_dt, first_event = ordered[0]
    last_dt, last_event = ordered[-1]

    has_session_end = any(e['event_type'] == 'session-end' for _, e in ordered)

    last_prompt_dt = None
    for dt, event in reversed(ordered):
        if event['event_type'] == 'prompt-start':
            last_prompt_dt = dt
            break

    if last_prompt_dt is None:
        has_matching_response = True
    else:
        has_matching_response = any(
            e['event_type'] == 'response-end' and dt > last_prompt_dt
            for dt, e in ordered
        )

    is_active = not has_session_end and not has_matching_response

    span_minutes = round_half_up(minutes_between(first_dt, last_dt))

    interaction_count = sum(1 for _, e in ordered if e['event_type'] == 'prompt-start')

    return {
        'session_id': session_id,
        'project': first_event['project'],
        'start': first_event['timestamp'],
        'end': None if is_active else last_event['timestamp'],
        'span_minutes': span_minutes,
        'active_minutes': _active_minutes(ordered),
        'machine': first_event['machine'],
        'agent': first_event['agent'],
        'interaction_count': interaction_count,
        'explicit_end': has_session_end,
    }


def calculate_active_time(events: list[Interaction]) -> float:
    """Calculate active minutes from paired prompt-start and response-end events.

    Events are processed in the order given; derive_session passes them
    sorted by timestamp. Pairing is FIFO: each response-end closes the
    oldest prompt-start still waiting for a response.
    - A response-end with nothing to pair is ignored
    - A response-end stamped before its prompt (clock skew) counts as zero
    - Each prompt-start left unpaired counts DEFAULT_DURATION_MINUTES
    - session-end events do not affect active time

    Args:
        events: Events of one session

    Returns:
        Active minutes rounded to one decimal place
    """
    return _active_minutes([(parse_timestamp(e['timestamp']), e) for e in events])


def _active_minutes(ordered: list[tuple[datetime, Interaction]]) -> float:
    total_minutes = 0.0
    pending: deque[datetime] = deque()

    for dt, event in ordered:
        if event['event_type'] == 'prompt-start':
            pending.append(dt)
        elif event['event_type'] == 'response-end':
            if not pending:
                continue
            prompt_dt = pending.popleft()
            total_minutes += max(0.0, minutes_between(prompt_dt, dt))

    total_minutes += len(pending) * DEFAULT_DURATION_MINUTES

    return round_half_up(total_minutes, 1)
