import sqlite3
from datetime import datetime

from .config import DB_PATH
from .logging_config import get_logger
from .types import Interaction
from .utils import format_timestamp, parse_timestamp

logger = get_logger(__name__, namespace='db')

_COLUMNS = ('id', 'project', 'timestamp', 'machine', 'agent', 'session_id', 'event_type', 'created_at')


def init_database():
    """Initialize the interactions database with schema."""
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(DB_PATH) as conn:
        c = conn.cursor()

        c.execute('''
            CREATE TABLE IF NOT EXISTS interactions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                project TEXT NOT NULL,
                timestamp TEXT NOT NULL,
                machine TEXT NOT NULL,
                agent TEXT NOT NULL,
                session_id TEXT NOT NULL,
                event_type TEXT NOT NULL
                    CHECK (event_type IN ('prompt-start', 'response-end', 'session-end')),
                created_at TEXT DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
            )
        ''')

        # Duplicate submissions of the same event are ignored on insert
        c.execute('''
            CREATE UNIQUE INDEX IF NOT EXISTS idx_interactions_unique
            ON interactions(session_id, timestamp, event_type)
        ''')

        c.execute('''
            CREATE INDEX IF NOT EXISTS idx_interactions_project_timestamp
            ON interactions(project, timestamp DESC)
        ''')

        c.execute('''
            CREATE INDEX IF NOT EXISTS idx_interactions_session
            ON interactions(session_id, timestamp ASC)
        ''')

        c.execute('''
            CREATE INDEX IF NOT EXISTS idx_interactions_agent
            ON interactions(agent, timestamp DESC)
        ''')

        conn.commit()


def record_interaction(interaction: Interaction) -> bool:
    """Store an interaction unless the same event was already recorded.

    The timestamp is normalized to canonical UTC so that range queries
    compare correctly as text and resubmissions hit the unique index.

    Returns:
        True if a new row was inserted, False for a duplicate
    """
    timestamp = format_timestamp(parse_timestamp(interaction['timestamp']))

    with sqlite3.connect(DB_PATH) as conn:
        c = conn.cursor()
        c.execute('''
            INSERT INTO interactions (project, timestamp, machine, agent, session_id, event_type)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT (session_id, timestamp, event_type) DO NOTHING
        ''', (
            interaction['project'],
            timestamp,
            interaction['machine'],
            interaction['agent'],
            interaction['session_id'],
            interaction['event_type'],
        ))
        inserted = c.rowcount > 0
        conn.commit()

    if inserted:
        logger.debug(f"Recorded {interaction['event_type']} for session {interaction['session_id']}")
    else:
        logger.debug(f"Duplicate {interaction['event_type']} for session {interaction['session_id']} ignored")
    return inserted


def get_interactions(
    start: datetime,
    end: datetime | None = None,
    project: str | None = None,
) -> list[Interaction]:
    """Get interactions in [start, end), oldest first.

    Args:
        start: Inclusive lower bound
        end: Exclusive upper bound (open-ended if None)
        project: Optional exact project filter
    """
    clauses = ["timestamp >= ?"]
    params: list = [format_timestamp(start)]

    if end is not None:
        clauses.append("timestamp < ?")
        params.append(format_timestamp(end))

    if project is not None:
        clauses.append("project = ?")
        params.append(project)

    query = f"""
        SELECT {', '.join(_COLUMNS)}
        FROM interactions
        WHERE {' AND '.join(clauses)}
        ORDER BY timestamp ASC
    """

    with sqlite3.connect(DB_PATH) as conn:
        c = conn.cursor()
        c.execute(query, params)
        rows = c.fetchall()

    return [dict(zip(_COLUMNS, row)) for row in rows]


def project_exists(project: str) -> bool:
    """Check whether any interaction was ever recorded for a project."""
    with sqlite3.connect(DB_PATH) as conn:
        c = conn.cursor()
        c.execute('SELECT 1 FROM interactions WHERE project = ? LIMIT 1', (project,))
        return c.fetchone() is not None
