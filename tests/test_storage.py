"""Tests for interaction storage."""

import sqlite3
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

import pytest
from src.horizon.storage import (
    init_database,
    record_interaction,
    get_interactions,
    project_exists,
)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    with tempfile.NamedTemporaryFile(suffix='.db', delete=False) as f:
        db_path = Path(f.name)

    with patch('src.horizon.storage.DB_PATH', db_path):
        init_database()
        yield db_path

    db_path.unlink(missing_ok=True)


def make_interaction(timestamp: str, **overrides) -> dict:
    interaction = {
        'project': 'horizon',
        'timestamp': timestamp,
        'machine': 'laptop',
        'agent': 'claude-code',
        'session_id': 's1',
        'event_type': 'prompt-start',
    }
    interaction.update(overrides)
    return interaction


class TestDatabaseInit:
    """Tests for database initialization."""

    def test_creates_table(self, temp_db):
        """Test the interactions table is created."""
        with sqlite3.connect(temp_db) as conn:
            cursor = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table'"
            )
            tables = {row[0] for row in cursor.fetchall()}

        assert 'interactions' in tables

    def test_creates_indexes(self, temp_db):
        """Test the unique and query indexes are created."""
        with sqlite3.connect(temp_db) as conn:
            cursor = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='index'"
            )
            indexes = {row[0] for row in cursor.fetchall()}

        assert 'idx_interactions_unique' in indexes
        assert 'idx_interactions_project_timestamp' in indexes
        assert 'idx_interactions_session' in indexes
        assert 'idx_interactions_agent' in indexes

    def test_idempotent(self, temp_db):
        """Test initializing twice does not fail."""
        init_database()

    def test_rejects_unknown_event_type(self, temp_db):
        """Test the CHECK constraint guards event_type."""
        with pytest.raises(sqlite3.IntegrityError):
            record_interaction(make_interaction('2024-01-15T10:00:00Z', event_type='bogus'))


class TestRecordInteraction:
    """Tests for recording interactions."""

    def test_records_interaction(self, temp_db):
        """Test a new interaction is inserted."""
        assert record_interaction(make_interaction('2024-01-15T10:00:00Z')) is True

        with sqlite3.connect(temp_db) as conn:
            row = conn.execute(
                "SELECT project, timestamp, session_id, event_type, created_at FROM interactions"
            ).fetchone()

        assert row[0] == 'horizon'
        assert row[1] == '2024-01-15T10:00:00.000Z'
        assert row[2] == 's1'
        assert row[3] == 'prompt-start'
        assert row[4] is not None

    def test_duplicate_ignored(self, temp_db):
        """Test resubmitting the same event keeps one row."""
        assert record_interaction(make_interaction('2024-01-15T10:00:00Z')) is True
        assert record_interaction(make_interaction('2024-01-15T10:00:00Z')) is False

        with sqlite3.connect(temp_db) as conn:
            count = conn.execute("SELECT COUNT(*) FROM interactions").fetchone()[0]

        assert count == 1

    def test_duplicate_in_other_format_ignored(self, temp_db):
        """Test the same instant written differently is still a duplicate."""
        record_interaction(make_interaction('2024-01-15T10:00:00Z'))
        assert record_interaction(make_interaction('2024-01-15T11:00:00.000+01:00')) is False

    def test_same_time_different_event_type(self, temp_db):
        """Test different event types at one timestamp are both stored."""
        record_interaction(make_interaction('2024-01-15T10:00:00Z'))
        assert record_interaction(
            make_interaction('2024-01-15T10:00:00Z', event_type='session-end')
        ) is True


class TestGetInteractions:
    """Tests for time-window queries."""

    def test_range_is_half_open(self, temp_db):
        """Test start is inclusive and end is exclusive."""
        record_interaction(make_interaction('2024-01-15T00:00:00Z', session_id='a'))
        record_interaction(make_interaction('2024-01-16T00:00:00Z', session_id='b'))
        record_interaction(make_interaction('2024-01-14T23:59:59Z', session_id='c'))

        rows = get_interactions(
            datetime(2024, 1, 15, tzinfo=timezone.utc),
            datetime(2024, 1, 16, tzinfo=timezone.utc),
        )

        assert [r['session_id'] for r in rows] == ['a']

    def test_open_ended(self, temp_db):
        """Test no end bound returns everything after start."""
        record_interaction(make_interaction('2024-01-15T10:00:00Z', session_id='a'))
        record_interaction(make_interaction('2025-06-01T10:00:00Z', session_id='b'))

        rows = get_interactions(datetime(2024, 1, 1, tzinfo=timezone.utc))

        assert len(rows) == 2

    def test_ordered_by_timestamp(self, temp_db):
        """Test rows come back oldest first regardless of insert order."""
        record_interaction(make_interaction('2024-01-15T12:00:00Z', session_id='late'))
        record_interaction(make_interaction('2024-01-15T08:00:00Z', session_id='early'))

        rows = get_interactions(datetime(2024, 1, 15, tzinfo=timezone.utc))

        assert [r['session_id'] for r in rows] == ['early', 'late']

    def test_project_filter(self, temp_db):
        """Test filtering by project name."""
        record_interaction(make_interaction('2024-01-15T10:00:00Z', project='web'))
        record_interaction(make_interaction('2024-01-15T11:00:00Z', project='cli'))

        rows = get_interactions(datetime(2024, 1, 15, tzinfo=timezone.utc), project='cli')

        assert len(rows) == 1
        assert rows[0]['project'] == 'cli'

    def test_row_shape(self, temp_db):
        """Test rows carry all interaction fields."""
        record_interaction(make_interaction('2024-01-15T10:00:00Z'))

        row = get_interactions(datetime(2024, 1, 15, tzinfo=timezone.utc))[0]

        assert set(row) == {
            'id', 'project', 'timestamp', 'machine', 'agent',
            'session_id', 'event_type', 'created_at',
        }


class TestProjectExists:
    """Tests for project existence checks."""

    def test_unknown_project(self, temp_db):
        """Test a never-recorded project does not exist."""
        assert project_exists('missing') is False

    def test_known_project(self, temp_db):
        """Test a recorded project exists."""
        record_interaction(make_interaction('2024-01-15T10:00:00Z', project='web'))
        assert project_exists('web') is True
