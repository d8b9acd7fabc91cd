"""Tests for configuration module."""

from pathlib import Path

from src.horizon.config import (
    # Path Configuration
    DB_PATH,
    # Interaction Configuration
    VALID_EVENT_TYPES,
    # Session Derivation
    DEFAULT_DURATION_MINUTES,
    # Statistics Configuration
    STREAK_MAX_DAYS,
    DEFAULT_PROJECT_STATS_DAYS,
    DEFAULT_PROJECT_SESSIONS_DAYS,
    # Server Configuration
    DEFAULT_HOST,
    DEFAULT_PORT,
    CORS_ORIGIN,
)


class TestPathConfiguration:
    """Tests for path configuration constants."""

    def test_db_path_is_path(self):
        """Test DB_PATH is a Path object."""
        assert isinstance(DB_PATH, Path)

    def test_db_path_is_sqlite(self):
        """Test DB_PATH ends with .db."""
        assert str(DB_PATH).endswith('.db')


class TestInteractionConfiguration:
    """Tests for interaction constants."""

    def test_event_types(self):
        """Test the three lifecycle events are accepted."""
        assert set(VALID_EVENT_TYPES) == {'prompt-start', 'response-end', 'session-end'}


class TestDerivationConfiguration:
    """Tests for session and statistics constants."""

    def test_default_duration(self):
        """Test unpaired prompts are credited five minutes."""
        assert DEFAULT_DURATION_MINUTES == 5

    def test_streak_bound(self):
        """Test the streak looks back at most a year."""
        assert STREAK_MAX_DAYS == 365

    def test_lookback_windows(self):
        """Test endpoint windows are positive."""
        assert DEFAULT_PROJECT_STATS_DAYS == 30
        assert DEFAULT_PROJECT_SESSIONS_DAYS == 7


class TestServerConfiguration:
    """Tests for server constants."""

    def test_port_in_range(self):
        """Test port is a valid TCP port."""
        assert 0 < DEFAULT_PORT < 65536

    def test_host_is_string(self):
        """Test host is a non-empty string."""
        assert isinstance(DEFAULT_HOST, str) and DEFAULT_HOST

    def test_cors_origin(self):
        """Test a CORS origin is configured."""
        assert CORS_ORIGIN
