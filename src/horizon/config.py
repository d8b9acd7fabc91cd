"""Configuration module for Horizon.

Centralizes all configuration constants and environment variables
so the services, storage and routes share one set of defaults.
"""

import os
from pathlib import Path

# ============================================================================
# Path Configuration
# ============================================================================

# SQLite database holding raw interactions
DB_PATH = Path(os.getenv(
    "HORIZON_DB_PATH",
    str(Path.home() / ".horizon" / "horizon.db")
))


# ============================================================================
# Interaction Configuration
# ============================================================================

# Event types an agent hook may report
VALID_EVENT_TYPES = ("prompt-start", "response-end", "session-end")


# ============================================================================
# Session Derivation
# ============================================================================

# Minutes credited to a prompt-start that never got a response-end
# (crash, lost network, abandoned prompt)
DEFAULT_DURATION_MINUTES = 5


# ============================================================================
# Statistics Configuration
# ============================================================================

# Upper bound on how far back the streak walk goes
STREAK_MAX_DAYS = 365

# Look-back windows for the project endpoints (days)
DEFAULT_PROJECT_STATS_DAYS = 30
DEFAULT_PROJECT_SESSIONS_DAYS = 7


# ============================================================================
# Server Configuration
# ============================================================================

DEFAULT_HOST = os.getenv("HORIZON_HOST", "127.0.0.1")
DEFAULT_PORT = int(os.getenv("HORIZON_PORT", "8787"))

# Allowed origin for the dashboard
CORS_ORIGIN = os.getenv("HORIZON_CORS_ORIGIN", "*")
