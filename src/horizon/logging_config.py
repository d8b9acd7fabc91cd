"""Structured logging configuration for Horizon.

This module provides:
- Namespace-based logging for filtering
- Runtime log level adjustment
"""

import logging
import os
import sys
from typing import Optional


# Log namespaces for filtering
NAMESPACES = {
    'api': 'API Routes',
    'db': 'Interaction Store',
    'sessions': 'Session Derivation',
    'stats': 'Statistics',
}

LOGGER_PREFIX = 'horizon'


def _get_log_level_from_env() -> int:
    """Get log level from environment variable."""
    env_level = os.environ.get('HORIZON_LOG_LEVEL', 'INFO').upper()
    return getattr(logging, env_level, logging.INFO)


def setup_logging(
    level: Optional[int] = None,
    log_format: Optional[str] = None,
) -> None:
    """
    Configure structured logging for the application.

    Args:
        level: Logging level (default: from HORIZON_LOG_LEVEL env var or INFO)
        log_format: Custom format string (default: timestamp - name - level - message)
    """
    log_level = level if level is not None else _get_log_level_from_env()

    if log_format is None:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear existing handlers
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(log_format))
    root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    for namespace in NAMESPACES:
        logging.getLogger(f'{LOGGER_PREFIX}.{namespace}').setLevel(log_level)


def set_log_level(level: str | int):
    """
    Set log level at runtime.

    Args:
        level: Level name ('DEBUG', 'INFO', etc.) or logging constant
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logging.getLogger().setLevel(level)

    for namespace in NAMESPACES:
        logging.getLogger(f'{LOGGER_PREFIX}.{namespace}').setLevel(level)

    for handler in logging.getLogger().handlers:
        handler.setLevel(level)


def get_logger(name: str, namespace: Optional[str] = None) -> logging.Logger:
    """
    Get a logger with the given name.

    Args:
        name: Logger name (typically __name__)
        namespace: Optional namespace (api, db, sessions, stats)

    Returns:
        Configured logger instance
    """
    if namespace and namespace in NAMESPACES:
        return logging.getLogger(f'{LOGGER_PREFIX}.{namespace}')
    return logging.getLogger(name)
