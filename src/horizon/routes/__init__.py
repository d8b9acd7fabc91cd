"""Route modules for the Horizon API."""

from .interactions import router as interactions_router
from .stats import router as stats_router

__all__ = [
    'interactions_router',
    'stats_router',
]
