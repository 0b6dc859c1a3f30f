"""FastAPI dependency injection utilities.

Provides shared dependencies for API routes, configured by app factory.
"""

from gamestats.cache.response_cache import ResponseCache
from gamestats.config.settings import Settings
from gamestats.scrape.crawler import Crawler


def get_crawler() -> Crawler:
    """Dependency injection for the crawler - set by app factory.

    Raises:
        NotImplementedError: If not configured (should never happen in production)
    """
    raise NotImplementedError("Crawler not configured")


def get_cache() -> ResponseCache:
    """Dependency injection for the response cache - set by app factory."""
    raise NotImplementedError("Cache not configured")


def get_settings() -> Settings:
    """Dependency injection for settings - set by app factory."""
    raise NotImplementedError("Settings not configured")
