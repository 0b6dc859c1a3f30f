"""Response caching."""

from gamestats.cache.response_cache import ResponseCache, games_key, profile_key

__all__ = ["ResponseCache", "games_key", "profile_key"]
