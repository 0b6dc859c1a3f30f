"""gamestats - Backloggd collection scraper with IGDB enrichment."""

from gamestats.version import __version__

__all__ = ["__version__"]
