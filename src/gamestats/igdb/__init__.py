"""IGDB metadata enrichment."""

from gamestats.igdb.client import IGDBClient
from gamestats.igdb.mapper import IdNameMapper

__all__ = ["IGDBClient", "IdNameMapper"]
