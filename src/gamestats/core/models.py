"""Core domain models - dataclasses with no I/O dependencies."""

from dataclasses import dataclass, field
from typing import Optional

# Tri-state flag values. "no" is always the default so aggregations stay total.
YES = "yes"
NO = "no"


@dataclass
class EnrichmentBundle:
    """Category names for one game from the metadata service."""

    name: Optional[str] = None
    genres: list[str] = field(default_factory=list)
    game_modes: list[str] = field(default_factory=list)
    themes: list[str] = field(default_factory=list)
    developers: list[str] = field(default_factory=list)
    series: list[str] = field(default_factory=list)
    franchises: list[str] = field(default_factory=list)
    game_engines: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)


@dataclass
class GameRecord:
    """One entry of a user's collection."""

    id: str
    name: str
    image_url: str
    source_url: Optional[str] = None
    rating: Optional[int] = None  # 0-10 half stars; None = not rated
    status: Optional[str] = None
    playtime: Optional[str] = None
    release_date: Optional[str] = None  # DD/MM/YYYY
    platforms: list[str] = field(default_factory=list)
    genres: list[str] = field(default_factory=list)
    developer: Optional[str] = None  # comma-joined, from the detail page
    mastered: str = NO
    is_remaster: str = NO
    is_remake: str = NO
    is_expansion: str = NO
    log_page: Optional[str] = None
    igdb_page: Optional[str] = None
    enrichment: Optional[EnrichmentBundle] = None


@dataclass
class DetailFields:
    """Fields recovered from a game's detail page."""

    developers: list[str] = field(default_factory=list)
    release_date: Optional[str] = None
    platforms: list[str] = field(default_factory=list)
    genres: list[str] = field(default_factory=list)
    is_remaster: str = NO
    is_remake: str = NO
    is_expansion: str = NO


@dataclass
class LogStatus:
    """Personal play state from a user's log page."""

    status: Optional[str] = None
    mastered: str = NO


@dataclass
class Pagination:
    """Pagination metadata for a collection response."""

    current_page: int
    total_pages: int
    total_games: int
    has_next: bool
    has_prev: bool


@dataclass
class CollectionPage:
    """Games from one page (or a full crawl) of a user's collection."""

    games: list[GameRecord]
    pagination: Pagination
    error: Optional[str] = None  # set when a full crawl was cut short

    @property
    def is_partial(self) -> bool:
        return self.error is not None


@dataclass
class Badge:
    """Profile badge."""

    id: str
    name: str
    description: str
    image: Optional[str] = None


@dataclass
class ProfileGame:
    """Game card shown on a profile (favorites, journal, reviews)."""

    name: str
    image_url: str
    source_url: Optional[str] = None
    played_date: Optional[str] = None
    rating: Optional[float] = None  # 0-5 stars
    most_favorite: bool = False
    review: Optional[str] = None


@dataclass
class UserProfile:
    """A user's public profile."""

    username: str
    avatar: str
    bio: str
    games_count: Optional[int] = None
    stats: dict[str, int] = field(default_factory=dict)
    badges: list[Badge] = field(default_factory=list)
    favorite_games: list[ProfileGame] = field(default_factory=list)
    recently_played: list[ProfileGame] = field(default_factory=list)
    recently_reviewed: list[ProfileGame] = field(default_factory=list)
