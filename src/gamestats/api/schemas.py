"""Pydantic schemas for API responses.

Fields are camelCase on the wire. Routes render with exclude_none so absent
optional fields are omitted rather than sent as null.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from gamestats.core.models import (
    Badge,
    CollectionPage,
    EnrichmentBundle,
    GameRecord,
    ProfileGame,
    UserProfile,
)


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EnrichmentResponse(CamelModel):
    """IGDB category names for a game."""

    name: Optional[str] = None
    genres: list[str] = []
    game_modes: list[str] = []
    themes: list[str] = []
    developers: list[str] = []
    series: list[str] = []
    franchises: list[str] = []
    game_engines: list[str] = []
    keywords: list[str] = []


class GameResponse(CamelModel):
    """Single collection entry."""

    id: str
    name: str
    image_url: str
    source_url: Optional[str] = None
    rating: Optional[int] = None
    status: Optional[str] = None
    playtime: Optional[str] = None
    release_date: Optional[str] = None
    platforms: list[str] = []
    genres: list[str] = []
    developer: Optional[str] = None
    mastered: str = "no"
    is_remaster: str = "no"
    is_remake: str = "no"
    is_expansion: str = "no"
    log_page: Optional[str] = None
    igdb_page: Optional[str] = None
    enrichment: Optional[EnrichmentResponse] = None


class PaginationResponse(CamelModel):
    """Pagination metadata."""

    current_page: int
    total_pages: int
    total_games: int
    has_next: bool
    has_prev: bool


class CollectionPageResponse(CamelModel):
    """Games plus pagination; `error` only on a partial full crawl."""

    games: list[GameResponse]
    pagination: PaginationResponse
    error: Optional[str] = None


class BadgeResponse(CamelModel):
    """Profile badge."""

    id: str
    name: str
    description: str
    image: Optional[str] = None


class ProfileGameResponse(CamelModel):
    """Game card on a profile."""

    name: str
    image_url: str
    source_url: Optional[str] = None
    played_date: Optional[str] = None
    rating: Optional[float] = None
    most_favorite: Optional[bool] = None
    review: Optional[str] = None


class UserProfileResponse(CamelModel):
    """Public profile."""

    username: str
    avatar: str
    bio: str
    games_count: Optional[int] = None
    stats: dict[str, int] = {}
    badges: list[BadgeResponse] = []
    favorite_games: list[ProfileGameResponse] = []
    recently_played: list[ProfileGameResponse] = []
    recently_reviewed: list[ProfileGameResponse] = []


class ProfileEnvelope(BaseModel):
    """Envelope for /user/{username}."""

    message: str
    username: str
    code: int
    content: UserProfileResponse


class GamesEnvelope(BaseModel):
    """Envelope for /user/{username}/games."""

    message: str
    username: str
    code: int
    content: CollectionPageResponse


class StatusResponse(BaseModel):
    """Server status."""

    status: str
    version: str
    cache_entries: int
    enrichment_enabled: bool


# ---------------------------------------------------------------------------
# Domain -> schema conversion
# ---------------------------------------------------------------------------


def enrichment_to_response(bundle: EnrichmentBundle) -> EnrichmentResponse:
    return EnrichmentResponse(
        name=bundle.name,
        genres=bundle.genres,
        game_modes=bundle.game_modes,
        themes=bundle.themes,
        developers=bundle.developers,
        series=bundle.series,
        franchises=bundle.franchises,
        game_engines=bundle.game_engines,
        keywords=bundle.keywords,
    )


def game_to_response(game: GameRecord) -> GameResponse:
    return GameResponse(
        id=game.id,
        name=game.name,
        image_url=game.image_url,
        source_url=game.source_url,
        rating=game.rating,
        status=game.status,
        playtime=game.playtime,
        release_date=game.release_date,
        platforms=game.platforms,
        genres=game.genres,
        developer=game.developer,
        mastered=game.mastered,
        is_remaster=game.is_remaster,
        is_remake=game.is_remake,
        is_expansion=game.is_expansion,
        log_page=game.log_page,
        igdb_page=game.igdb_page,
        enrichment=enrichment_to_response(game.enrichment) if game.enrichment else None,
    )


def collection_to_response(page: CollectionPage) -> CollectionPageResponse:
    p = page.pagination
    return CollectionPageResponse(
        games=[game_to_response(g) for g in page.games],
        pagination=PaginationResponse(
            current_page=p.current_page,
            total_pages=p.total_pages,
            total_games=p.total_games,
            has_next=p.has_next,
            has_prev=p.has_prev,
        ),
        error=page.error,
    )


def _profile_game_to_response(game: ProfileGame) -> ProfileGameResponse:
    return ProfileGameResponse(
        name=game.name,
        image_url=game.image_url,
        source_url=game.source_url,
        played_date=game.played_date,
        rating=game.rating,
        # Only flag the ultimate favourite
        most_favorite=True if game.most_favorite else None,
        review=game.review,
    )


def _badge_to_response(badge: Badge) -> BadgeResponse:
    return BadgeResponse(id=badge.id, name=badge.name, description=badge.description, image=badge.image)


def profile_to_response(profile: UserProfile) -> UserProfileResponse:
    return UserProfileResponse(
        username=profile.username,
        avatar=profile.avatar,
        bio=profile.bio,
        games_count=profile.games_count,
        stats=profile.stats,
        badges=[_badge_to_response(b) for b in profile.badges],
        favorite_games=[_profile_game_to_response(g) for g in profile.favorite_games],
        recently_played=[_profile_game_to_response(g) for g in profile.recently_played],
        recently_reviewed=[_profile_game_to_response(g) for g in profile.recently_reviewed],
    )
