"""User profile and collection routes."""

from typing import Any, Union

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse

from gamestats.api.dependencies import get_cache, get_crawler, get_settings
from gamestats.api.schemas import (
    GamesEnvelope,
    ProfileEnvelope,
    collection_to_response,
    profile_to_response,
)
from gamestats.cache.response_cache import ResponseCache, games_key, profile_key
from gamestats.config.logging import get_logger
from gamestats.config.settings import Settings
from gamestats.core.errors import (
    BlockedError,
    FetchError,
    NotFoundError,
    RateLimitedError,
    TransportError,
)
from gamestats.core.models import CollectionPage, UserProfile
from gamestats.scrape.crawler import Crawler

logger = get_logger()

router = APIRouter(tags=["users"])

CODE_SUCCESS = 2
CODE_ERROR = 0

MESSAGE_SUCCESS = "success"
MESSAGE_PARTIAL = "partial"

# Checked in order, so subclasses must come before FetchError
ERROR_STATUS: list[tuple[type, int]] = [
    (NotFoundError, 404),
    (RateLimitedError, 429),
    (BlockedError, 503),
    (TransportError, 502),
    (FetchError, 500),
]


def status_for(error: FetchError) -> int:
    """HTTP status for a fetch error."""
    for error_type, status_code in ERROR_STATUS:
        if isinstance(error, error_type):
            return status_code
    return 500


def error_response(error: FetchError, username: str) -> JSONResponse:
    """Error envelope with the matching status code."""
    return JSONResponse(
        status_code=status_for(error),
        content={"message": error.message, "username": username, "code": CODE_ERROR},
    )


def _set_cache_headers(response: Response, settings: Settings) -> None:
    response.headers["Cache-Control"] = f"public, max-age={settings.cache_ttl}"


@router.api_route(
    "/{username}",
    methods=["GET", "POST"],
    response_model=ProfileEnvelope,
    response_model_exclude_none=True,
)
def get_user_profile(
    username: str,
    response: Response,
    refresh: bool = Query(False, description="Bypass the cache"),
    crawler: Crawler = Depends(get_crawler),
    cache: ResponseCache = Depends(get_cache),
    settings: Settings = Depends(get_settings),
) -> Union[ProfileEnvelope, JSONResponse]:
    """Get a user's public profile."""
    key = profile_key(username)
    if refresh:
        cache.invalidate(key)

    profile: Any = cache.get(key)
    if profile is None:
        try:
            profile = crawler.fetch_profile(username)
        except FetchError as e:
            logger.warning(f"Profile request for {username} failed: {e.message}")
            return error_response(e, username)
        cache.set(key, profile)
    else:
        logger.info(f"Serving cached profile for {username}")

    _set_cache_headers(response, settings)
    return _profile_envelope(profile, username)


def _profile_envelope(profile: UserProfile, username: str) -> ProfileEnvelope:
    return ProfileEnvelope(
        message=MESSAGE_SUCCESS,
        username=username,
        code=CODE_SUCCESS,
        content=profile_to_response(profile),
    )


@router.api_route(
    "/{username}/games",
    methods=["GET", "POST"],
    response_model=GamesEnvelope,
    response_model_exclude_none=True,
)
def get_user_games(
    username: str,
    response: Response,
    page: int = Query(1, ge=1, description="Page to start from"),
    all_pages: bool = Query(False, alias="all", description="Crawl every page from `page` on"),
    get_all_pages: bool = Query(False, alias="getAllPages", description="Synonym of `all`"),
    refresh: bool = Query(False, description="Bypass the cache"),
    crawler: Crawler = Depends(get_crawler),
    cache: ResponseCache = Depends(get_cache),
    settings: Settings = Depends(get_settings),
) -> Union[GamesEnvelope, JSONResponse]:
    """Get a user's game collection, one page or all of it."""
    full_crawl = all_pages or get_all_pages
    key = games_key(username, page, full_crawl)
    if refresh:
        cache.invalidate(key)

    collection: Any = cache.get(key)
    if collection is None:
        try:
            collection = crawler.crawl(username, start_page=page, full_crawl=full_crawl)
        except FetchError as e:
            logger.warning(f"Games request for {username} failed: {e.message}")
            return error_response(e, username)
        if not collection.is_partial:
            cache.set(key, collection)
    else:
        logger.info(f"Serving cached games for {username} (page {page}, all pages: {full_crawl})")

    if not collection.is_partial:
        _set_cache_headers(response, settings)
    return _games_envelope(collection, username)


def _games_envelope(collection: CollectionPage, username: str) -> GamesEnvelope:
    return GamesEnvelope(
        message=MESSAGE_PARTIAL if collection.is_partial else MESSAGE_SUCCESS,
        username=username,
        code=CODE_SUCCESS,
        content=collection_to_response(collection),
    )
