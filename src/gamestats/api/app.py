"""FastAPI application factory."""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gamestats.api import dependencies
from gamestats.api.routes import users
from gamestats.api.schemas import StatusResponse
from gamestats.cache.response_cache import ResponseCache
from gamestats.config.logging import get_logger
from gamestats.config.settings import Settings
from gamestats.igdb.client import IGDBClient
from gamestats.scrape.crawler import Crawler
from gamestats.scrape.details import DetailResolver
from gamestats.scrape.fetcher import Fetcher
from gamestats.version import __version__

logger = get_logger()


def build_crawler(settings: Settings) -> Crawler:
    """Wire fetcher, IGDB client and detail resolver into a crawler."""
    fetcher = Fetcher(settings)
    igdb = IGDBClient(settings) if settings.enrichment_enabled else None
    if igdb is None:
        logger.info("IGDB enrichment disabled (no credentials configured)")
    return Crawler(fetcher, DetailResolver(fetcher, igdb))


def create_app(
    settings: Optional[Settings] = None,
    crawler: Optional[Crawler] = None,
    cache: Optional[ResponseCache] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Runtime settings; read from the environment when omitted
        crawler: Crawler to serve from; built from settings when omitted
        cache: Response cache; a fresh one with the configured TTL when omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or Settings.from_env()
    crawler = crawler or build_crawler(settings)
    cache = cache if cache is not None else ResponseCache(settings.cache_ttl)

    app = FastAPI(
        title="GameStats API",
        description="Backloggd collection scraper with IGDB enrichment",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.dependency_overrides[dependencies.get_crawler] = lambda: crawler
    app.dependency_overrides[dependencies.get_cache] = lambda: cache
    app.dependency_overrides[dependencies.get_settings] = lambda: settings

    app.include_router(users.router, prefix="/user")
    app.include_router(users.router, prefix="/u", include_in_schema=False)

    app.state.settings = settings
    app.state.crawler = crawler
    app.state.cache = cache

    @app.get("/api/status", response_model=StatusResponse, tags=["status"])
    def get_status() -> StatusResponse:
        """Get server status."""
        return StatusResponse(
            status="ok",
            version=__version__,
            cache_entries=len(cache),
            enrichment_enabled=settings.enrichment_enabled,
        )

    return app
