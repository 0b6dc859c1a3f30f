"""Per-game detail resolution: detail page, log page and IGDB enrichment."""

from dataclasses import replace
from typing import Optional

from gamestats.config.logging import get_logger
from gamestats.core.errors import FetchError
from gamestats.core.models import GameRecord, LogStatus
from gamestats.igdb.client import IGDBClient
from gamestats.parser.detail_parser import (
    igdb_page_url,
    log_page_url,
    name_from_slug,
    parse_detail_page,
    parse_log_page,
)
from gamestats.scrape.fetcher import Fetcher

logger = get_logger()


class DetailResolver:
    """
    Fills in the fields a list page doesn't carry.

    Every lookup here is best effort: a failure leaves the affected fields
    at their defaults and never fails the record.
    """

    def __init__(self, fetcher: Fetcher, igdb: Optional[IGDBClient] = None) -> None:
        self.fetcher = fetcher
        self.igdb = igdb

    @property
    def base_url(self) -> str:
        return self.fetcher.settings.base_url

    def fetch_log_status(self, log_url: str) -> LogStatus:
        """Status and mastered flag from a log page; defaults on any failure."""
        try:
            resp = self.fetcher.fetch(log_url)
        except FetchError as e:
            logger.warning(f"Failed to fetch log page {log_url}: {e.message}")
            return LogStatus()
        return parse_log_page(resp.text)

    def resolve(self, game: GameRecord, username: str) -> GameRecord:
        """
        Return a copy of `game` with detail, status and enrichment fields.

        Args:
            game: Record extracted from a list page
            username: Collection owner, used to build the log page URL

        Returns:
            New GameRecord; the input is left untouched
        """
        if not game.source_url:
            return game

        try:
            resp = self.fetcher.fetch(game.source_url)
        except FetchError as e:
            logger.warning(f"Failed to fetch game details from {game.source_url}: {e.message}")
            return game

        details = parse_detail_page(resp.text)

        log_url = log_page_url(username, game.source_url, self.base_url)
        log_status = self.fetch_log_status(log_url) if log_url else LogStatus()

        enrichment = None
        if self.igdb is not None:
            enrichment = self.igdb.enrich(game.id, game.name or name_from_slug(game.source_url))

        return replace(
            game,
            developer=", ".join(details.developers) or None,
            release_date=details.release_date,
            platforms=details.platforms,
            genres=details.genres,
            is_remaster=details.is_remaster,
            is_remake=details.is_remake,
            is_expansion=details.is_expansion,
            status=log_status.status or game.status,
            mastered=log_status.mastered,
            log_page=log_url,
            igdb_page=igdb_page_url(game.source_url),
            enrichment=enrichment,
        )
