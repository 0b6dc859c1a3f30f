"""Crawl controller - walks a user's collection pages and assembles results."""

import time
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Callable
from urllib.parse import quote

from gamestats.config.logging import get_logger
from gamestats.core.errors import FetchError, NotFoundError
from gamestats.core.models import CollectionPage, GameRecord, Pagination, UserProfile
from gamestats.parser.list_parser import extract
from gamestats.parser.profile_parser import parse_profile
from gamestats.scrape.details import DetailResolver
from gamestats.scrape.fetcher import Fetcher

logger = get_logger()

USER_NOT_FOUND = "User not found"


class Crawler:
    """
    Two-stage pipeline over a user's collection.

    Pages are fetched one after another with a short pause in between.
    Within a page, detail resolution fans out over a bounded thread pool
    and is joined back in document order before the next page starts.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        resolver: DetailResolver,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.fetcher = fetcher
        self.resolver = resolver
        self.settings = fetcher.settings
        self._sleep = sleep

    def _user_headers(self, username: str) -> dict[str, str]:
        """Referer headers matching navigation from the user search page."""
        referer = f"{self.settings.base_url}/search/users/{quote(username)}"
        return {"Turbolinks-Referrer": referer, "Referer": referer}

    def games_url(self, username: str, page: int) -> str:
        return f"{self.settings.base_url}/u/{quote(username)}/games?page={page}"

    def profile_url(self, username: str) -> str:
        return f"{self.settings.base_url}/u/{quote(username)}"

    def fetch_profile(self, username: str) -> UserProfile:
        """
        Fetch and parse a user's profile page.

        Raises:
            NotFoundError: Profile doesn't exist
            FetchError: Any other fetch failure
        """
        try:
            resp = self.fetcher.fetch(self.profile_url(username), headers=self._user_headers(username))
        except NotFoundError as e:
            raise NotFoundError(USER_NOT_FOUND, url=e.url, status_code=404) from e
        profile = parse_profile(resp.text, username, self.settings.base_url)
        logger.info(f"Fetched profile for {username} ({profile.games_count} games)")
        return profile

    def _resolve_one(self, game: GameRecord, username: str) -> GameRecord:
        try:
            return self.resolver.resolve(game, username)
        except Exception:
            logger.exception(f"Unexpected error resolving details for {game.name} ({game.id})")
            return game

    def _crawl_page(self, executor: Executor, username: str, page: int) -> tuple[list[GameRecord], int]:
        resp = self.fetcher.fetch(self.games_url(username, page), headers=self._user_headers(username))
        games, total_pages = extract(resp.text, self.settings.base_url)
        logger.info(f"Extracted {len(games)} games from page {page}/{total_pages} for {username}")

        # map() yields in submission order, so results keep document order
        resolved = list(executor.map(lambda g: self._resolve_one(g, username), games))
        return resolved, total_pages

    def crawl(self, username: str, start_page: int = 1, full_crawl: bool = False) -> CollectionPage:
        """
        Crawl one page, or every page from `start_page` on.

        Args:
            username: Collection owner
            start_page: First page to fetch (1-based)
            full_crawl: Continue through the last page

        Returns:
            CollectionPage; on a mid-crawl page failure the pages gathered so
            far are returned with `error` set

        Raises:
            NotFoundError: The user doesn't exist
            FetchError: The first page couldn't be fetched
        """
        start_page = max(1, start_page)
        logger.info(f"Crawling games for {username}, page {start_page} (all pages: {full_crawl})")

        with ThreadPoolExecutor(
            max_workers=self.settings.detail_workers,
            thread_name_prefix="gamestats-detail",
        ) as executor:
            try:
                games, total_pages = self._crawl_page(executor, username, start_page)
            except NotFoundError as e:
                raise NotFoundError(USER_NOT_FOUND, url=e.url, status_code=404) from e

            if not full_crawl:
                return CollectionPage(
                    games=games,
                    pagination=Pagination(
                        current_page=start_page,
                        total_pages=total_pages,
                        total_games=len(games),
                        has_next=start_page < total_pages,
                        has_prev=start_page > 1,
                    ),
                )

            all_games = list(games)
            last_page = start_page
            error = None

            for page in range(start_page + 1, total_pages + 1):
                self._sleep(self.settings.page_delay)
                try:
                    page_games, _ = self._crawl_page(executor, username, page)
                except FetchError as e:
                    logger.warning(f"Failed to fetch page {page} for {username}, stopping crawl: {e.message}")
                    error = f"Failed to fetch page {page} of {total_pages}: {e.message}"
                    break
                all_games.extend(page_games)
                last_page = page

        logger.info(f"Crawled {len(all_games)} games over pages {start_page}-{last_page} for {username}")
        return CollectionPage(
            games=all_games,
            pagination=Pagination(
                current_page=start_page,
                total_pages=total_pages,
                total_games=len(all_games),
                has_next=last_page < total_pages,
                has_prev=start_page > 1,
            ),
            error=error,
        )
