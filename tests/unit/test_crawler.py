"""Tests for detail resolution and the crawl controller."""

import threading
from unittest.mock import Mock

import pytest

from gamestats.config.settings import Settings
from gamestats.core.errors import NotFoundError, TransportError
from gamestats.core.models import EnrichmentBundle, GameRecord
from gamestats.igdb.client import IGDBClient
from gamestats.scrape.crawler import USER_NOT_FOUND, Crawler
from gamestats.scrape.details import DetailResolver
from gamestats.scrape.fetcher import Fetcher

SITE = "https://www.backloggd.com"
GAME_IDS = ["101", "102", "103", "201", "202", "203"]


def games_page(user: str, page: int) -> str:
    return f"{SITE}/u/{user}/games?page={page}"


@pytest.fixture
def pages(load_fixture):
    """Two collection pages for carol, with detail and log pages for every game."""
    detail = load_fixture("detail_page.html")
    log = load_fixture("log_page.html")
    pages = {
        games_page("carol", 1): load_fixture("crawl_page_1.html"),
        games_page("carol", 2): load_fixture("crawl_page_2.html"),
        f"{SITE}/u/carol": load_fixture("profile_page.html"),
    }
    for game_id in GAME_IDS:
        pages[f"{SITE}/games/game-{game_id}/"] = detail
        pages[f"{SITE}/u/carol/logs/game-{game_id}/"] = log
    return pages


@pytest.fixture
def build(settings, make_session, no_sleep):
    """Build a crawler over fake pages; returns (crawler, session)."""

    def _build(pages, igdb=None):
        session = make_session(pages)
        fetcher = Fetcher(settings, session=session, sleep=no_sleep)
        crawler = Crawler(fetcher, DetailResolver(fetcher, igdb), sleep=Mock())
        return crawler, session

    return _build


class TestDetailResolver:
    """Tests for DetailResolver.resolve()."""

    @pytest.fixture
    def game(self):
        return GameRecord(
            id="101",
            name="Game 101",
            image_url="https://images.igdb.com/co101.jpg",
            source_url=f"{SITE}/games/game-101/",
            rating=7,
            status="completed",
        )

    def test_fills_detail_and_log_fields(self, pages, settings, make_session, no_sleep, game):
        fetcher = Fetcher(settings, session=make_session(pages), sleep=no_sleep)
        resolved = DetailResolver(fetcher).resolve(game, "carol")

        assert resolved.developer == "Capcom, Capcom Development Division 1"
        assert resolved.release_date == "24/03/2023"
        assert resolved.platforms == ["PlayStation 5", "Xbox Series X|S", "Windows PC"]
        assert resolved.genres == ["Shooter", "Adventure"]
        assert resolved.is_remake == "yes"
        assert resolved.is_remaster == "no"
        assert resolved.status == "Completed"
        assert resolved.mastered == "yes"
        assert resolved.log_page == f"{SITE}/u/carol/logs/game-101/"
        assert resolved.igdb_page == "https://www.igdb.com/games/game-101"
        assert resolved.enrichment is None

    def test_input_record_untouched(self, pages, settings, make_session, no_sleep, game):
        fetcher = Fetcher(settings, session=make_session(pages), sleep=no_sleep)
        DetailResolver(fetcher).resolve(game, "carol")
        assert game.developer is None
        assert game.status == "completed"

    def test_detail_failure_keeps_base_record(self, settings, make_session, no_sleep, game):
        fetcher = Fetcher(settings, session=make_session({}), sleep=no_sleep)
        resolved = DetailResolver(fetcher).resolve(game, "carol")
        assert resolved == game

    def test_log_failure_keeps_list_status(self, pages, settings, make_session, no_sleep, game):
        del pages[f"{SITE}/u/carol/logs/game-101/"]
        fetcher = Fetcher(settings, session=make_session(pages), sleep=no_sleep)
        resolved = DetailResolver(fetcher).resolve(game, "carol")

        assert resolved.developer == "Capcom, Capcom Development Division 1"
        assert resolved.status == "completed"
        assert resolved.mastered == "no"

    def test_no_source_url(self, settings, make_session, no_sleep):
        fetcher = Fetcher(settings, session=make_session({}), sleep=no_sleep)
        game = GameRecord(id="1", name="Orphan", image_url="x.jpg")
        assert DetailResolver(fetcher).resolve(game, "carol") is game

    def test_malformed_igdb_payload_keeps_detail_fields(self, pages, settings, make_session, no_sleep, game, make_response):
        igdb_settings = Settings(igdb_client_id="client", igdb_access_token="token")
        igdb_session = Mock()
        igdb_session.post.return_value = make_response(200, json_data=[101])
        igdb = IGDBClient(igdb_settings, session=igdb_session, sleep=no_sleep)
        fetcher = Fetcher(settings, session=make_session(pages), sleep=no_sleep)

        resolved = DetailResolver(fetcher, igdb).resolve(game, "carol")

        assert resolved.enrichment is None
        assert resolved.developer == "Capcom, Capcom Development Division 1"
        assert resolved.release_date == "24/03/2023"
        assert resolved.status == "Completed"
        assert resolved.mastered == "yes"

    def test_enrichment_attached(self, pages, settings, make_session, no_sleep, game):
        igdb = Mock()
        igdb.enrich.return_value = EnrichmentBundle(name="Game 101", genres=["Shooter"])
        fetcher = Fetcher(settings, session=make_session(pages), sleep=no_sleep)

        resolved = DetailResolver(fetcher, igdb).resolve(game, "carol")

        igdb.enrich.assert_called_once_with("101", "Game 101")
        assert resolved.enrichment.genres == ["Shooter"]


class TestCrawl:
    """Tests for Crawler.crawl()."""

    def test_single_page(self, build, pages):
        crawler, _ = build(pages)
        result = crawler.crawl("carol")

        assert [g.id for g in result.games] == ["101", "102", "103"]
        p = result.pagination
        assert (p.current_page, p.total_pages, p.total_games) == (1, 2, 3)
        assert p.has_next is True
        assert p.has_prev is False
        assert result.error is None

    def test_full_crawl_keeps_document_order(self, build, pages):
        crawler, _ = build(pages)
        result = crawler.crawl("carol", full_crawl=True)

        assert [g.id for g in result.games] == GAME_IDS
        p = result.pagination
        assert p.total_games == 6
        assert p.current_page == 1
        assert p.total_pages == 2
        assert p.has_next is False
        assert p.has_prev is False
        assert not result.is_partial

    def test_document_order_when_later_game_finishes_first(self, build, pages, make_response):
        detail = pages[f"{SITE}/games/game-101/"]
        last_done = threading.Event()
        finished = []

        def first_game():
            # Held back until the last game on the page has been fetched
            assert last_done.wait(timeout=5)
            finished.append("101")
            return make_response(200, detail)

        def last_game():
            finished.append("103")
            last_done.set()
            return make_response(200, detail)

        pages[f"{SITE}/games/game-101/"] = first_game
        pages[f"{SITE}/games/game-103/"] = last_game
        crawler, _ = build(pages)

        result = crawler.crawl("carol")

        assert finished == ["103", "101"]
        assert [g.id for g in result.games] == ["101", "102", "103"]
        assert all(g.developer == "Capcom, Capcom Development Division 1" for g in result.games)

    def test_full_crawl_resolves_every_game(self, build, pages):
        crawler, _ = build(pages)
        result = crawler.crawl("carol", full_crawl=True)
        assert all(g.is_remake == "yes" and g.mastered == "yes" for g in result.games)

    def test_full_crawl_pauses_between_pages(self, build, pages, settings):
        crawler, _ = build(pages)
        crawler.crawl("carol", full_crawl=True)
        crawler._sleep.assert_called_once_with(settings.page_delay)

    def test_full_crawl_from_later_page(self, build, pages):
        crawler, session = build(pages)
        result = crawler.crawl("carol", start_page=2, full_crawl=True)

        assert [g.id for g in result.games] == ["201", "202", "203"]
        assert result.pagination.current_page == 2
        assert result.pagination.has_prev is True
        assert session.requested(games_page("carol", 1)) == 0

    def test_later_page_failure_is_partial(self, build, pages, make_response):
        pages[games_page("carol", 2)] = make_response(500, "boom", "Internal Server Error")
        crawler, _ = build(pages)
        result = crawler.crawl("carol", full_crawl=True)

        assert [g.id for g in result.games] == ["101", "102", "103"]
        assert result.is_partial
        assert result.error.startswith("Failed to fetch page 2 of 2")
        assert result.pagination.total_games == 3
        assert result.pagination.has_next is True

    def test_unknown_user(self, build):
        crawler, _ = build({})
        with pytest.raises(NotFoundError) as exc_info:
            crawler.crawl("nobody")
        assert exc_info.value.message == USER_NOT_FOUND

    def test_first_page_failure_propagates(self, build, make_response):
        crawler, _ = build({games_page("carol", 1): make_response(502, "bad", "Bad Gateway")})
        with pytest.raises(TransportError):
            crawler.crawl("carol", full_crawl=True)

    def test_list_requests_carry_search_referer(self, build, pages):
        crawler, session = build(pages)
        crawler.crawl("carol")
        url, headers = session.calls[0]
        assert url == games_page("carol", 1)
        assert headers["Referer"] == f"{SITE}/search/users/carol"
        assert headers["Turbolinks-Referrer"] == f"{SITE}/search/users/carol"

    def test_unexpected_resolver_error_keeps_base_record(self, build, pages):
        crawler, _ = build(pages)
        crawler.resolver = Mock()
        crawler.resolver.resolve.side_effect = RuntimeError("parser exploded")

        result = crawler.crawl("carol")

        assert [g.id for g in result.games] == ["101", "102", "103"]
        assert all(g.developer is None for g in result.games)


class TestFetchProfile:
    """Tests for Crawler.fetch_profile()."""

    def test_profile(self, build, pages):
        crawler, _ = build(pages)
        profile = crawler.fetch_profile("carol")
        assert profile.username == "carol"
        assert profile.games_count == 1228

    def test_unknown_user(self, build):
        crawler, _ = build({})
        with pytest.raises(NotFoundError) as exc_info:
            crawler.fetch_profile("nobody")
        assert exc_info.value.message == USER_NOT_FOUND
