"""End-to-end crawl through the API against recorded pages."""

from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from gamestats.api.app import create_app
from gamestats.cache import ResponseCache
from gamestats.config.settings import Settings
from gamestats.igdb.client import IGDBClient
from gamestats.scrape.crawler import Crawler
from gamestats.scrape.details import DetailResolver
from gamestats.scrape.fetcher import Fetcher

SITE = "https://www.backloggd.com"
GAME_IDS = ["101", "102", "103", "201", "202", "203"]

IGDB_GAME = {
    "id": 101,
    "name": "Game 101",
    "genres": [5, {"id": 31, "name": "Adventure"}],
    "game_modes": [{"id": 1, "name": "Single player"}],
    "involved_companies": [{"developer": True, "company": {"id": 9, "name": "Capcom"}}],
}


@pytest.fixture
def session(make_session, load_fixture):
    detail = load_fixture("detail_page.html")
    log = load_fixture("log_page.html")
    pages = {
        f"{SITE}/u/carol/games?page=1": load_fixture("crawl_page_1.html"),
        f"{SITE}/u/carol/games?page=2": load_fixture("crawl_page_2.html"),
        f"{SITE}/u/carol": load_fixture("profile_page.html"),
    }
    for game_id in GAME_IDS:
        pages[f"{SITE}/games/game-{game_id}/"] = detail
        pages[f"{SITE}/u/carol/logs/game-{game_id}/"] = log
    return make_session(pages)


@pytest.fixture
def igdb_session(make_response):
    igdb_session = Mock()
    igdb_session.post.side_effect = lambda *args, **kwargs: make_response(200, json_data=[IGDB_GAME])
    return igdb_session


@pytest.fixture
def client(session, igdb_session, no_sleep):
    settings = Settings(
        page_delay=0,
        detail_workers=3,
        igdb_client_id="client",
        igdb_access_token="token",
    )
    fetcher = Fetcher(settings, session=session, sleep=no_sleep)
    igdb = IGDBClient(settings, session=igdb_session, sleep=no_sleep)
    crawler = Crawler(fetcher, DetailResolver(fetcher, igdb), sleep=no_sleep)
    app = create_app(settings, crawler=crawler, cache=ResponseCache(settings.cache_ttl))
    return TestClient(app)


class TestFullCrawl:
    """Full collection crawl served over HTTP."""

    def test_all_pages(self, client):
        response = client.get("/user/carol/games?all=true")

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "success"
        assert data["code"] == 2

        content = data["content"]
        assert [g["id"] for g in content["games"]] == GAME_IDS
        assert content["pagination"]["totalGames"] == 6
        assert content["pagination"]["currentPage"] == 1
        assert content["pagination"]["hasNext"] is False

    def test_records_are_resolved_and_enriched(self, client):
        games = client.get("/user/carol/games?getAllPages=true").json()["content"]["games"]

        for game in games:
            assert game["developer"] == "Capcom, Capcom Development Division 1"
            assert game["releaseDate"] == "24/03/2023"
            assert game["isRemake"] == "yes"
            assert game["status"] == "Completed"
            assert game["mastered"] == "yes"
            assert game["enrichment"]["genres"] == ["Shooter", "Adventure"]
            assert game["enrichment"]["developers"] == ["Capcom"]

    def test_second_request_served_from_cache(self, client, session):
        client.get("/user/carol/games?all=true")
        calls_after_first = len(session.calls)

        client.get("/user/carol/games?all=true")
        assert len(session.calls) == calls_after_first

        client.get("/user/carol/games?all=true&refresh=true")
        assert len(session.calls) == 2 * calls_after_first

    def test_unknown_user(self, client):
        response = client.get("/u/nobody/games")
        assert response.status_code == 404
        assert response.json()["message"] == "User not found"

    def test_profile(self, client):
        response = client.get("/u/carol")
        assert response.status_code == 200
        content = response.json()["content"]
        assert content["username"] == "carol"
        assert content["gamesCount"] == 1228
        assert content["recentlyReviewed"][0]["review"] == "Worth every death."
