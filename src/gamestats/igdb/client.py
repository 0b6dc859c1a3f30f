"""IGDB API client for game metadata enrichment."""

import threading
import time
from typing import Any, Callable, Optional

import requests

from gamestats.config.logging import get_logger
from gamestats.config.settings import Settings
from gamestats.core.models import EnrichmentBundle
from gamestats.igdb.mapper import IdNameMapper

logger = get_logger()

# Every relation we need, with names expanded, in one query
GAME_FIELDS = (
    "name, genres.name, game_modes.name, themes.name, "
    "involved_companies.developer, involved_companies.company.name, "
    "collections.name, franchises.name, game_engines.name, keywords.name"
)

# Refresh the token this many seconds before IGDB says it expires
TOKEN_EXPIRY_MARGIN = 60


class IGDBClient:
    """
    Client for the IGDB v4 API.

    Authenticates with a pre-issued access token when one is configured,
    otherwise with the Twitch client-credentials flow. The token is cached
    and shared by all threads using this client.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
        mapper: Optional[IdNameMapper] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.settings = settings or Settings()
        self.session = session or requests.Session()
        self.mapper = mapper or IdNameMapper()
        self._sleep = sleep
        self._clock = clock

        self._token_lock = threading.Lock()
        self._token: Optional[str] = self.settings.igdb_access_token
        self._token_expiry = float("inf") if self._token else 0.0

    @property
    def is_configured(self) -> bool:
        """Check if credentials are available."""
        return self.settings.enrichment_enabled

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def _fetch_token(self) -> None:
        logger.info("Requesting IGDB OAuth token...")
        resp = self.session.post(
            self.settings.igdb_token_url,
            params={
                "client_id": self.settings.igdb_client_id,
                "client_secret": self.settings.igdb_client_secret,
                "grant_type": "client_credentials",
            },
            timeout=20,
        )
        resp.raise_for_status()
        data = resp.json()
        expires_in = int(data.get("expires_in", 3600))
        self._token = data["access_token"]
        self._token_expiry = self._clock() + max(0, expires_in - TOKEN_EXPIRY_MARGIN)

    def _ensure_token(self, force: bool = False) -> str:
        with self._token_lock:
            if force or not self._token or self._clock() >= self._token_expiry:
                self._fetch_token()
            return self._token

    def _can_refresh(self) -> bool:
        return bool(self.settings.igdb_client_secret)

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def _post_once(self, endpoint: str, body: str, token: str) -> requests.Response:
        return self.session.post(
            f"{self.settings.igdb_base_url}/{endpoint}",
            data=body.encode("utf-8"),
            headers={
                "Client-ID": self.settings.igdb_client_id or "",
                "Authorization": f"Bearer {token}",
                "Content-Type": "text/plain",
            },
            timeout=self.settings.request_timeout,
        )

    def _post(self, endpoint: str, body: str) -> list[dict[str, Any]]:
        """
        POST an apicalypse query.

        A 429 is retried once after a fixed delay; a 401 refreshes the token
        and retries once.
        """
        token = self._ensure_token()
        resp = self._post_once(endpoint, body, token)

        if resp.status_code == 429:
            logger.warning(
                f"IGDB rate limited on /{endpoint}, waiting {self.settings.igdb_retry_delay:.0f}s before retry..."
            )
            self._sleep(self.settings.igdb_retry_delay)
            resp = self._post_once(endpoint, body, token)

        if resp.status_code == 401 and self._can_refresh():
            logger.info("IGDB token rejected, refreshing and retrying once")
            token = self._ensure_token(force=True)
            resp = self._post_once(endpoint, body, token)

        resp.raise_for_status()
        data = resp.json()
        return data if isinstance(data, list) else []

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def search_game_id(self, game_name: str) -> Optional[int]:
        """Best search match for a title, or None."""
        query = game_name.replace('"', "").strip()
        if not query:
            return None
        results = self._post("games", f'search "{query}"; fields id,name; limit 1;')
        first = results[0] if results else None
        if isinstance(first, dict) and isinstance(first.get("id"), int):
            return first["id"]
        return None

    def fetch_bundle(self, igdb_id: int) -> Optional[EnrichmentBundle]:
        """All category names for one game, or None if IGDB doesn't know it."""
        results = self._post("games", f"fields {GAME_FIELDS}; where id = {int(igdb_id)};")
        if not results or not isinstance(results[0], dict):
            return None
        return self.decode_game(results[0])

    def decode_game(self, game: dict[str, Any]) -> EnrichmentBundle:
        """Convert one IGDB game object into flat name lists."""
        developer_companies = [
            ic.get("company")
            for ic in game.get("involved_companies") or []
            if isinstance(ic, dict) and ic.get("developer") and ic.get("company") is not None
        ]
        name = game.get("name")

        return EnrichmentBundle(
            name=name if isinstance(name, str) else None,
            genres=self.mapper.decode("genres", game.get("genres")),
            game_modes=self.mapper.decode("game_modes", game.get("game_modes")),
            themes=self.mapper.decode("themes", game.get("themes")),
            developers=self.mapper.decode("companies", developer_companies),
            series=self.mapper.decode("collections", game.get("collections")),
            franchises=self.mapper.decode("franchises", game.get("franchises")),
            game_engines=self.mapper.decode("game_engines", game.get("game_engines")),
            keywords=self.mapper.decode("keywords", game.get("keywords")),
        )

    def enrich(self, game_id: Optional[str] = None, game_name: Optional[str] = None) -> Optional[EnrichmentBundle]:
        """
        Look up metadata for a game.

        A numeric ID is queried directly. When there is no usable ID, or
        IGDB has nothing under it, the title is searched instead.

        Returns:
            EnrichmentBundle, or None when unconfigured, not found or failed
        """
        if not self.is_configured:
            return None

        try:
            if game_id and str(game_id).strip().isdigit():
                bundle = self.fetch_bundle(int(game_id))
                if bundle is not None:
                    return bundle
                logger.info(f"No IGDB data for ID {game_id}, falling back to title search")

            if not game_name:
                return None

            igdb_id = self.search_game_id(game_name)
            if igdb_id is None:
                logger.info(f"Game \"{game_name}\" not found on IGDB")
                return None
            return self.fetch_bundle(igdb_id)

        except (requests.exceptions.RequestException, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"IGDB lookup failed for id={game_id} name={game_name!r}: {e}")
            return None
