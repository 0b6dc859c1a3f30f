"""Configuration and settings management."""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

# Source site
BASE_URL = "https://www.backloggd.com"

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36"
)

# IGDB endpoints
IGDB_BASE_URL = "https://api.igdb.com/v4"
IGDB_TOKEN_URL = "https://id.twitch.tv/oauth2/token"


def default_headers(base_url: str = BASE_URL) -> dict[str, str]:
    """Browser-like headers sent with every page request."""
    return {
        "User-Agent": USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.8",
        "Referer": f"{base_url}/",
        "Upgrade-Insecure-Requests": "1",
    }


def _env_number(name: str, default, cast, problems: list[str]):
    """Numeric variable; a malformed value is recorded in `problems` and the default kept."""
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return cast(value.strip())
    except ValueError:
        problems.append(f"{name} must be a number, got {value!r}; using {default}")
        return default


def _env_float(name: str, default: float, problems: list[str]) -> float:
    return _env_number(name, default, float, problems)


def _env_int(name: str, default: int, problems: list[str]) -> int:
    return _env_number(name, default, int, problems)


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    """Application settings."""

    # Source site
    base_url: str = BASE_URL
    headers: dict[str, str] = field(default_factory=default_headers)
    request_timeout: float = 30.0

    # Rate-limit backoff (seconds)
    retry_delay: float = 10.0
    retry_delay_escalated: float = 20.0
    max_retries: int = 999999

    # Crawl pacing
    page_delay: float = 0.1
    detail_workers: int = 12

    # Response cache TTL (seconds), mirrored in Cache-Control
    cache_ttl: int = 3600

    # IGDB enrichment
    enrich: bool = True
    igdb_client_id: Optional[str] = None
    igdb_client_secret: Optional[str] = None
    igdb_access_token: Optional[str] = None
    igdb_base_url: str = IGDB_BASE_URL
    igdb_token_url: str = IGDB_TOKEN_URL
    igdb_retry_delay: float = 3.0

    # Malformed environment values replaced by defaults in from_env()
    env_errors: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Strip trailing slash so URLs can be joined with f-strings."""
        self.base_url = self.base_url.rstrip("/")

    @property
    def enrichment_enabled(self) -> bool:
        """Enrichment needs a client ID plus either a token or a secret."""
        if not self.enrich or not self.igdb_client_id:
            return False
        return bool(self.igdb_access_token or self.igdb_client_secret)

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Create settings from environment variables.

        A .env file in the working directory is loaded first; variables
        already present in the environment take precedence.
        """
        load_dotenv()

        problems: list[str] = []
        base_url = os.environ.get("GAMESTATS_BASE_URL", BASE_URL)
        return cls(
            base_url=base_url,
            headers=default_headers(base_url.rstrip("/")),
            request_timeout=_env_float("GAMESTATS_TIMEOUT", 30.0, problems),
            retry_delay=_env_float("GAMESTATS_RETRY_DELAY", 10.0, problems),
            retry_delay_escalated=_env_float("GAMESTATS_RETRY_DELAY_ESCALATED", 20.0, problems),
            page_delay=_env_float("GAMESTATS_PAGE_DELAY", 0.1, problems),
            detail_workers=_env_int("GAMESTATS_DETAIL_WORKERS", 12, problems),
            cache_ttl=_env_int("GAMESTATS_CACHE_TTL", 3600, problems),
            enrich=_env_bool("GAMESTATS_ENRICH", True),
            igdb_client_id=os.environ.get("IGDB_CLIENT_ID") or None,
            igdb_client_secret=os.environ.get("IGDB_CLIENT_SECRET") or None,
            igdb_access_token=os.environ.get("IGDB_ACCESS_TOKEN") or None,
            env_errors=problems,
        )

    def validate(self) -> list[str]:
        """
        Validate settings.

        Returns:
            List of error messages (empty if valid)
        """
        errors = list(self.env_errors)

        if not self.base_url.startswith(("http://", "https://")):
            errors.append(f"Base URL must be http(s): {self.base_url}")

        if self.retry_delay <= 0 or self.retry_delay_escalated < self.retry_delay:
            errors.append("Escalated retry delay must be >= baseline delay > 0")

        if self.detail_workers < 1:
            errors.append("At least one detail worker is required")

        if self.cache_ttl < 0:
            errors.append("Cache TTL cannot be negative")

        if self.enrich and self.igdb_client_id and not (
            self.igdb_access_token or self.igdb_client_secret
        ):
            errors.append("IGDB_CLIENT_ID is set but neither IGDB_CLIENT_SECRET nor IGDB_ACCESS_TOKEN")

        return errors
