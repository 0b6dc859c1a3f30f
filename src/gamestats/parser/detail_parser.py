"""Parsers for game detail pages and per-user log pages."""

from datetime import datetime
from typing import Iterable, Optional
from urllib.parse import quote, urlparse

from bs4 import BeautifulSoup, Tag

from gamestats.config.settings import BASE_URL
from gamestats.core.models import YES, DetailFields, LogStatus
from gamestats.parser import patterns
from gamestats.parser.list_parser import make_soup

IGDB_GAME_URL = "https://www.igdb.com/games/{slug}"


def normalize_release_date(text: Optional[str]) -> Optional[str]:
    """
    Convert a human date into DD/MM/YYYY.

    "Oct 13, 2023" -> "13/10/2023". Returns None when the text can't be
    parsed; callers must leave the date absent rather than defaulting it.
    """
    text = " ".join((text or "").split())
    if not text:
        return None
    for fmt in patterns.RELEASE_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).strftime("%d/%m/%Y")
        except ValueError:
            continue
    return None


def _unique_texts(elements: Iterable[Tag]) -> list[str]:
    """Stripped, non-empty element texts in document order without duplicates."""
    out: list[str] = []
    for el in elements:
        text = el.get_text(strip=True)
        if text and text not in out:
            out.append(text)
    return out


def _developers(soup: BeautifulSoup) -> list[str]:
    developers = _unique_texts(soup.select(patterns.DEVELOPER_LINKS))
    if not developers:
        developers = _unique_texts(soup.select(patterns.DEVELOPER_LINKS_FALLBACK))
    return developers


def _release_date(soup: BeautifulSoup) -> Optional[str]:
    for el in soup.select(patterns.RELEASE_DATE):
        date = normalize_release_date(el.get_text(strip=True))
        if date:
            return date

    for filler in soup.select(patterns.RELEASE_FILLER):
        if filler.get_text(strip=True) != patterns.RELEASE_FILLER_TEXT:
            continue
        link = filler.find_next_sibling("a")
        if link is None:
            continue
        date = normalize_release_date(link.get_text(strip=True))
        if date:
            return date

    return None


def classify_parent_category(text: Optional[str]) -> Optional[str]:
    """
    Return the DetailFields flag named by a parent-category phrase.

    Matching is substring based and the first phrase wins, so a game is at
    most one of remaster/remake/expansion.
    """
    lowered = (text or "").lower()
    for phrase, flag in patterns.PARENT_CATEGORY_PHRASES:
        if phrase in lowered:
            return flag
    return None


def parse_detail_page(html: str) -> DetailFields:
    """Extract developer, release, tag and derivation info from a detail page."""
    soup = make_soup(html)

    details = DetailFields(
        developers=_developers(soup),
        release_date=_release_date(soup),
        platforms=_unique_texts(soup.select(patterns.PLATFORM_LINKS)),
        genres=_unique_texts(soup.select(patterns.GENRE_LINKS)),
    )

    parent = soup.select_one(patterns.PARENT_CATEGORY)
    if parent is not None:
        flag = classify_parent_category(parent.get_text(" ", strip=True))
        if flag:
            setattr(details, flag, YES)

    return details


def parse_log_page(html: str) -> LogStatus:
    """Extract play status and the mastered marker from a log page."""
    soup = make_soup(html)
    result = LogStatus()

    status_el = soup.select_one(patterns.LOG_STATUS)
    if status_el is not None:
        status = patterns.LOG_STATUS_NOISE.sub("", status_el.get_text(strip=True)).strip()
        result.status = status or None

    if patterns.MASTERED_MARKER in soup.get_text():
        result.mastered = YES

    return result


def game_slug(game_url: Optional[str]) -> Optional[str]:
    """
    Last path segment of a game URL.

    "https://www.backloggd.com/games/silent-hill-f-2025/" -> "silent-hill-f-2025"
    """
    if not game_url:
        return None
    segments = [s for s in urlparse(game_url).path.split("/") if s]
    return segments[-1] if segments else None


def log_page_url(username: str, game_url: str, base_url: str = BASE_URL) -> Optional[str]:
    """Per-user log page for a game."""
    slug = game_slug(game_url)
    if not slug:
        return None
    return f"{base_url}/u/{quote(username)}/logs/{slug}/"


def igdb_page_url(game_url: str) -> Optional[str]:
    """IGDB page sharing the site's slug."""
    slug = game_slug(game_url)
    if not slug:
        return None
    return IGDB_GAME_URL.format(slug=slug)


def name_from_slug(game_url: Optional[str]) -> Optional[str]:
    """Readable title guess from a slug: "silent-hill-f-2025" -> "Silent Hill F 2025"."""
    slug = game_slug(game_url)
    if not slug:
        return None
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("-") if word)
