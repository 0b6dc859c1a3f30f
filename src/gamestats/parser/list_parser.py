"""Parser for collection list pages (/u/<user>/games)."""

from typing import Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from gamestats.config.settings import BASE_URL
from gamestats.core.models import GameRecord
from gamestats.parser import patterns


def make_soup(html: str) -> BeautifulSoup:
    """Parse an HTML document with the stdlib-backed parser."""
    return BeautifulSoup(html or "", "html.parser")


def absolute_url(href: Optional[str], base_url: str = BASE_URL) -> Optional[str]:
    """Resolve a possibly relative site link against the base URL."""
    href = (href or "").strip()
    if not href:
        return None
    if href.startswith("http"):
        return href
    return urljoin(base_url + "/", href)


def card_link(card: Tag, base_url: str = BASE_URL) -> Optional[str]:
    """Detail-page link of a card: explicit cover link, else the enclosing anchor."""
    link = card.select_one(patterns.GAME_LINK)
    if link is None:
        link = card.find_parent("a")
    if link is None:
        return None
    return absolute_url(link.get("href"), base_url)


def status_from_classes(classes: list[str]) -> str:
    """Map card state classes to a status, highest precedence first."""
    for css_class, status in patterns.STATUS_CLASSES:
        if css_class in classes:
            return status
    return patterns.DEFAULT_STATUS


def _parse_rating(value: Optional[str]) -> Optional[int]:
    """Listing rating in half stars; missing, zero or junk means not rated."""
    try:
        rating = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return rating if rating > 0 else None


def parse_game_card(card: Tag, base_url: str = BASE_URL) -> Optional[GameRecord]:
    """
    Extract one game from a list-page card.

    Returns None for malformed cards (no id, name or cover image).
    """
    game_id = (card.get(patterns.GAME_ID_ATTR) or "").strip()

    img = card.select_one(patterns.GAME_COVER_IMG)
    image_url = (img.get("src") or "").strip() if img else ""

    name_el = card.select_one(patterns.GAME_NAME)
    name = name_el.get_text(strip=True) if name_el else ""
    if not name and img is not None:
        name = (img.get("alt") or "").strip()

    if not (game_id and name and image_url):
        return None

    playtime = None
    badge = card.select_one(patterns.GAME_TIME_BADGE)
    if badge is not None:
        playtime = (badge.get("title") or "").strip() or None

    return GameRecord(
        id=game_id,
        name=name,
        image_url=image_url,
        source_url=card_link(card, base_url),
        rating=_parse_rating(card.get(patterns.GAME_RATING_ATTR)),
        status=status_from_classes(card.get("class") or []),
        playtime=playtime,
    )


def get_total_pages(soup: BeautifulSoup) -> int:
    """Highest page number linked from the document (1 when there is no pagination)."""
    max_page = 1
    for link in soup.select(patterns.PAGINATION_LINK):
        match = patterns.PAGE_NUMBER_PATTERN.search(link.get("href") or "")
        if match:
            max_page = max(max_page, int(match.group(1)))
    return max_page


def extract(html: str, base_url: str = BASE_URL) -> tuple[list[GameRecord], int]:
    """
    Extract the games and page count from a collection list page.

    Args:
        html: Raw page HTML
        base_url: Site root used to absolutize detail links

    Returns:
        Tuple of (games in document order, total page count)
    """
    soup = make_soup(html)
    games = []
    for card in soup.select(patterns.GAME_CARD):
        game = parse_game_card(card, base_url)
        if game is not None:
            games.append(game)
    return games, get_total_pages(soup)
