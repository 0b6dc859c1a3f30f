"""Parser for user profile pages (/u/<user>)."""

from typing import Optional

from bs4 import BeautifulSoup, Tag

from gamestats.config.settings import BASE_URL
from gamestats.core.models import Badge, ProfileGame, UserProfile
from gamestats.parser import patterns
from gamestats.parser.list_parser import card_link, make_soup


def calculate_rating(style: Optional[str]) -> Optional[float]:
    """Star rating (0-5) from the filled star bar's CSS width."""
    match = patterns.STAR_WIDTH_PATTERN.search(style or "")
    if not match:
        return None
    rating = float(match.group(1)) / 100 * 5
    return rating if rating > 0 else None


def parse_profile_card(element: Tag, base_url: str = BASE_URL) -> Optional[ProfileGame]:
    """Game shown on a profile; None when it has no name or cover."""
    wrapper = element.select_one(patterns.CARD_WRAPPER)
    img = wrapper.find("img") if wrapper is not None else None
    if img is None:
        return None

    name = (img.get("alt") or "").strip()
    image_url = (img.get("src") or "").strip()
    if not (name and image_url):
        return None

    played = element.select_one(patterns.CARD_PLAYED_DATE)
    stars = element.select_one(patterns.CARD_STARS)

    return ProfileGame(
        name=name,
        image_url=image_url,
        source_url=card_link(element, base_url),
        played_date=(played.get_text(strip=True) or None) if played else None,
        rating=calculate_rating(stars.get("style")) if stars else None,
    )


def _children(soup: BeautifulSoup, selector: str) -> list[Tag]:
    container = soup.select_one(selector)
    if container is None:
        return []
    return container.find_all(recursive=False)


def _stats(soup: BeautifulSoup) -> dict[str, int]:
    stats: dict[str, int] = {}
    for el in _children(soup, patterns.PROFILE_STATS):
        value = el.find("h1", recursive=False)
        label = el.find("h4", recursive=False)
        if value is None or label is None:
            continue
        try:
            stats[label.get_text(strip=True)] = int(value.get_text(strip=True).replace(",", ""))
        except ValueError:
            continue
    return stats


def _badges(soup: BeautifulSoup) -> list[Badge]:
    sidebar = soup.select_one(patterns.PROFILE_SIDEBAR)
    if sidebar is None:
        return []

    badges = []
    for column in sidebar.select(patterns.BADGE_COLUMN):
        tooltip = column.select_one(patterns.BADGE_TOOLTIP)
        badge_id = (tooltip.get(patterns.BADGE_ID_ATTR) or "").strip() if tooltip else ""
        if not badge_id:
            continue
        detail = column.find(id=f"badge-{badge_id}")
        if detail is None:
            continue
        title = detail.select_one(patterns.BADGE_TITLE)
        desc = detail.select_one(patterns.BADGE_DESC)
        img = tooltip.find("img")
        badges.append(
            Badge(
                id=badge_id,
                name=title.get_text(strip=True) if title else "",
                description=desc.get_text(strip=True) if desc else "",
                image=img.get("src") if img else None,
            )
        )
    return badges


def _reviews(soup: BeautifulSoup, base_url: str) -> list[ProfileGame]:
    reviews = []
    for card in soup.select(patterns.REVIEW_CARD):
        body = card.select_one(patterns.REVIEW_BODY)
        review_id = (body.get(patterns.REVIEW_ID_ATTR) or "").strip() if body else ""
        game = parse_profile_card(card, base_url)
        if not review_id or game is None:
            continue
        text_el = card.find(id=patterns.REVIEW_TEXT_ID.format(review_id=review_id))
        game.review = text_el.get_text(strip=True) if text_el else ""
        reviews.append(game)
    return reviews


def _games_count(soup: BeautifulSoup) -> Optional[int]:
    # The header has several subtitle lines (followers, games, ...)
    for el in soup.select(patterns.GAMES_COUNT):
        match = patterns.GAMES_COUNT_PATTERN.match(el.get_text(strip=True))
        if match:
            return int(match.group(1))
    return None


def parse_profile(html: str, username: str, base_url: str = BASE_URL) -> UserProfile:
    """
    Parse a profile page.

    Args:
        html: Raw page HTML
        username: Profile owner (not reliably present in the markup)
        base_url: Site root used to absolutize game links

    Returns:
        UserProfile; sections missing from the page come back empty
    """
    soup = make_soup(html)

    avatar_meta = soup.select_one(patterns.PROFILE_AVATAR)
    avatar = (avatar_meta.get("content") or "").strip() if avatar_meta else ""

    # The site renders the empty-bio placeholder as a <p>; a written bio is bare text
    bio_el = soup.select_one(patterns.PROFILE_BIO)
    bio = ""
    if bio_el is not None and bio_el.find("p") is None:
        bio = bio_el.get_text(" ", strip=True)

    favorites = []
    for el in _children(soup, patterns.PROFILE_FAVORITES):
        game = parse_profile_card(el, base_url)
        if game is None:
            continue
        game.most_favorite = patterns.ULTIMATE_FAVORITE_CLASS in (el.get("class") or [])
        favorites.append(game)

    recent = []
    for el in _children(soup, patterns.PROFILE_JOURNAL):
        game = parse_profile_card(el, base_url)
        if game is not None:
            recent.append(game)

    return UserProfile(
        username=username,
        avatar=avatar or patterns.NO_AVATAR_URL,
        bio=bio or patterns.NO_BIO_TEXT,
        games_count=_games_count(soup),
        stats=_stats(soup),
        badges=_badges(soup),
        favorite_games=favorites,
        recently_played=recent,
        recently_reviewed=_reviews(soup, base_url),
    )
