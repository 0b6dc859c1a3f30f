"""CSS selectors, literal markers and regex patterns for Backloggd markup.

Every assumption about the site's HTML lives here. When the layout changes,
this is the module to edit.
"""

import re

# ---------------------------------------------------------------------------
# Collection list page (/u/<user>/games?page=N)
# ---------------------------------------------------------------------------

# One card per game
# Example: <div class="game-cover fade-completed" game_id="1942" data-rating="8">
GAME_CARD = ".game-cover"
GAME_ID_ATTR = "game_id"
GAME_RATING_ATTR = "data-rating"
GAME_NAME = ".game-text-centered"
GAME_COVER_IMG = ".overflow-wrapper img"
GAME_LINK = "a.cover-link"
GAME_TIME_BADGE = ".time-badge"

# Card CSS state classes, highest precedence first
STATUS_CLASSES = (
    ("fade-completed", "completed"),
    ("fade-playing", "playing"),
    ("fade-backlog", "backlog"),
    ("fade-wishlist", "wishlist"),
)
DEFAULT_STATUS = "played"

# Any link carrying a page number counts towards the page total
PAGINATION_LINK = "a[href*='page=']"
PAGE_NUMBER_PATTERN = re.compile(r"page=(\d+)")

# ---------------------------------------------------------------------------
# Game detail page (/games/<slug>/)
# ---------------------------------------------------------------------------

DEVELOPER_LINKS = "div.col-auto.sub-title a[href*='/company/']"
DEVELOPER_LINKS_FALLBACK = "a[href*='/company/']"

# Mobile "RELEASED" block
RELEASE_DATE = "div.row.mt-2.d-md-none div.col-auto.ml-auto.my-auto a.game-details-value"
# Older layout: <span class="filler-text">released on</span> <a>Oct 13, 2023</a>
RELEASE_FILLER = "span.filler-text"
RELEASE_FILLER_TEXT = "released on"

PLATFORM_LINKS = "a.game-page-platform"
GENRE_LINKS = ".genre-tag a"

# Example: <p class="game-parent-category">a remake of <a>Resident Evil 2</a></p>
PARENT_CATEGORY = ".game-parent-category"
PARENT_CATEGORY_PHRASES = (
    ("a remaster of", "is_remaster"),
    ("a remake of", "is_remake"),
    ("an expansion for", "is_expansion"),
)

# Human dates as rendered on the site, e.g. "Oct 13, 2023" or "February 25, 2022"
RELEASE_DATE_FORMATS = (
    "%b %d, %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%d %B %Y",
    "%Y-%m-%d",
)

# ---------------------------------------------------------------------------
# Per-user log page (/u/<user>/logs/<slug>/)
# ---------------------------------------------------------------------------

LOG_STATUS = "#log-status p"
# Labels of the status picker leak into the status paragraph text
LOG_STATUS_NOISE = re.compile(r"PlayingBacklogWishlist")
MASTERED_MARKER = "Mastered"

# ---------------------------------------------------------------------------
# Profile page (/u/<user>)
# ---------------------------------------------------------------------------

PROFILE_AVATAR = "meta[property='og:image']"
NO_AVATAR_URL = "https://backloggd.b-cdn.net/no_avatar.jpg"
PROFILE_BIO = "#bio-body"
NO_BIO_TEXT = "Nothing here!"

# Example: <p class="mb-0 subtitle-text">1228 Games</p>
GAMES_COUNT = "p.mb-0.subtitle-text"
GAMES_COUNT_PATTERN = re.compile(r"^(\d+)\s+Games?")

PROFILE_FAVORITES = "#profile-favorites"
PROFILE_JOURNAL = "#profile-journal"
PROFILE_STATS = "#profile-stats"
PROFILE_SIDEBAR = "#profile-sidebar"
ULTIMATE_FAVORITE_CLASS = "ultimate_fav"

# Profile game cards
CARD_WRAPPER = "div.overflow-wrapper"
CARD_PLAYED_DATE = "p.mb-0.played-date"
CARD_STARS = "div.star-ratings-static div.stars-top"
STAR_WIDTH_PATTERN = re.compile(r"width:\s*(\d+(?:\.\d+)?)%")

REVIEW_CARD = ".review-card"
REVIEW_BODY = ".review-body"
REVIEW_ID_ATTR = "review_id"
REVIEW_TEXT_ID = "collapseReview{review_id}"

BADGE_COLUMN = ".badges .backlog-badge-cus-col"
BADGE_TOOLTIP = ".badge-tooltip"
BADGE_ID_ATTR = "badge_id"
BADGE_TITLE = ".badge-title"
BADGE_DESC = ".badge-desc"

# ---------------------------------------------------------------------------
# Fetch-level markers
# ---------------------------------------------------------------------------

# Plain-text throttle responses are short; full pages may mention the phrase
RATE_LIMIT_MARKER = "rate limited"
RATE_LIMIT_BODY_MAX = 2048

# Cloudflare interstitials, only trusted on the statuses Cloudflare serves them with
CHALLENGE_STATUSES = (403, 503)
CHALLENGE_MARKERS = (
    "cf-browser-verification",
    "cf_chl_opt",
    "Attention Required! | Cloudflare",
    "Just a moment...",
)
