"""Fetch error taxonomy.

Parse failures are not errors: a missing or malformed node becomes an
absent optional field.
"""

from typing import Optional


class FetchError(Exception):
    """Base class for errors raised while fetching a remote page."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.url = url
        self.status_code = status_code


class NotFoundError(FetchError):
    """The remote resource does not exist (HTTP 404)."""


class RateLimitedError(FetchError):
    """Rate-limit retries were exhausted."""


class BlockedError(FetchError):
    """An anti-bot challenge page was served instead of content."""


class TransportError(FetchError):
    """Network failure, timeout, or an unexpected HTTP error status."""
