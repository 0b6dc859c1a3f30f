"""HTTP fetch layer with rate-limit detection and adaptive backoff."""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests
from requests.adapters import HTTPAdapter

from gamestats.config.logging import get_logger
from gamestats.config.settings import Settings
from gamestats.core.errors import BlockedError, NotFoundError, RateLimitedError, TransportError
from gamestats.parser.patterns import (
    CHALLENGE_MARKERS,
    CHALLENGE_STATUSES,
    RATE_LIMIT_BODY_MAX,
    RATE_LIMIT_MARKER,
)

logger = get_logger()


@dataclass
class FetchResponse:
    """Successful response body."""

    url: str
    status_code: int
    text: str


class RetryPolicy:
    """
    Backoff delay shared by every request made through one fetcher.

    The remote rate limiter is keyed on the caller's IP, so all concurrent
    requests see the same delay. The second consecutive rate-limit hit
    raises the delay from baseline to the escalated plateau; any successful
    response resets it.
    """

    def __init__(self, baseline: float = 10.0, escalated: float = 20.0, escalate_after: int = 2) -> None:
        self.baseline = baseline
        self.escalated = escalated
        self.escalate_after = escalate_after
        self._lock = threading.Lock()
        self._delay = baseline
        self._consecutive = 0

    @property
    def current_delay(self) -> float:
        with self._lock:
            return self._delay

    @property
    def consecutive_rate_limits(self) -> int:
        with self._lock:
            return self._consecutive

    def record_rate_limit(self) -> float:
        """Register a rate-limit hit and return the delay to wait."""
        with self._lock:
            self._consecutive += 1
            if self._consecutive >= self.escalate_after and self._delay != self.escalated:
                self._delay = self.escalated
                logger.warning(f"Consecutive rate limits detected, increasing delay to {self._delay:.0f}s")
            return self._delay

    def record_success(self) -> None:
        """Reset to baseline after a successful response."""
        with self._lock:
            if self._consecutive > 0:
                logger.info(f"Request successful, resetting retry delay to {self.baseline:.0f}s")
            self._consecutive = 0
            self._delay = self.baseline


class Fetcher:
    """
    Issues GET requests against the source site.

    Rate-limited responses are retried after the shared policy delay until
    `max_retries` is exhausted. Every other failure is raised immediately
    as a FetchError subclass.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings or Settings()
        self.policy = policy or RetryPolicy(
            baseline=self.settings.retry_delay,
            escalated=self.settings.retry_delay_escalated,
        )
        self._sleep = sleep
        if session is None:
            session = requests.Session()
            # Detail fan-out opens one connection per worker
            adapter = HTTPAdapter(pool_maxsize=max(10, self.settings.detail_workers * 2))
            session.mount("https://", adapter)
            session.mount("http://", adapter)
        self.session = session

    def fetch(self, url: str, headers: Optional[dict[str, str]] = None) -> FetchResponse:
        """
        Fetch a URL, waiting out rate limits.

        Args:
            url: Absolute URL
            headers: Extra headers merged over the default browser headers

        Returns:
            FetchResponse for a 2xx/3xx page

        Raises:
            NotFoundError: HTTP 404
            BlockedError: Anti-bot challenge page
            RateLimitedError: Retry ceiling reached while rate limited
            TransportError: Network failure or other HTTP error status
        """
        request_headers = {**self.settings.headers, **(headers or {})}
        max_retries = self.settings.max_retries

        for attempt in range(max_retries + 1):
            try:
                resp = self.session.get(url, headers=request_headers, timeout=self.settings.request_timeout)
            except requests.exceptions.RequestException as e:
                raise TransportError(f"Request failed: {e}", url=url) from e

            if not self._is_rate_limited(resp):
                self._raise_for_status(resp, url)
                self.policy.record_success()
                return FetchResponse(url=url, status_code=resp.status_code, text=resp.text)

            if attempt >= max_retries:
                break

            delay = self.policy.record_rate_limit()
            logger.warning(
                f"Rate limited on {url} (attempt {attempt + 1}/{max_retries + 1}), "
                f"waiting {delay:.0f}s before retry..."
            )
            self._sleep(delay)

        logger.error(f"Max retries ({max_retries}) reached for rate limiting: {url}")
        raise RateLimitedError("Rate limited", url=url, status_code=429)

    @staticmethod
    def _is_rate_limited(resp: requests.Response) -> bool:
        if resp.status_code == 429:
            return True
        body = resp.text or ""
        return len(body) <= RATE_LIMIT_BODY_MAX and RATE_LIMIT_MARKER in body.lower()

    @staticmethod
    def _raise_for_status(resp: requests.Response, url: str) -> None:
        body = resp.text or ""
        if resp.status_code in CHALLENGE_STATUSES and any(marker in body for marker in CHALLENGE_MARKERS):
            raise BlockedError("Blocked by anti-bot challenge", url=url, status_code=resp.status_code)

        if resp.status_code == 404:
            raise NotFoundError("Not found", url=url, status_code=404)

        if resp.status_code >= 400:
            raise TransportError(
                f"HTTP {resp.status_code} {resp.reason or ''}".strip(),
                url=url,
                status_code=resp.status_code,
            )
