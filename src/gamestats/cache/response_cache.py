"""In-memory TTL cache for crawl results."""

import threading
import time
from typing import Any, Callable, Hashable, Optional

DEFAULT_TTL = 3600

# Upper bound between full sweeps of expired entries (seconds)
SWEEP_INTERVAL = 600


def games_key(username: str, page: int, full_crawl: bool) -> tuple:
    """Cache key for a collection response."""
    return ("games", username, page, full_crawl)


def profile_key(username: str) -> tuple:
    """Cache key for a profile response."""
    return ("profile", username)


class ResponseCache:
    """
    Time-bounded memoization in front of the crawl pipeline.

    Every entry gets the same TTL. An entry is served only while
    now < expiry; `invalidate` is the only way to drop it earlier.
    There is no single-flight: concurrent misses may both compute and
    both `set`, and the last write wins.

    Expired entries are dropped when read, and `set` sweeps out every
    expired entry at most once per sweep interval so keys that are never
    read again don't accumulate.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[Hashable, tuple[float, Any]] = {}
        self._lock = threading.Lock()
        self._sweep_interval = min(ttl_seconds, SWEEP_INTERVAL)
        self._next_sweep = clock() + self._sweep_interval

    def get(self, key: Hashable) -> Optional[Any]:
        """Cached value, or None if missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expiry, value = entry
            if self._clock() >= expiry:
                del self._entries[key]
                return None
            return value

    def set(self, key: Hashable, value: Any) -> None:
        """Store a value, replacing any existing entry and restarting its TTL."""
        with self._lock:
            now = self._clock()
            if now >= self._next_sweep:
                self._purge_locked(now)
            self._entries[key] = (now + self.ttl_seconds, value)

    def purge_expired(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        with self._lock:
            return self._purge_locked(self._clock())

    def _purge_locked(self, now: float) -> int:
        expired = [key for key, (expiry, _) in self._entries.items() if now >= expiry]
        for key in expired:
            del self._entries[key]
        self._next_sweep = now + self._sweep_interval
        return len(expired)

    def invalidate(self, key: Hashable) -> bool:
        """Drop an entry. Returns True if one was present."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            now = self._clock()
            return sum(1 for expiry, _ in self._entries.values() if now < expiry)
