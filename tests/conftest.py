"""Pytest configuration and shared fixtures."""

import os
import tempfile
import threading
from pathlib import Path
from typing import Callable, Optional, Union

import pytest
import requests

# Keep the rotating log file out of the real home directory
os.environ.setdefault("GAMESTATS_DATA_DIR", tempfile.mkdtemp(prefix="gamestats-test-"))

from gamestats.config.settings import Settings  # noqa: E402


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, text: str = "", reason: str = "OK", json_data=None):
        self.status_code = status_code
        self.text = text
        self.reason = reason
        self._json = json_data

    def json(self):
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} {self.reason}", response=self)


PageSpec = Union[str, FakeResponse, list, Callable[[], FakeResponse]]


class FakeSession:
    """
    URL-keyed fake of requests.Session.get.

    A page may be HTML text (served as 200), a FakeResponse, a callable
    returning one, or a list served in order (the last item repeats).
    Unknown URLs answer 404.
    """

    def __init__(self, pages: Optional[dict[str, PageSpec]] = None):
        self.pages: dict[str, PageSpec] = dict(pages or {})
        self.calls: list[tuple[str, dict]] = []
        self._lock = threading.Lock()

    def get(self, url, headers=None, timeout=None):
        with self._lock:
            self.calls.append((url, dict(headers or {})))
            page = self.pages.get(url)
            if isinstance(page, list):
                page = page.pop(0) if len(page) > 1 else page[0]

        if page is None:
            return FakeResponse(404, "Not Found", "Not Found")
        if callable(page):
            return page()
        if isinstance(page, FakeResponse):
            return page
        return FakeResponse(200, page)

    def requested(self, url: str) -> int:
        """How many times a URL was fetched."""
        return sum(1 for called, _ in self.calls if called == url)


@pytest.fixture
def fixtures_dir():
    """Get the fixtures directory path."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def load_fixture(fixtures_dir):
    """Read an HTML fixture by file name."""

    def _load(name: str) -> str:
        return (fixtures_dir / name).read_text(encoding="utf-8")

    return _load


@pytest.fixture
def settings():
    """Settings with no real waiting and enrichment off."""
    return Settings(
        retry_delay=0.01,
        retry_delay_escalated=0.02,
        max_retries=5,
        page_delay=0,
        detail_workers=4,
        enrich=False,
    )


@pytest.fixture
def no_sleep():
    """Sleep replacement that records requested delays."""
    delays: list[float] = []

    def _sleep(seconds: float) -> None:
        delays.append(seconds)

    _sleep.delays = delays
    return _sleep


@pytest.fixture
def make_session():
    """Factory for FakeSession."""
    return FakeSession


@pytest.fixture
def make_response():
    """Factory for FakeResponse."""
    return FakeResponse
