# File: tests/conftest.py
import asyncio
import random
from collections import Counter
from contextlib import asynccontextmanager
from typing import Dict, List, Tuple

import pytest

from mail_scout.config import DelayRange, RateLimitConfig, ScoutConfig
from mail_scout.crawler.rate_limiter import RateLimiter
from mail_scout.errors import RenderError
from mail_scout.logger import configure

NO_DELAY = DelayRange(min_seconds=0.0, max_seconds=0.0)


class FakePage:
    """Страница фейкового рендерера: отдаёт заранее заданные HTML и ссылки."""

    def __init__(self, renderer: "FakeRenderer", profile) -> None:
        self._renderer = renderer
        self.profile = profile
        self._url = None

    async def goto(self, url: str) -> None:
        r = self._renderer
        r.goto_calls.append(url)
        r.attempts[url] += 1
        if url not in r.pages:
            raise RenderError(f"net::ERR_NAME_NOT_RESOLVED at {url}")
        failures = r.failures.get(url, 0)
        if failures < 0 or r.attempts[url] <= failures:
            raise r.error(f"Timeout 60000ms exceeded navigating to {url}")
        self._url = url

    async def content(self) -> str:
        return self._renderer.pages[self._url][0]

    async def anchor_hrefs(self) -> List[str]:
        return list(self._renderer.pages[self._url][1])


class FakeRenderer:
    """
    In-memory renderer: ``pages`` maps URL -> (html, hrefs), ``failures`` maps
    URL -> number of failing attempts (-1 means every attempt fails).
    Unknown URLs always fail. Every call is recorded for assertions.
    """

    def __init__(
        self,
        pages: Dict[str, Tuple[str, List[str]]] = None,
        failures: Dict[str, int] = None,
        error: type = RenderError,
    ) -> None:
        self.pages = pages or {}
        self.failures = failures or {}
        self.error = error
        self.goto_calls: List[str] = []
        self.attempts: Counter = Counter()
        self.profiles = []
        self.opened = 0
        self.closed = 0
        self.entered = 0
        self.exited = 0

    async def __aenter__(self) -> "FakeRenderer":
        self.entered += 1
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.exited += 1

    @asynccontextmanager
    async def open_page(self, profile):
        self.opened += 1
        self.profiles.append(profile)
        try:
            yield FakePage(self, profile)
        finally:
            self.closed += 1


class SleepRecorder:
    """Замена asyncio.sleep: запоминает паузы и не ждёт."""

    def __init__(self) -> None:
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        await asyncio.sleep(0)


@pytest.fixture(autouse=True)
def fresh_logging():
    """
    CliRunner closes the stream the stdout handler was bound to,
    so every test starts with a freshly configured logger.
    """
    configure(level="DEBUG")
    yield


@pytest.fixture()
def fast_config(tmp_path) -> ScoutConfig:
    """
    Return a ScoutConfig with every random pause disabled and paths inside tmp_path.
    """
    return ScoutConfig(
        input_file=tmp_path / "companydetails.txt",
        output_dir=tmp_path / "scraped_data",
        renderer="http",
        page_timeout=5.0,
        rate_limit=RateLimitConfig(max_requests=1000, time_window=60.0, jitter=NO_DELAY),
        settle_delay=NO_DELAY,
        site_delay=NO_DELAY,
    )


@pytest.fixture()
def fake_renderer():
    """Фабрика FakeRenderer (класс), чтобы тесты задавали свои страницы."""
    return FakeRenderer


@pytest.fixture()
def recorded_sleep() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture()
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture()
def open_limiter() -> RateLimiter:
    """Limiter that never blocks: huge budget and no jitter."""
    return RateLimiter(max_requests=1000, time_window=60.0, min_delay=0.0, max_delay=0.0)
