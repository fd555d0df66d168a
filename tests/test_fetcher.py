# File: tests/test_fetcher.py
"""Page Fetcher: ссылки, повторы с backoff, закрытие страниц, профиль браузера."""
import asyncio

import pytest

from mail_scout.config import DelayRange
from mail_scout.crawler.fetcher import PageFetcher

ROOT = "https://acme.io/"


class CountingLimiter:
    def __init__(self):
        self.calls = 0

    async def wait_for_slot(self):
        self.calls += 1


def make_fetcher(renderer, config, sleep, rng, limiter=None):
    return PageFetcher(renderer, limiter or CountingLimiter(), config, sleep=sleep, rng=rng)


@pytest.mark.asyncio()
async def test_fetch_returns_content_and_same_host_links(fast_config, fake_renderer, recorded_sleep, rng):
    hrefs = [
        "https://acme.io/about",
        "https://other.com/x",
        "https://acme.io/about#team",
        "mailto:info@acme.io",
        "https://acme.io/contact",
    ]
    renderer = fake_renderer({ROOT: ("<p>info@acme.io</p>", hrefs)})
    result = await make_fetcher(renderer, fast_config, recorded_sleep, rng).fetch(ROOT)

    assert result.succeeded
    assert result.error_detail is None
    assert result.content == "<p>info@acme.io</p>"
    assert result.outbound_links == ["https://acme.io/about", "https://acme.io/contact"]
    assert renderer.opened == renderer.closed == 1
    assert recorded_sleep.calls == []


@pytest.mark.asyncio()
async def test_links_are_capped(fast_config, fake_renderer, recorded_sleep, rng):
    hrefs = [f"https://acme.io/p{i}" for i in range(40)]
    renderer = fake_renderer({ROOT: ("", hrefs)})
    result = await make_fetcher(renderer, fast_config, recorded_sleep, rng).fetch(ROOT)

    assert result.outbound_links == hrefs[: fast_config.max_links_per_page]
    assert len(result.outbound_links) == 15


@pytest.mark.asyncio()
async def test_retry_then_success(fast_config, fake_renderer, recorded_sleep, rng):
    renderer = fake_renderer({ROOT: ("ok", [])}, failures={ROOT: 2})
    limiter = CountingLimiter()
    result = await make_fetcher(renderer, fast_config, recorded_sleep, rng, limiter).fetch(ROOT)

    assert result.succeeded
    assert result.content == "ok"
    assert recorded_sleep.calls == [5.0, 10.0]
    assert renderer.attempts[ROOT] == 3
    assert renderer.opened == renderer.closed == 3
    # every attempt is a request and goes through the limiter
    assert limiter.calls == 3


@pytest.mark.asyncio()
async def test_all_attempts_fail_without_raising(fast_config, fake_renderer, recorded_sleep, rng):
    renderer = fake_renderer({ROOT: ("never", [])}, failures={ROOT: -1})
    result = await make_fetcher(renderer, fast_config, recorded_sleep, rng).fetch(ROOT)

    assert not result.succeeded
    assert result.content == ""
    assert result.outbound_links == []
    assert "after 3 retries" in result.error_detail
    assert "Timeout" in result.error_detail
    assert recorded_sleep.calls == [5.0, 10.0, 15.0]
    assert renderer.attempts[ROOT] == 4
    assert renderer.opened == renderer.closed == 4


@pytest.mark.asyncio()
async def test_navigation_timeout_is_retried(fast_config, fake_renderer, recorded_sleep, rng):
    renderer = fake_renderer({ROOT: ("late", [])}, failures={ROOT: 1}, error=asyncio.TimeoutError)
    result = await make_fetcher(renderer, fast_config, recorded_sleep, rng).fetch(ROOT)

    assert result.succeeded
    assert result.content == "late"
    assert recorded_sleep.calls == [5.0]


@pytest.mark.asyncio()
async def test_zero_retries(fast_config, fake_renderer, recorded_sleep, rng):
    config = fast_config.model_copy(update={"max_retries": 0})
    renderer = fake_renderer({}, failures={})
    result = await make_fetcher(renderer, config, recorded_sleep, rng).fetch(ROOT)

    assert not result.succeeded
    assert renderer.goto_calls == [ROOT]
    assert recorded_sleep.calls == []


@pytest.mark.asyncio()
async def test_unexpected_errors_propagate(fast_config, fake_renderer, recorded_sleep, rng):
    renderer = fake_renderer({ROOT: ("x", [])}, failures={ROOT: -1}, error=KeyError)
    with pytest.raises(KeyError):
        await make_fetcher(renderer, fast_config, recorded_sleep, rng).fetch(ROOT)
    assert renderer.opened == renderer.closed == 1


@pytest.mark.asyncio()
async def test_profile_comes_from_config(fast_config, fake_renderer, recorded_sleep, rng):
    config = fast_config.model_copy(update={"user_agents": ["UA-1", "UA-2"]})
    urls = [f"https://acme.io/p{i}" for i in range(12)]
    renderer = fake_renderer({u: ("", []) for u in urls})
    fetcher = make_fetcher(renderer, config, recorded_sleep, rng)
    for url in urls:
        await fetcher.fetch(url)

    assert {p.user_agent for p in renderer.profiles} <= {"UA-1", "UA-2"}
    for profile in renderer.profiles:
        assert 1366 <= profile.viewport[0] <= 1466
        assert 768 <= profile.viewport[1] <= 868
        assert profile.headers == config.extra_headers
        assert profile.blocked_resource_types == ("image", "media", "font")
        assert profile.navigation_timeout == config.page_timeout


@pytest.mark.asyncio()
async def test_settle_delay_is_applied_after_navigation(fast_config, fake_renderer, recorded_sleep, rng):
    config = fast_config.model_copy(update={"settle_delay": DelayRange(min_seconds=2.0, max_seconds=5.0)})
    renderer = fake_renderer({ROOT: ("", [])})
    await make_fetcher(renderer, config, recorded_sleep, rng).fetch(ROOT)

    assert len(recorded_sleep.calls) == 1
    assert 2.0 <= recorded_sleep.calls[0] <= 5.0
