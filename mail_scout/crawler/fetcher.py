# mail_scout/crawler/fetcher.py
"""
Fetcher module: loads one page through the renderer with rate limiting,
retry/backoff and same-host link discovery.
"""
from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional

from mail_scout.config import ScoutConfig
from mail_scout.crawler.link_extractor import same_host_links
from mail_scout.crawler.rate_limiter import RateLimiter
from mail_scout.crawler.renderer import PageRenderer, build_profile
from mail_scout.errors import RenderError, report_page_failure
from mail_scout.models import FetchResult

Sleep = Callable[[float], Awaitable[None]]


def _describe(exc: Optional[BaseException]) -> str:
    return str(exc) or type(exc).__name__


class PageFetcher:
    """Fetches a URL through a :class:`PageRenderer`; never raises on render failures."""

    def __init__(
        self,
        renderer: PageRenderer,
        rate_limiter: RateLimiter,
        config: ScoutConfig,
        *,
        sleep: Sleep = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.renderer = renderer
        self.rate_limiter = rate_limiter
        self.config = config
        self._sleep = sleep
        self._rng = rng or random.Random()
        self.logger = logging.getLogger("MailScout")

    async def fetch(self, url: str) -> FetchResult:
        """
        Fetch *url*, retrying up to ``config.max_retries`` times.

        Returns a successful FetchResult with content and links, or a failed
        one carrying ``error_detail`` once every attempt has been used.
        """
        max_retries = self.config.max_retries
        last_error: Optional[BaseException] = None
        for attempt in range(max_retries + 1):
            if attempt:
                backoff = self.config.retry_backoff * attempt
                self.logger.info("Retrying %s (%d/%d) in %.1f s", url, attempt, max_retries, backoff)
                await self._sleep(backoff)
            try:
                return await self._attempt(url, attempt)
            except (RenderError, asyncio.TimeoutError) as exc:
                last_error = exc
                self.logger.warning("Error processing page %s: %s", url, _describe(exc))

        detail = (
            f"Could not process page {url} after {max_retries} retries: "
            f"{_describe(last_error)}"
        )
        report_page_failure(url, detail)
        return FetchResult.failure(detail)

    async def _attempt(self, url: str, attempt: int) -> FetchResult:
        profile = build_profile(self.config, self._rng)
        async with self.renderer.open_page(profile) as page:
            await self.rate_limiter.wait_for_slot()
            self.logger.info("Navigating to: %s (Attempt %d)", url, attempt + 1)
            await page.goto(url)
            settle = self.config.settle_delay.sample(self._rng)
            if settle > 0:
                await self._sleep(settle)
            content = await page.content()
            hrefs = await page.anchor_hrefs()
        links = same_host_links(hrefs, url, self.config.max_links_per_page)
        self.logger.debug("%s: %d chars, %d same-host links", url, len(content), len(links))
        return FetchResult(content=content, outbound_links=links)


__all__ = ["PageFetcher"]
