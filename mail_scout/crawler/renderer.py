# mail_scout/crawler/renderer.py
"""
Page Renderer backends.

A renderer is an async context manager owning one long-lived session for the
whole run (a headless browser, or an HTTP client session). Each fetch attempt
borrows an isolated page through :meth:`open_page`, which is closed on exit
whatever happens inside the ``async with`` block.

Backends translate their library errors into :class:`~mail_scout.errors.RenderError`
so the fetcher only has to know about one failure type (plus ``asyncio.TimeoutError``).
"""
from __future__ import annotations

import logging
import random
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, List, Optional, Protocol, Tuple

from aiohttp import ClientError, ClientSession, ClientTimeout
from playwright.async_api import Browser, Playwright, Route, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page as PlaywrightPage

from mail_scout.config import ScoutConfig
from mail_scout.crawler.link_extractor import anchor_hrefs
from mail_scout.errors import RenderError

logger = logging.getLogger("MailScout")

_BROWSER_ARGS: Tuple[str, ...] = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
    "--disable-features=TranslateUI",
    "--disable-blink-features=AutomationControlled",
    "--no-default-browser-check",
    "--disable-extensions",
)

_ANCHORS_JS = "els => els.map(a => a.href)"


@dataclass(frozen=True, slots=True)
class RenderProfile:
    """Identity and limits applied to one renderer page."""

    user_agent: str
    viewport: Tuple[int, int] = (1366, 768)
    headers: Dict[str, str] = field(default_factory=dict)
    blocked_resource_types: Tuple[str, ...] = ("image", "media", "font")
    navigation_timeout: float = 60.0


def build_profile(config: ScoutConfig, rng: Optional[random.Random] = None) -> RenderProfile:
    """Pick a random identity from the configured pool and jitter the viewport."""
    rng = rng or random.Random()
    vp = config.viewport
    return RenderProfile(
        user_agent=rng.choice(config.user_agents),
        viewport=(vp.width + rng.randrange(vp.jitter + 1), vp.height + rng.randrange(vp.jitter + 1)),
        headers=dict(config.extra_headers),
        blocked_resource_types=tuple(config.blocked_resource_types),
        navigation_timeout=config.page_timeout,
    )


class RenderedPage(Protocol):
    async def goto(self, url: str) -> None: ...

    async def content(self) -> str: ...

    async def anchor_hrefs(self) -> List[str]: ...


class PageRenderer(Protocol):
    def open_page(self, profile: RenderProfile) -> AbstractAsyncContextManager[RenderedPage]: ...


# --------------------------------------------------------------------------- #
# Playwright (headless Chromium)                                              #
# --------------------------------------------------------------------------- #


class _PlaywrightPage:
    def __init__(self, page: PlaywrightPage, profile: RenderProfile) -> None:
        self._page = page
        self._profile = profile

    async def goto(self, url: str) -> None:
        try:
            await self._page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=self._profile.navigation_timeout * 1000,
            )
        except PlaywrightError as exc:
            raise RenderError(str(exc)) from exc

    async def content(self) -> str:
        try:
            return await self._page.content()
        except PlaywrightError as exc:
            raise RenderError(str(exc)) from exc

    async def anchor_hrefs(self) -> List[str]:
        # HTMLAnchorElement.href is already resolved against document.baseURI
        try:
            hrefs = await self._page.eval_on_selector_all("a[href]", _ANCHORS_JS)
        except PlaywrightError as exc:
            raise RenderError(str(exc)) from exc
        return [h for h in hrefs if isinstance(h, str) and h]


class PlaywrightRenderer:
    """Headless Chromium via Playwright; one browser context per page."""

    def __init__(self, config: ScoutConfig) -> None:
        self.config = config
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def __aenter__(self) -> PlaywrightRenderer:
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(
                headless=self.config.headless,
                args=list(_BROWSER_ARGS),
            )
        except Exception:
            await self._playwright.stop()
            self._playwright = None
            raise
        logger.info("Browser launched (headless=%s)", self.config.headless)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
            logger.info("Browser closed.")
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    @asynccontextmanager
    async def open_page(self, profile: RenderProfile) -> AsyncIterator[_PlaywrightPage]:
        if self._browser is None:
            raise RuntimeError("Browser not started")
        blocked = frozenset(profile.blocked_resource_types)

        async def _intercept(route: Route) -> None:
            if route.request.resource_type in blocked:
                await route.abort()
            else:
                await route.continue_()

        try:
            context = await self._browser.new_context(
                user_agent=profile.user_agent,
                viewport={"width": profile.viewport[0], "height": profile.viewport[1]},
                extra_http_headers=profile.headers,
            )
        except PlaywrightError as exc:
            raise RenderError(str(exc)) from exc
        try:
            page = await context.new_page()
            page.set_default_navigation_timeout(profile.navigation_timeout * 1000)
            if blocked:
                await page.route("**/*", _intercept)
            yield _PlaywrightPage(page, profile)
        except PlaywrightError as exc:
            raise RenderError(str(exc)) from exc
        finally:
            await context.close()


# --------------------------------------------------------------------------- #
# Plain HTTP (aiohttp, no JavaScript)                                         #
# --------------------------------------------------------------------------- #

_TEXTUAL_MIME_MARKERS = ("html", "xml", "json", "javascript")


class _HttpPage:
    def __init__(self, session: ClientSession, profile: RenderProfile) -> None:
        self._session = session
        self._profile = profile
        self._url = ""
        self._html = ""

    async def goto(self, url: str) -> None:
        headers = {**self._profile.headers, "User-Agent": self._profile.user_agent}
        timeout = ClientTimeout(total=self._profile.navigation_timeout)
        try:
            async with self._session.get(url, headers=headers, timeout=timeout) as resp:
                if resp.status >= 400:
                    raise RenderError(f"HTTP {resp.status} for {url}")
                self._url = str(resp.url)
                mime = resp.content_type or ""
                if mime.startswith("text/") or any(m in mime for m in _TEXTUAL_MIME_MARKERS):
                    self._html = await resp.text(errors="replace")
                else:
                    logger.debug("Skipping body of %s (%s)", url, mime)
                    self._html = ""
        except ClientError as exc:
            raise RenderError(f"{type(exc).__name__}: {exc}") from exc

    async def content(self) -> str:
        return self._html

    async def anchor_hrefs(self) -> List[str]:
        if not self._html:
            return []
        return anchor_hrefs(self._html, self._url)


class HttpRenderer:
    """Static-HTML renderer over one shared aiohttp session."""

    def __init__(self, config: ScoutConfig) -> None:
        self.config = config
        self.session: Optional[ClientSession] = None

    async def __aenter__(self) -> HttpRenderer:
        self.session = ClientSession(
            timeout=ClientTimeout(total=self.config.page_timeout),
            raise_for_status=False,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    @asynccontextmanager
    async def open_page(self, profile: RenderProfile) -> AsyncIterator[_HttpPage]:
        if not self.session:
            raise RuntimeError("Session not initialized")
        yield _HttpPage(self.session, profile)


def make_renderer(config: ScoutConfig):
    """Return the renderer backend selected by ``config.renderer``."""
    if config.renderer == "http":
        return HttpRenderer(config)
    return PlaywrightRenderer(config)


__all__ = [
    "HttpRenderer",
    "PageRenderer",
    "PlaywrightRenderer",
    "RenderProfile",
    "RenderedPage",
    "build_profile",
    "make_renderer",
]
