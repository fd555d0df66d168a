"""mail_scout.crawler: rate limiting, page rendering and the per-site crawl loop."""
from mail_scout.crawler.crawler import CrawlController
from mail_scout.crawler.fetcher import PageFetcher
from mail_scout.crawler.rate_limiter import RateLimiter
from mail_scout.crawler.renderer import HttpRenderer, PlaywrightRenderer, RenderProfile, make_renderer

__all__ = [
    "CrawlController",
    "HttpRenderer",
    "PageFetcher",
    "PlaywrightRenderer",
    "RateLimiter",
    "RenderProfile",
    "make_renderer",
]
