# === FILE: mail_scout/crawler/crawler.py ===
from __future__ import annotations

import logging
import time
from typing import Callable, List

from mail_scout.crawler.fetcher import PageFetcher
from mail_scout.errors import report_page_failure
from mail_scout.extractor import extract_emails
from mail_scout.models import CrawlState, CrawlTarget, FetchResult, PageRecord, SiteResult

__all__ = ("CrawlController",)

Extractor = Callable[[str], List[str]]


class CrawlController:
    """Ограниченный обход одного сайта в ширину: очередь, посещённые URL, лимит страниц."""

    def __init__(
        self,
        fetcher: PageFetcher,
        *,
        max_pages: int = 25,
        extractor: Extractor = extract_emails,
        progress_every: int = 5,
    ) -> None:
        if max_pages < 1:
            raise ValueError("max_pages must be >= 1")
        self.fetcher = fetcher
        self.max_pages = max_pages
        self.extractor = extractor
        self.progress_every = max(1, progress_every)
        self.logger = logging.getLogger("MailScout")

    async def crawl_site(self, target: CrawlTarget) -> SiteResult:
        """
        Обходит сайт начиная с ``target.root_url`` и собирает адреса.
        Бросает MalformedTargetError, если у корневого URL нет hostname.
        """
        hostname = target.hostname
        self.logger.info("Starting email extraction for %s...", target.site_name)
        start = time.monotonic()

        state = CrawlState()
        state.enqueue(target.root_url)

        while state.frontier and len(state.visited) < self.max_pages:
            current = state.dequeue()
            if current in state.visited:
                continue
            state.visited.add(current)

            result = await self._fetch(current)
            if result.succeeded:
                emails = self.extractor(result.content)
                if emails:
                    self.logger.info("Found %d emails on %s", len(emails), current)
                    state.emails.update(emails)
                state.pages.append(PageRecord(url=current, emails=emails))
            else:
                state.pages.append(PageRecord(url=current, error=result.error_detail))

            for link in result.outbound_links:
                state.enqueue(link)

            if len(state.visited) % self.progress_every == 0:
                self.logger.info(
                    "Progress for %s: %d pages processed, %d unique emails found, %d remaining in queue",
                    target.site_name, len(state.visited), len(state.emails), len(state.frontier),
                )

        duration = time.monotonic() - start
        self.logger.info(
            "Finished %s: %d pages, %d unique emails in %.1f s",
            target.site_name, len(state.pages), len(state.emails), duration,
        )
        return SiteResult(
            target=target,
            hostname=hostname,
            emails=sorted(state.emails),
            pages=state.pages,
        )

    async def _fetch(self, url: str) -> FetchResult:
        try:
            return await self.fetcher.fetch(url)
        except Exception as exc:
            # the fetcher handles render failures itself; anything here is unexpected
            detail = f"Unexpected error: {type(exc).__name__}: {exc}"
            report_page_failure(url, detail)
            self.logger.debug("Traceback for %s", url, exc_info=exc)
            return FetchResult.failure(detail)

