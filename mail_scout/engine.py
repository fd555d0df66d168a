# File: mail_scout/engine.py
"""mail_scout.engine: Orchestration layer: таблица компаний → обход сайтов → отчёты."""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Sequence

from mail_scout.config import ScoutConfig
from mail_scout.crawler.crawler import CrawlController
from mail_scout.crawler.fetcher import PageFetcher
from mail_scout.crawler.rate_limiter import RateLimiter
from mail_scout.crawler.renderer import make_renderer
from mail_scout.errors import MalformedTargetError, report_malformed_target, report_site_failure
from mail_scout.input_table import read_targets
from mail_scout.logger import logger
from mail_scout.models import CrawlTarget
from mail_scout.report import report_exists, write_report
from mail_scout.utils import remove_duplicates

__all__ = ["Engine", "RunSummary", "run_scout"]

Sleep = Callable[[float], Awaitable[None]]


@dataclass(slots=True)
class RunSummary:
    """Итоги запуска: что обработано, пропущено и сколько адресов найдено."""

    processed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    reports: List[Path] = field(default_factory=list)
    total_emails: int = 0


class Engine:
    """Фасад для CLI и тестов: последовательный обход всех сайтов из таблицы."""

    def __init__(
        self,
        config: ScoutConfig,
        *,
        renderer=None,
        rate_limiter: Optional[RateLimiter] = None,
        sleep: Sleep = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ) -> None:
        """Инициализирует Engine; renderer и rate_limiter можно подменить в тестах."""
        self.config = config
        self._renderer = renderer
        self._sleep = sleep
        self._rng = rng or random.Random()
        # one limiter for the whole process, shared by every site
        self.rate_limiter = rate_limiter or RateLimiter.from_config(config.rate_limit, rng=self._rng)

    def pending_targets(self, targets: Sequence[CrawlTarget], summary: RunSummary) -> List[CrawlTarget]:
        """Отбрасывает дубликаты и компании, для которых отчёт уже есть."""
        pending: List[CrawlTarget] = []
        for target in remove_duplicates(list(targets)):
            if report_exists(self.config.output_dir, target.site_name):
                logger.info("Skipping %s - email file already exists", target.site_name)
                summary.skipped.append(target.site_name)
                continue
            pending.append(target)
        return pending

    async def run(self, targets: Optional[Sequence[CrawlTarget]] = None) -> RunSummary:
        """Обходит все сайты по очереди и пишет отчёты. Ошибки сайта не прерывают запуск."""
        summary = RunSummary()
        if targets is None:
            targets = read_targets(self.config.input_file)
        if not targets:
            logger.error("No companies found to process.")
            return summary

        output_dir = Path(self.config.output_dir)
        if not output_dir.exists():
            output_dir.mkdir(parents=True, exist_ok=True)
            logger.info("Created output directory: %s", output_dir)

        pending = self.pending_targets(targets, summary)
        if not pending:
            logger.info("All companies have already been processed!")
            return summary
        logger.info(
            "Processing %d companies (%d already completed)", len(pending), len(summary.skipped)
        )

        renderer = self._renderer or make_renderer(self.config)
        async with renderer:
            fetcher = PageFetcher(renderer, self.rate_limiter, self.config, sleep=self._sleep, rng=self._rng)
            controller = CrawlController(
                fetcher,
                max_pages=self.config.max_pages_per_site,
                progress_every=self.config.progress_every,
            )
            for index, target in enumerate(pending):
                logger.info("[%d/%d] Processing: %s (%s)", index + 1, len(pending), target.site_name, target.root_url)
                await self._crawl_one(controller, target, summary)

                if index < len(pending) - 1:
                    delay = self.config.site_delay.sample(self._rng)
                    logger.info("Waiting %.0f seconds before next company...", delay)
                    await self._sleep(delay)

        logger.info("Email extraction completed. Total emails across all companies: %d", summary.total_emails)
        return summary

    async def _crawl_one(self, controller: CrawlController, target: CrawlTarget, summary: RunSummary) -> None:
        try:
            result = await controller.crawl_site(target)
            paths = write_report(result, self.config.output_dir, with_json=self.config.json_reports)
        except MalformedTargetError as exc:
            report_malformed_target(target, exc)
            summary.failed.append(target.site_name)
            return
        except Exception as exc:
            report_site_failure(target, exc)
            summary.failed.append(target.site_name)
            return
        summary.processed.append(target.site_name)
        summary.reports.extend(paths)
        summary.total_emails += len(result.emails)
        logger.info(
            "Email extraction complete for %s: %d unique emails, saved to %s",
            target.site_name, len(result.emails), paths[0],
        )


async def run_scout(config: ScoutConfig) -> RunSummary:
    """Запускает Engine с настройками по умолчанию; используется CLI."""
    return await Engine(config).run()
