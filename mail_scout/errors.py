# mail_scout/errors.py
"""
Error taxonomy for MailScout and the functions that report each kind.

Failures are handled at the narrowest scope that can continue:
page failures never abort a site, site failures never abort the run.
Every handled failure goes through one of the ``report_*`` helpers below.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from mail_scout.logger import logger

if TYPE_CHECKING:
    from mail_scout.models import CrawlTarget


class ScoutError(Exception):
    """Base class for MailScout errors."""


class MalformedTargetError(ScoutError):
    """The root URL of a crawl target has no parseable hostname."""

    def __init__(self, target: CrawlTarget, reason: str = "") -> None:
        self.target = target
        message = f"Invalid root URL {target.root_url!r} for {target.site_name}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class RenderError(ScoutError):
    """A renderer backend failed to load or read a page."""


def report_page_failure(url: str, detail: str) -> None:
    logger.error("Page failed: %s (%s)", url, detail)


def report_malformed_target(target: CrawlTarget, exc: MalformedTargetError) -> None:
    logger.error("Skipping %s: %s", target.site_name, exc)


def report_site_failure(target: CrawlTarget, exc: BaseException) -> None:
    logger.error("Crawl of %s (%s) failed: %s", target.site_name, target.root_url, exc, exc_info=exc)


def report_run_failure(exc: BaseException) -> None:
    logger.critical("Run aborted: %s", exc, exc_info=exc)


__all__ = [
    "MalformedTargetError",
    "RenderError",
    "ScoutError",
    "report_malformed_target",
    "report_page_failure",
    "report_run_failure",
    "report_site_failure",
]
