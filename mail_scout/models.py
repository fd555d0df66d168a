# mail_scout/models.py
"""
Data models shared by the crawler, the orchestrator and the report writers.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Deque, List, Optional, Set

from mail_scout.errors import MalformedTargetError
from mail_scout.utils import get_hostname


@dataclass(frozen=True, slots=True)
class CrawlTarget:
    """One row of the input table: a site name and the URL the crawl starts from."""

    site_name: str
    root_url: str

    @property
    def key(self) -> tuple[str, str]:
        return (self.site_name, self.root_url)

    @property
    def hostname(self) -> str:
        """Hostname of the root URL; raises MalformedTargetError when there is none."""
        host = get_hostname(self.root_url)
        if host is None:
            raise MalformedTargetError(self, "hostname cannot be parsed")
        return host


@dataclass(slots=True)
class FetchResult:
    """Outcome of one Page Fetcher call (after its retries)."""

    content: str = ""
    outbound_links: List[str] = field(default_factory=list)
    succeeded: bool = True
    error_detail: Optional[str] = None

    @classmethod
    def failure(cls, detail: str) -> FetchResult:
        return cls(content="", outbound_links=[], succeeded=False, error_detail=detail)


@dataclass(slots=True)
class PageRecord:
    """A visited page and the addresses found on it."""

    url: str
    emails: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def email_count(self) -> int:
        return len(self.emails)


@dataclass(slots=True)
class CrawlState:
    """Mutable state of a single site crawl. Never shared between sites."""

    frontier: Deque[str] = field(default_factory=deque)
    queued: Set[str] = field(default_factory=set)
    visited: Set[str] = field(default_factory=set)
    emails: Set[str] = field(default_factory=set)
    pages: List[PageRecord] = field(default_factory=list)

    def enqueue(self, url: str) -> bool:
        """Append *url* to the frontier unless it was visited or is already queued."""
        if url in self.visited or url in self.queued:
            return False
        self.frontier.append(url)
        self.queued.add(url)
        return True

    def dequeue(self) -> str:
        url = self.frontier.popleft()
        self.queued.discard(url)
        return url


@dataclass(slots=True)
class SiteResult:
    """Aggregated result of crawling one site, the input of the report writers."""

    target: CrawlTarget
    hostname: str
    emails: List[str] = field(default_factory=list)
    pages: List[PageRecord] = field(default_factory=list)
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def pages_visited(self) -> int:
        return len(self.pages)

    @property
    def failed_pages(self) -> List[PageRecord]:
        return [p for p in self.pages if p.error is not None]

    def to_dict(self) -> dict:
        return {
            "company": self.target.site_name,
            "website": self.target.root_url,
            "domain": self.hostname,
            "generated_at": self.generated_at.isoformat(),
            "total_pages": self.pages_visited,
            "total_emails": len(self.emails),
            "emails": list(self.emails),
            "pages": [
                {"url": p.url, "email_count": p.email_count, "emails": list(p.emails), "error": p.error}
                for p in self.pages
            ],
        }


__all__ = ["CrawlState", "CrawlTarget", "FetchResult", "PageRecord", "SiteResult"]
