# mail_scout/input_table.py
"""
Reader for the company table: a Markdown pipe table with two columns,
company name and website URL.

    | Company Name | Website URL |
    |--------------|-------------|
    | Acme         | https://acme.io |
"""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Union

from mail_scout.logger import logger
from mail_scout.models import CrawlTarget
from mail_scout.utils import remove_duplicates

_HEADER = ("company name", "website url")


def parse_targets(lines: Iterable[str]) -> List[CrawlTarget]:
    """Parse table rows into targets, deduplicated by (name, url), first wins."""
    targets: List[CrawlTarget] = []
    for line in lines:
        row = line.strip()
        if not (row.startswith("|") and row.endswith("|")) or len(row) < 2:
            continue
        parts = [part.strip() for part in row[1:-1].split("|")]
        if len(parts) != 2:
            continue
        name, url = parts
        if name.startswith("---") or not name:
            continue
        if (name.lower(), url.lower()) == _HEADER:
            continue
        if not url.startswith(("http://", "https://")):
            logger.debug("Skipping row without http(s) URL: %s", row)
            continue
        targets.append(CrawlTarget(site_name=name, root_url=url))
    return remove_duplicates(targets)


def read_targets(path: Union[str, Path]) -> List[CrawlTarget]:
    """Read the table from *path*; raises FileNotFoundError if it is missing."""
    p = Path(path)
    if not p.is_file():
        logger.error("%s not found. Please create this file with your company data.", p)
        raise FileNotFoundError(f"Company table not found: {p}")
    targets = parse_targets(p.read_text(encoding="utf-8").splitlines())
    logger.info("Successfully parsed %d companies from %s", len(targets), p)
    return targets


__all__ = ["parse_targets", "read_targets"]
