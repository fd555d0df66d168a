# mail_scout/crawler/link_extractor.py
"""
Link extraction helpers: anchor enumeration for static HTML and the
same-host filter applied to every rendered page.
"""
from __future__ import annotations

from typing import Iterable, List
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup
from bs4.element import Tag


def anchor_hrefs(html: str, page_url: str) -> List[str]:
    """
    Return the href of every ``<a>`` in *html*, resolved against the document
    base (``<base href>`` when present, otherwise *page_url*), in document order.
    """
    soup = BeautifulSoup(html, "html.parser")
    base = page_url
    base_tag = soup.find("base", href=True)
    if isinstance(base_tag, Tag):
        base_href = base_tag.get("href")
        if isinstance(base_href, str) and base_href.strip():
            base = urljoin(page_url, base_href.strip())

    links: List[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        try:
            links.append(urljoin(base, href_val.strip()))
        except ValueError:
            continue
    return links


def same_host_links(hrefs: Iterable[str], page_url: str, limit: int) -> List[str]:
    """
    Keep absolute http(s) links whose hostname equals the hostname of
    *page_url*. Fragments are dropped, duplicates removed, document order
    preserved, and at most *limit* links are returned.
    """
    try:
        host = urlparse(page_url).hostname
    except ValueError:
        return []
    if not host:
        return []

    links: List[str] = []
    seen = set()
    for href in hrefs:
        if len(links) >= limit:
            break
        try:
            absolute = urldefrag(urljoin(page_url, href)).url
            parsed = urlparse(absolute)
            link_host = parsed.hostname
        except ValueError:
            continue
        if parsed.scheme not in ("http", "https") or link_host != host:
            continue
        if absolute not in seen:
            seen.add(absolute)
            links.append(absolute)
    return links


__all__ = ["anchor_hrefs", "same_host_links"]
