# File: mail_scout/utils.py
"""mail_scout.utils: Утилиты для разбора URL, имён файлов отчётов и дедупликации."""

from __future__ import annotations

import re
from typing import Collection, Hashable, List, Optional, Sequence, TypeVar
from urllib.parse import urlparse

from mail_scout.logger import logger

__all__: Sequence[str] = (
    "get_hostname",
    "sanitize_name",
    "remove_duplicates",
)

_T = TypeVar("_T", bound=Hashable)

_UNSAFE_CHARS_RE = re.compile(r"[^a-zA-Z0-9_\-\s]")
_WHITESPACE_RE = re.compile(r"\s+")
_UNDERSCORES_RE = re.compile(r"_+")
MAX_NAME_LENGTH = 100


def get_hostname(url: str) -> Optional[str]:
    """Возвращает hostname http(s)-URL в нижнем регистре или None, если URL не разбирается."""
    try:
        parsed = urlparse(url.strip())
        host = parsed.hostname
    except ValueError as exc:
        logger.warning("Could not parse domain from URL: %s (%s)", url, exc)
        return None
    if parsed.scheme not in ("http", "https") or not host:
        logger.debug("URL has no http(s) hostname: %s", url)
        return None
    return host


def sanitize_name(name: str) -> str:
    """Превращает название компании в безопасное имя файла (не длиннее 100 символов)."""
    safe = _UNSAFE_CHARS_RE.sub("_", name)
    safe = _WHITESPACE_RE.sub("_", safe)
    safe = _UNDERSCORES_RE.sub("_", safe)
    return safe.strip()[:MAX_NAME_LENGTH]


def remove_duplicates(items: Collection[_T]) -> List[_T]:
    """Удаляет дубликаты, сохраняя порядок первого появления."""
    unique = list(dict.fromkeys(items))
    removed = len(items) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate entries", removed)
    return unique
