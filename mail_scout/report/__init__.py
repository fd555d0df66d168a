# File: mail_scout/report/__init__.py
"""mail_scout.report: Где лежат отчёты, проверка их наличия и запись (текст и JSON)."""

from __future__ import annotations

from pathlib import Path
from typing import List, Union

from mail_scout.models import SiteResult
from mail_scout.report.json_report import render_json
from mail_scout.report.text_report import render_text, write_text
from mail_scout.utils import sanitize_name

REPORT_SUFFIX = "_emails.txt"


def report_path(output_dir: Union[str, Path], site_name: str) -> Path:
    """Путь к текстовому отчёту компании: ``<output_dir>/<безопасное имя>_emails.txt``."""
    return Path(output_dir) / f"{sanitize_name(site_name)}{REPORT_SUFFIX}"


def report_exists(output_dir: Union[str, Path], site_name: str) -> bool:
    return report_path(output_dir, site_name).is_file()


def write_report(result: SiteResult, output_dir: Union[str, Path], *, with_json: bool = False) -> List[Path]:
    """Записывает текстовый отчёт (и при необходимости JSON) и возвращает пути файлов."""
    text_path = report_path(output_dir, result.target.site_name)
    written = [write_text(result, text_path)]
    if with_json:
        written.append(render_json(result, text_path.with_suffix(".json")))
    return written


__all__ = ["render_json", "render_text", "report_exists", "report_path", "write_report", "write_text"]
