# File: mail_scout/report/text_report.py
"""mail_scout.report.text_report: Генерация текстового отчёта по сайту с помощью Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Union

from jinja2 import Environment, PackageLoader, StrictUndefined

from mail_scout.models import SiteResult

TEMPLATE_NAME = "report.txt.j2"
RULE = "=" * 60

_env = Environment(
    loader=PackageLoader("mail_scout", "templates"),
    autoescape=False,
    trim_blocks=True,
    keep_trailing_newline=True,
    undefined=StrictUndefined,
)


def render_text(result: SiteResult) -> str:
    """Возвращает текст отчёта для результата обхода одного сайта."""
    context: dict[str, Any] = result.to_dict()
    context["rule"] = RULE
    return _env.get_template(TEMPLATE_NAME).render(**context)


def write_text(result: SiteResult, output_path: Union[Path, str]) -> Path:
    """Рендерит отчёт и сохраняет его по указанному пути.

    Args:
        result: объект SiteResult.
        output_path: путь к итоговому .txt-файлу.

    Returns:
        Path до сохранённого файла.

    Пример:
    ```python
    from mail_scout.report.text_report import write_text
    path = write_text(result, 'scraped_data/Acme_emails.txt')
    ```
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_text(result), encoding="utf-8")
    return output_path
