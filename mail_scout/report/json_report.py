# mail_scout/report/json_report.py

"""
Генерация JSON-отчёта для проекта MailScout.

Сериализация объекта SiteResult в файл рядом с текстовым отчётом.
"""
import json
from pathlib import Path

from mail_scout.models import SiteResult


def render_json(result: SiteResult, output_path: Path | str) -> Path:
    """
    Сохраняет результат обхода сайта в формате JSON по указанному пути.

    :param result: объект SiteResult с данными обхода
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(result.to_dict(), f, ensure_ascii=False, indent=2)

    return output
