# === FILE: mail_scout/cli.py ===
"""
Точка входа для запуска MailScout через командную строку.

Команды:
  run       Обойти сайты из таблицы компаний и сохранить отчёты
  extract   Извлечь адреса из локального HTML/текстового файла
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Команда run опции:
  --input PATH        Таблица компаний (override input_file)
  --output-dir PATH   Каталог отчётов (override output_dir)
  --limit INT         Макс. число страниц на сайт (override max_pages_per_site)
  --renderer NAME     playwright или http

Дополнительно:
  --version, -v       Показать версию MailScout

Пример:
  mail_scout --log-level DEBUG run --input companydetails.txt --limit 10
"""
import asyncio
import sys
from pathlib import Path

import click

from mail_scout import __version__
from mail_scout.config import load_config
from mail_scout.engine import run_scout
from mail_scout.errors import report_run_failure
from mail_scout.extractor import extract_emails
from mail_scout.logger import DEFAULT_FORMAT, configure

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='MailScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд MailScout CLI."""
    configure(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('run', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--input', '-i', 'input_file',
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help='Таблица компаний (Markdown)'
)
@click.option(
    '--output-dir', '-o', 'output_dir',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Каталог для отчётов'
)
@click.option(
    '--limit', '-l', 'limit',
    type=click.IntRange(min=1),
    default=None,
    help='Макс. число страниц на сайт (override max_pages_per_site)'
)
@click.option(
    '--renderer', '-r', 'renderer',
    type=click.Choice(['playwright', 'http']),
    default=None,
    help='Бэкенд загрузки страниц'
)
@click.pass_context
def run(ctx, input_file, output_dir, limit, renderer):
    """Обойти сайты и сохранить отчёты с найденными адресами."""
    overrides = {
        'input_file': input_file,
        'output_dir': output_dir,
        'max_pages_per_site': limit,
        'renderer': renderer,
    }
    cfg = ctx.obj['config'].model_copy(update={k: v for k, v in overrides.items() if v is not None})
    click.echo(f'Starting run with input: {cfg.input_file}')
    try:
        summary = asyncio.run(run_scout(cfg))
    except FileNotFoundError as e:
        print_error(f'Ошибка: {e}')
    except Exception as e:
        report_run_failure(e)
        print_error(f'Ошибка при обходе: {e}')

    click.echo(
        f'Processed: {len(summary.processed)}, skipped: {len(summary.skipped)}, '
        f'failed: {len(summary.failed)}, emails: {summary.total_emails}'
    )
    for path in summary.reports:
        click.echo(f'Report: {path}')


@cli.command('extract', context_settings=CONTEXT_SETTINGS)
@click.argument('source', type=click.File('r', encoding='utf-8', errors='replace'))
def extract(source):
    """Извлечь адреса из файла (или '-' для stdin) без обхода сайта."""
    for email in extract_emails(source.read()):
        click.echo(email)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
