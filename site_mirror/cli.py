# === FILE: site_mirror/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска SiteMirror через командную строку.

Команды:
  run URL DIR BASE [FREQ] [-i PREFIX...]    Новый обход от URL в каталог DIR
  run -a [DIR] [FREQ]                       Повторить отказы прошлого запуска из DIR
  config                                    Показать текущую конфигурацию
  status DIR                                Сводка по сохранённому состоянию

Аргументы run:
  BASE    Число сегментов пути URL, задающих границу обхода
  FREQ    Пауза перед запуском каждой задачи, мс
  -i      Игнорируемые префиксы относительно границы обхода (все аргументы после -i)

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (значения по умолчанию, если не указан)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (только консоль, если не указан)

Пример:
  site-mirror run https://docs.rs/url/latest/url/ dist-url 3 250 -i struct.Host.html
"""
import asyncio
import json
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from site_mirror import __version__
from site_mirror.config import STATE_DIR_NAME, load_config, override_config
from site_mirror.engine import resume_mirror, start_mirror
from site_mirror.errors import ArgumentError, StateError
from site_mirror.logger import init_logging, logger
from site_mirror.state import CrawlState

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str, code: int = 1):
    click.secho(message, fg='red', err=True)
    sys.exit(code)


IGNORE_FLAGS = ("-i", "--ignore")


def _split_ignored(tokens: tuple) -> tuple[list, list]:
    """Делит токены run на позиционные аргументы и префиксы после -i.

    Every token after the first ``-i`` is an ignore prefix; repeating the
    flag (``-i a -i b``) is accepted as well.
    """
    positional: list = []
    ignored: list = []
    seen_flag = False
    for tok in tokens:
        if tok in IGNORE_FLAGS:
            seen_flag = True
        elif tok.startswith("--ignore="):
            seen_flag = True
            ignored.append(tok.split("=", 1)[1])
        elif seen_flag:
            ignored.append(tok)
        elif tok.startswith("-") and len(tok) > 1:
            raise click.NoSuchOption(tok)
        else:
            positional.append(tok)
    if seen_flag and not ignored:
        raise click.UsageError("-i expects at least one prefix")
    return positional, ignored


def _parse_ms(value: str) -> int:
    if not value.isdigit():
        raise click.UsageError(f"FREQ must be a non-negative number of milliseconds, got {value!r}")
    return int(value)


def _fresh_args(args: tuple) -> dict:
    if len(args) not in (3, 4):
        raise click.UsageError("run expects URL DIR BASE [FREQ]")
    url, out_dir, base = args[:3]
    if not base.isdigit():
        raise click.UsageError(f"BASE must be a non-negative integer, got {base!r}")
    return {
        "seed_url": url,
        "output_dir": Path(out_dir),
        "base_index": int(base),
        "frequency_ms": _parse_ms(args[3]) if len(args) == 4 else None,
    }


def _resume_args(args: tuple) -> dict:
    if len(args) > 2:
        raise click.UsageError("run -a expects [DIR] [FREQ]")
    if len(args) == 1 and args[0].isdigit():
        return {"frequency_ms": int(args[0])}
    changes: dict = {}
    if args:
        changes["output_dir"] = Path(args[0])
    if len(args) == 2:
        changes["frequency_ms"] = _parse_ms(args[1])
    return changes


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SiteMirror, version %(version)s')
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
    help='Путь к файлу логов (только консоль, если не указан)'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file):
    """Группа команд SiteMirror CLI."""
    init_logging(level=log_level, log_file=str(log_file) if log_file else None)
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('run', context_settings=dict(CONTEXT_SETTINGS, ignore_unknown_options=True))
@click.argument('tokens', nargs=-1, type=click.UNPROCESSED)
@click.option(
    '--again', '-a', 'again', is_flag=True,
    help='Возобновить: повторить только URL из журнала отказов'
)
@click.option(
    '--concurrency', 'concurrency',
    type=click.IntRange(min=0), default=None,
    help='Лимит одновременных загрузок (0 = без лимита)'
)
@click.pass_context
def run(ctx, tokens, again, concurrency):
    """Зеркалировать сайт или возобновить прерванный запуск.

    URL DIR BASE [FREQ] [-i PREFIX...]: все аргументы после -i считаются
    игнорируемыми префиксами.
    """
    args, ignored = _split_ignored(tokens)
    if again and ignored:
        raise click.UsageError("-i cannot be combined with -a; the ignore list is restored from state")
    changes = _resume_args(args) if again else _fresh_args(args)
    changes["ignored"] = list(ignored) or None
    changes["max_concurrency"] = concurrency
    try:
        cfg = override_config(ctx.obj['config'], **changes)
    except ValidationError as e:
        raise click.UsageError(str(e)) from e

    runner = resume_mirror if again else start_mirror
    try:
        result = asyncio.run(runner(cfg))
    except (ArgumentError, StateError) as e:
        print_error(f'Ошибка: {e}')
    except KeyboardInterrupt:
        print_error('Прервано; состояние сохранено, продолжите с помощью "run -a"', code=130)
    except ExceptionGroup as eg:
        logger.error("crawl aborted", exc_info=eg)
        print_error(f'Обход прерван из-за ошибки: {eg.exceptions[0]!r}; состояние сохранено')

    click.echo(
        f'Mirrored {result.pages} page(s) and {result.assets} asset(s) into {cfg.output_dir}'
    )
    if result.failed:
        click.secho(
            f'{result.failed} URL(s) failed, see {CrawlState(cfg.state_dir).failed_path}',
            fg='yellow', err=True,
        )


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


@cli.command('status', context_settings=CONTEXT_SETTINGS)
@click.argument('out_dir', type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option('--pretty', is_flag=True, help='Преформатировать JSON-вывод (отступ 2)')
def status(out_dir, pretty):
    """Показать сводку сохранённого состояния каталога зеркала."""
    try:
        snapshot = CrawlState(out_dir / STATE_DIR_NAME).load()
    except StateError as e:
        print_error(f'Ошибка: {e}')
    summary = {
        'scope_base': snapshot.scope_base,
        'ignored': snapshot.ignored,
        'visited': len(snapshot.visited),
        'failed': {kind.value: urls for kind, urls in snapshot.failed.items()},
    }
    click.echo(json.dumps(summary, ensure_ascii=False, indent=2 if pretty else None))


if __name__ == "__main__":
    cli()
