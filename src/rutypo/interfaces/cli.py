from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich import print
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from rutypo.core.config import DEFAULT_CONFIG_PATH, load_typograph_config
from rutypo.core.diagnostics import ProcessDiagnostics, write_report
from rutypo.core.engine import Typograph
from rutypo.core.errors import TypographError
from rutypo.core.io import read_text, save_text
from rutypo.core.misc import build_misc_ruleset
from rutypo.core.pipelines import process_dir_pipeline


app = typer.Typer(no_args_is_help=True, add_completion=False)

err_console = Console(stderr=True)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Подробный лог в stderr"),
):
    """Типограф для русскоязычных HTML-фрагментов."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _print_trace(diag: ProcessDiagnostics) -> None:
    table = Table(title="Правила")
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Правило")
    table.add_column("Тип")
    table.add_column("Изменения", justify="center")
    table.add_column("Длина", justify="right")
    for idx, trace in enumerate(diag.rules, start=1):
        table.add_row(
            str(idx),
            trace.name,
            trace.kind,
            "[green]да[/green]" if trace.changed else "—",
            f"{trace.length_before} → {trace.length_after}",
        )
    err_console.print(table)
    err_console.print(f"[dim]duration={diag.duration_ms or 0:.1f}ms[/dim]")


@app.command("process")
def process_cmd(
    src: Optional[Path] = typer.Argument(None, help="HTML-файл; без аргумента или '-' читается stdin"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Куда записать результат (по умолчанию stdout)"),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config", help="Путь к typograph.yaml"),
    trace: bool = typer.Option(False, "--trace", help="Показать таблицу применённых правил"),
    report: Optional[Path] = typer.Option(None, "--report", help="Каталог для JSONL-диагностики"),
):
    if src is None or str(src) == "-":
        text = sys.stdin.read()
        source = "<stdin>"
    else:
        if not src.exists():
            typer.secho(f"Файл не найден: {src}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1)
        text = read_text(src)
        source = str(src)

    cfg = load_typograph_config(config)
    try:
        engine = Typograph.from_config(cfg)
        diag = engine.process_with_trace(text, source=source)
        diag.extra["config"] = cfg.model_dump()
    except TypographError as exc:
        typer.secho(f"Ошибка типографа: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)

    if out is not None:
        save_text(diag.text, out)
        err_console.print(f"[green]Сохранено[/green]: {out}")
    else:
        sys.stdout.write(diag.text)

    if report is not None:
        write_report(diag, report)
    if trace:
        _print_trace(diag)


@app.command("process-dir")
def process_dir_cmd(
    in_dir: Path = typer.Option(..., "--in", help="Каталог с HTML-файлами"),
    out_dir: Path = typer.Option(..., "--out", help="Каталог для результатов"),
    pattern: str = typer.Option("*.html", "--glob", help="Маска файлов"),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config", help="Путь к typograph.yaml"),
    report: Optional[Path] = typer.Option(None, "--report", help="Каталог для JSONL-диагностики"),
):
    try:
        produced = process_dir_pipeline(in_dir, out_dir, pattern=pattern, config_path=config, report_dir=report)
    except FileNotFoundError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except TypographError as exc:
        typer.secho(f"Ошибка типографа: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)
    for p in produced:
        print(f"[green]Обработан[/green]: {p}")
    if not produced:
        print(f"[yellow]Файлы по маске {pattern} не найдены[/yellow]")


@app.command("rules")
def rules_cmd(
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config", help="Путь к typograph.yaml"),
):
    cfg = load_typograph_config(config)
    ruleset = build_misc_ruleset()
    disabled = set(cfg.disabled_rules)

    table = Table(title=f"Группа правил: {ruleset.title}")
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Имя", no_wrap=True)
    table.add_column("Описание")
    table.add_column("Тип")
    table.add_column("Состояние")
    for idx, rule in enumerate(ruleset, start=1):
        state = "[red]выключено[/red]" if rule.name in disabled else "[green]включено[/green]"
        table.add_row(str(idx), rule.name, rule.description, rule.kind, state)
    print(table)


def main():  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
