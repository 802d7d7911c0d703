"""
================================================================================
EN: Text Processing Pipelines for the typograph
RU: Конвейеры обработки текста для типографа
================================================================================

EN: 1. process_text: Apply the rule set to a string
RU: 1. process_text: Применяет набор правил к строке

EN: 2. process_file: Process one file and write the result
RU: 2. process_file: Обрабатывает один файл и записывает результат

EN: 3. process_dir_pipeline: Process every matching file of a directory tree
RU: 3. process_dir_pipeline: Обрабатывает все подходящие файлы дерева каталогов

EN: Rules are idempotent on their own output, so pipelines can be re-run safely.
RU: Правила идемпотентны на собственном выводе, поэтому конвейеры можно перезапускать.
================================================================================
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

# EN: Import configuration loading utilities
# RU: Импортируем утилиты для загрузки конфигурации
from .config import TypographConfig, load_typograph_config
from .diagnostics import ProcessDiagnostics, write_report
from .engine import Typograph
from .io import iter_input_files, read_text, save_text

logger = logging.getLogger(__name__)


def process_text(text: str, config: Optional[TypographConfig] = None) -> str:
    """
    EN: Process a single string with an engine built from ``config``.
    RU: Обрабатывает одну строку движком, собранным по ``config``.
    """
    engine = Typograph.from_config(config or TypographConfig())
    return engine.process(text)


def process_file(
    src: str | Path,
    dst: str | Path,
    *,
    engine: Optional[Typograph] = None,
    config: Optional[TypographConfig] = None,
) -> ProcessDiagnostics:
    """
    EN: Read ``src``, apply the rules and write the result to ``dst``.
    RU: Читает ``src``, применяет правила и записывает результат в ``dst``.

    EN: When ``config`` is given it is recorded in ``diagnostics.extra["config"]``
    RU: Переданный ``config`` сохраняется в ``diagnostics.extra["config"]``

    Returns / Возвращает:
        EN: Diagnostics with per-rule traces
        RU: Диагностика с трассировкой по правилам
    """
    typo = engine or Typograph.from_config(config or TypographConfig())
    text = read_text(src)
    diag = typo.process_with_trace(text, source=str(src))
    if config is not None:
        diag.extra["config"] = config.model_dump()
    save_text(diag.text, dst)
    return diag


# ============================================================================
# EN: PIPELINE: Typograph every file of a directory
# RU: КОНВЕЙЕР: Типографирование всех файлов каталога
# ============================================================================
def process_dir_pipeline(
    in_dir: str | Path,
    out_dir: str | Path,
    *,
    pattern: str = "*.html",
    config_path: Optional[str | Path] = None,
    report_dir: Optional[str | Path] = None,
) -> List[Path]:
    """
    EN: Process all files matching ``pattern`` in ``in_dir`` and mirror them into ``out_dir``.
    RU: Обрабатывает все файлы ``in_dir`` по маске ``pattern`` и повторяет структуру в ``out_dir``.

    Parameters / Параметры:
    ----------------------
    in_dir: EN: Directory with input files
            RU: Директория с входными файлами
    out_dir: EN: Destination directory (created if missing)
             RU: Директория назначения (создаётся, если отсутствует)
    pattern: EN: Glob for input files
             RU: Маска входных файлов
    config_path: EN: Optional path to typograph.yaml
                 RU: Необязательный путь к typograph.yaml
    report_dir: EN: If set, per-file diagnostics are appended as JSONL
                RU: Если задан, диагностика по файлам дописывается в JSONL

    Returns / Возвращает:
    --------------------
    EN: List of written files
    RU: Список записанных файлов
    """
    in_p = Path(in_dir)
    out_p = Path(out_dir)
    if not in_p.is_dir():
        raise FileNotFoundError(f"Каталог не найден: {in_p}")

    cfg = load_typograph_config(config_path)
    engine = Typograph.from_config(cfg)

    # EN: If the output directory equals the input one, files are rewritten in place
    # RU: Если выходной каталог совпадает со входным, файлы перезаписываются на месте
    out_p.mkdir(parents=True, exist_ok=True)

    produced: List[Path] = []
    for src in iter_input_files(in_p, pattern):
        dst = out_p / src.relative_to(in_p)
        try:
            diag = process_file(src, dst, engine=engine, config=cfg)
        except UnicodeDecodeError as exc:
            logger.warning("Пропускаем %s: файл не в UTF-8 (%s)", src, exc)
            continue

        if report_dir is not None:
            write_report(diag, report_dir)

        logger.info(
            "Обработан %s → %s (правила: %s)",
            src,
            dst,
            ", ".join(diag.changed_rules) or "без изменений",
        )
        produced.append(dst)

    return produced
