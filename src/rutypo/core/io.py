"""
Input/Output helpers for the typograph.
Модуль ввода/вывода для типографа.
"""
from __future__ import annotations

# Standard library imports / Импорты стандартной библиотеки
from pathlib import Path  # Modern path handling / Современная работа с путями
from typing import Iterator


def read_text(path: str | Path) -> str:
    """
    Read a UTF-8 text file, unifying line endings.
    Читает текстовый файл UTF-8 и унифицирует окончания строк.
    """
    text = Path(path).read_text(encoding="utf-8")
    return text.replace("\r\n", "\n").replace("\r", "\n")


def save_text(text: str, out_path: str | Path) -> None:
    """
    Save text to a file.
    Сохраняет текст в файл.

    Parameters / Параметры:
        text: Text to write / Текст для записи
        out_path: Output file path / Путь к выходному файлу
    """
    out_p = Path(out_path)
    # Create parent directories if they don't exist
    # Создаем родительские директории, если их нет
    out_p.parent.mkdir(parents=True, exist_ok=True)
    out_p.write_text(text, encoding="utf-8")


def iter_input_files(in_dir: str | Path, pattern: str = "*.html") -> Iterator[Path]:
    """
    Yield files under ``in_dir`` matching ``pattern`` in sorted order.
    Выдаёт файлы из ``in_dir``, подходящие под ``pattern``, в отсортированном порядке.
    """
    root = Path(in_dir)
    for path in sorted(root.rglob(pattern)):
        if path.is_file():
            yield path
