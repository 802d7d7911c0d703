from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict, List, Sequence

from rutypo.core.config import DEFAULT_CONFIG_PATH, load_typograph_config
from rutypo.core.engine import Typograph
from rutypo.core.io import iter_input_files, read_text


def check_file(engine: Typograph, path: Path) -> Dict[str, Any]:
    text = read_text(path)
    first = engine.process(text)
    second = engine.process_with_trace(first, source=str(path))
    return {
        "path": str(path),
        "stable": not second.changed,
        "rules": second.changed_rules,
    }


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Проверяет, что повторный прогон типографа не меняет текст."
    )
    parser.add_argument("inputs", nargs="+", type=Path, help="Файлы или каталоги")
    parser.add_argument("--glob", default="*.html", help="Маска файлов в каталогах")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Путь к typograph.yaml")
    parser.add_argument("--json", action="store_true", help="Вывести результат в JSON")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    engine = Typograph.from_config(load_typograph_config(args.config))

    files: List[Path] = []
    for item in args.inputs:
        if item.is_dir():
            files.extend(iter_input_files(item, args.glob))
        else:
            files.append(item)

    results = [check_file(engine, fp) for fp in files]
    unstable = [r for r in results if not r["stable"]]

    if args.json:
        print(json.dumps({"checked": len(results), "unstable": unstable}, ensure_ascii=False, indent=2))
    else:
        for row in unstable:
            print(f"{row['path']}: повторно сработали {', '.join(row['rules'])}")
        print(f"Проверено файлов: {len(results)}, нестабильных: {len(unstable)}")

    return 1 if unstable else 0


if __name__ == "__main__":
    raise SystemExit(main())
