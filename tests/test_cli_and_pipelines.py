from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from rutypo.core.config import TypographConfig
from rutypo.core.pipelines import process_dir_pipeline, process_file, process_text
from rutypo.interfaces.cli import app
from scripts.check_idempotence import main as check_idempotence_main

SPAN = '<span class="nowrap">'

runner = CliRunner()


@pytest.fixture
def html_tree(tmp_path: Path) -> Path:
    root = tmp_path / "in"
    (root / "sub").mkdir(parents=True)
    (root / "a.html").write_text("<p>с 10:00-11:30</p>", encoding="utf-8")
    (root / "sub" / "b.html").write_text("<p>в XII-XV в.</p>", encoding="utf-8")
    (root / "notes.txt").write_text("10:00-11:30", encoding="utf-8")
    return root


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "typograph.yaml"
    path.write_text("typograph:\n  layout: class\n", encoding="utf-8")
    return path


def test_process_text_uses_config():
    assert process_text("10:00-11:30", TypographConfig(nowrap=False)) == "<nobr>10:00—11:30</nobr>"


def test_process_file_writes_result(tmp_path: Path):
    src = tmp_path / "in.html"
    dst = tmp_path / "out" / "in.html"
    src.write_text("замо`к", encoding="utf-8")

    diag = process_file(src, dst)

    assert dst.read_text(encoding="utf-8") == "замо\u0301к"
    assert diag.changed_rules == ["acute_accent"]
    assert diag.source == str(src)


def test_process_dir_pipeline_mirrors_tree(html_tree: Path, tmp_path: Path, config_file: Path):
    out_dir = tmp_path / "out"
    report_dir = tmp_path / "reports"

    produced = process_dir_pipeline(html_tree, out_dir, config_path=config_file, report_dir=report_dir)

    assert produced == [out_dir / "a.html", out_dir / "sub" / "b.html"]
    assert (out_dir / "a.html").read_text(encoding="utf-8") == f"<p>с {SPAN}10:00—11:30</span></p>"
    assert (out_dir / "sub" / "b.html").read_text(encoding="utf-8") == f"<p>в {SPAN}XII—XV вв.</span></p>"
    assert not (out_dir / "notes.txt").exists()

    reports = list(report_dir.glob("*.jsonl"))
    assert len(reports) == 1
    rows = [json.loads(line) for line in reports[0].read_text(encoding="utf-8").splitlines()]
    assert [row["changed_rules"] for row in rows] == [["time_interval"], ["century_period"]]
    assert all(row["extra"]["config"]["layout"] == "class" for row in rows)


def test_process_dir_pipeline_skips_non_utf8(tmp_path: Path, config_file: Path):
    in_dir = tmp_path / "in"
    in_dir.mkdir()
    (in_dir / "bad.html").write_bytes(b"\xff\xfe\xfa")
    (in_dir / "good.html").write_text("^abc ", encoding="utf-8")

    produced = process_dir_pipeline(in_dir, tmp_path / "out", config_path=config_file)

    assert produced == [tmp_path / "out" / "good.html"]


def test_process_dir_pipeline_requires_existing_dir(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        process_dir_pipeline(tmp_path / "missing", tmp_path / "out")


def test_cli_process_stdin(config_file: Path):
    result = runner.invoke(app, ["process", "--config", str(config_file)], input="10:00-11:30")
    assert result.exit_code == 0, result.output
    assert result.stdout == f"{SPAN}10:00—11:30</span>"


def test_cli_process_file_to_out(tmp_path: Path, config_file: Path):
    src = tmp_path / "page.html"
    out = tmp_path / "page.out.html"
    src.write_text("слово&nbsp;<span class=\"nowrap\">текст</span>", encoding="utf-8")

    result = runner.invoke(app, ["process", str(src), "--out", str(out), "--config", str(config_file)])

    assert result.exit_code == 0, result.output
    assert out.read_text(encoding="utf-8") == f"{SPAN}слово текст</span>"


def test_cli_process_missing_file(tmp_path: Path):
    result = runner.invoke(app, ["process", str(tmp_path / "nope.html")])
    assert result.exit_code == 1


@pytest.fixture
def unknown_rule_config(tmp_path: Path) -> Path:
    path = tmp_path / "broken.yaml"
    path.write_text("typograph:\n  disabled_rules: [nope]\n", encoding="utf-8")
    return path


def test_cli_process_unknown_disabled_rule(unknown_rule_config: Path):
    result = runner.invoke(app, ["process", "--config", str(unknown_rule_config)], input="10:00-11:30")
    assert result.exit_code == 2
    assert isinstance(result.exception, SystemExit)


def test_cli_process_dir_unknown_disabled_rule(html_tree: Path, tmp_path: Path, unknown_rule_config: Path):
    result = runner.invoke(
        app,
        ["process-dir", "--in", str(html_tree), "--out", str(tmp_path / "out"), "--config", str(unknown_rule_config)],
    )
    assert result.exit_code == 2
    assert isinstance(result.exception, SystemExit)


def test_cli_process_normalises_line_endings(tmp_path: Path, config_file: Path):
    src = tmp_path / "crlf.html"
    out = tmp_path / "crlf.out.html"
    src.write_bytes("<p>с 10:00-11:30</p>\r\n<p>замо`к</p>\r\n".encode("utf-8"))

    result = runner.invoke(app, ["process", str(src), "--out", str(out), "--config", str(config_file)])

    assert result.exit_code == 0, result.output
    assert out.read_bytes().decode("utf-8") == f"<p>с {SPAN}10:00—11:30</span></p>\n<p>замо\u0301к</p>\n"


def test_cli_process_dir(html_tree: Path, tmp_path: Path, config_file: Path):
    out_dir = tmp_path / "out"
    result = runner.invoke(
        app,
        ["process-dir", "--in", str(html_tree), "--out", str(out_dir), "--config", str(config_file)],
        env={"COLUMNS": "200"},
    )
    assert result.exit_code == 0, result.output
    assert (out_dir / "sub" / "b.html").exists()


def test_cli_rules_lists_rule_group(config_file: Path):
    result = runner.invoke(app, ["rules", "--config", str(config_file)], env={"COLUMNS": "200"})
    assert result.exit_code == 0, result.output
    assert "Прочее" in result.output
    for name in ("acute_accent", "word_sup", "century_period", "time_interval", "expand_no_nbsp_in_nobr"):
        assert name in result.output


def test_check_idempotence_script(html_tree: Path, capsys):
    code = check_idempotence_main([str(html_tree)])
    captured = capsys.readouterr()
    assert code == 0
    assert "Проверено файлов: 2" in captured.out
