from __future__ import annotations

import os

import pytest
from pydantic import ValidationError

from rutypo.core.config import TypographConfig, load_typograph_config

ENV_KEYS = ("TYPO_LAYOUT", "TYPO_CLASS_PREFIX", "TYPO_NOWRAP", "TYPO_ENTITIES", "TYPO_DISABLED_RULES")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    yield
    for key in ENV_KEYS:
        os.environ.pop(key, None)


@pytest.fixture
def no_dotenv(tmp_path):
    return tmp_path / "absent.env"


def test_missing_file_gives_defaults(tmp_path, no_dotenv):
    cfg = load_typograph_config(tmp_path / "nope.yaml", env_path=no_dotenv)
    assert cfg == TypographConfig()
    assert cfg.layout == "class"
    assert cfg.nowrap is True
    assert cfg.disabled_rules == []


def test_yaml_section_is_read(tmp_path, no_dotenv):
    path = tmp_path / "typograph.yaml"
    path.write_text(
        "typograph:\n  layout: style\n  entities: true\n  disabled_rules: [word_sup]\n",
        encoding="utf-8",
    )
    cfg = load_typograph_config(path, env_path=no_dotenv)
    assert cfg.layout == "style"
    assert cfg.entities is True
    assert cfg.disabled_rules == ["word_sup"]


def test_yaml_without_section(tmp_path, no_dotenv):
    path = tmp_path / "flat.yaml"
    path.write_text("nowrap: false\nclass_prefix: typo-\n", encoding="utf-8")
    cfg = load_typograph_config(path, env_path=no_dotenv)
    assert cfg.nowrap is False
    assert cfg.class_prefix == "typo-"


def test_environment_overrides_yaml(tmp_path, monkeypatch, no_dotenv):
    path = tmp_path / "typograph.yaml"
    path.write_text("typograph:\n  layout: style\n", encoding="utf-8")
    monkeypatch.setenv("TYPO_LAYOUT", "both")
    monkeypatch.setenv("TYPO_DISABLED_RULES", '["acute_accent"]')

    cfg = load_typograph_config(path, env_path=no_dotenv)
    assert cfg.layout == "both"
    assert cfg.disabled_rules == ["acute_accent"]


def test_dotenv_file_is_loaded(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("TYPO_ENTITIES=true\n", encoding="utf-8")

    cfg = load_typograph_config(tmp_path / "nope.yaml", env_path=env_file)
    assert cfg.entities is True


def test_invalid_layout_is_rejected(tmp_path, no_dotenv):
    path = tmp_path / "typograph.yaml"
    path.write_text("typograph:\n  layout: fancy\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_typograph_config(path, env_path=no_dotenv)


def test_invalid_env_layout_is_rejected(tmp_path, monkeypatch, no_dotenv):
    monkeypatch.setenv("TYPO_LAYOUT", "fancy")
    with pytest.raises(ValidationError):
        load_typograph_config(tmp_path / "nope.yaml", env_path=no_dotenv)


def test_repository_config_matches_defaults(no_dotenv):
    assert load_typograph_config(env_path=no_dotenv) == TypographConfig()
