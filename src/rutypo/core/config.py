# ==============================================================================
# Configuration module for typograph settings
# Модуль конфигурации для настроек типографа
# ==============================================================================
# This file manages configuration settings for the typographic rule engine.
# It loads settings from a YAML file and allows environment variables to override them.
#
# Этот файл управляет настройками конфигурации типографа.
# Он загружает настройки из YAML-файла и позволяет переменным окружения переопределять их.
# ==============================================================================

from __future__ import annotations

import logging

# Import Path for working with file paths in a cross-platform way
# Импортируем Path для работы с путями к файлам кросс-платформенным способом
from pathlib import Path

# Import typing helpers / Импортируем помощники типизации
from typing import List, Literal, Optional

# Import yaml to read YAML configuration files
# Импортируем yaml для чтения конфигурационных файлов YAML
import yaml

# Import dotenv so that a local .env can provide TYPO_* variables
# Импортируем dotenv, чтобы локальный .env мог задавать переменные TYPO_*
from dotenv import load_dotenv

# Import Pydantic models for data validation and settings management
# Импортируем модели Pydantic для валидации данных и управления настройками
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

Layout = Literal["class", "style", "both"]


# ==============================================================================
# Main configuration class for the typograph
# Основной класс конфигурации типографа
# ==============================================================================
class TypographConfig(BaseModel):
    """
    Configuration parameters for text processing.
    Параметры конфигурации для обработки текста.

    This class defines how generated markup looks and which rules run.
    Этот класс определяет, как выглядит создаваемая разметка и какие правила работают.
    """

    # How style classes are rendered: CSS class, inline style, or both
    # Как оформляются классы: CSS-класс, инлайн-стиль или оба варианта
    # Default: "class" → <span class="nowrap">
    # По умолчанию: "class" → <span class="nowrap">
    layout: Layout = "class"

    # Prefix added to every generated class name (e.g. "typo-" → "typo-nowrap")
    # Префикс, добавляемый к имени каждого класса (например, "typo-" → "typo-nowrap")
    class_prefix: str = ""

    # Whether non-wrapping blocks are spans; False renders them as <nobr>
    # Оформлять ли неразрывные блоки через span; False — через <nobr>
    nowrap: bool = True

    # Emit HTML entities (&mdash;, &#769;) instead of Unicode characters
    # Выводить HTML-сущности (&mdash;, &#769;) вместо символов Unicode
    entities: bool = False

    # Names of rules that must be skipped
    # Имена правил, которые нужно пропустить
    disabled_rules: List[str] = Field(default_factory=list)


# ==============================================================================
# Environment variable overrides class
# Класс переопределений через переменные окружения
# ==============================================================================
class EnvTypographOverrides(BaseSettings):
    """
    Allows overriding configuration using environment variables.
    Позволяет переопределять конфигурацию через переменные окружения.

    Example: Set TYPO_LAYOUT=style to render inline styles.
    Пример: Установите TYPO_LAYOUT=style для инлайн-стилей.
    """

    model_config = SettingsConfigDict(
        # All environment variables must start with "TYPO_"
        # Все переменные окружения должны начинаться с "TYPO_"
        env_prefix="TYPO_",

        # Ignore extra environment variables that don't match our fields
        # Игнорировать переменные окружения, которые не соответствуют нашим полям
        extra="ignore",
    )

    # Optional overrides for each setting (None = keep value from TypographConfig)
    # Опциональные переопределения (None = оставить значение из TypographConfig)
    layout: Optional[Layout] = None
    class_prefix: Optional[str] = None
    nowrap: Optional[bool] = None
    entities: Optional[bool] = None
    # JSON list, e.g. TYPO_DISABLED_RULES='["word_sup"]'
    disabled_rules: Optional[List[str]] = None


# ==============================================================================
# Helper function to find the default configuration file
# Вспомогательная функция для поиска файла конфигурации по умолчанию
# ==============================================================================
def _resolve_default_config_path() -> Path:
    """
    Find configs/typograph.yaml by searching upward from current file.
    Найти configs/typograph.yaml, поднимаясь вверх от текущего файла.
    """
    start = Path(__file__).resolve()
    for p in [start] + list(start.parents):
        cand = p / "configs" / "typograph.yaml"
        if cand.exists():
            return cand

    # Fallback: repository root three levels up
    # Резервный вариант: корень репозитория на три уровня выше
    try:
        root = Path(__file__).resolve().parents[3]
        return root / "configs" / "typograph.yaml"
    except IndexError:
        return Path("configs/typograph.yaml")


# Default path to the configuration file
# Путь по умолчанию к конфигурационному файлу
DEFAULT_CONFIG_PATH = _resolve_default_config_path()


def _load_env(env_path: Optional[str | Path]) -> None:
    """Загружает переменные окружения из .env, если файл найден."""
    if env_path is not None:
        load_dotenv(dotenv_path=Path(env_path), override=False)
        return
    load_dotenv(override=False)


# ==============================================================================
# Main function to load and merge configuration
# Основная функция для загрузки и объединения конфигурации
# ==============================================================================
def load_typograph_config(
    path: Optional[str | Path] = None,
    *,
    env_path: Optional[str | Path] = None,
) -> TypographConfig:
    """
    Load configuration from YAML file and apply environment variable overrides.
    Загрузить конфигурацию из YAML-файла и применить переопределения из окружения.

    Priority / Приоритет (highest to lowest / от высшего к низшему):
        1. Environment variables (TYPO_*) / Переменные окружения (TYPO_*)
        2. YAML file settings / Настройки из YAML-файла
        3. Default values in TypographConfig / Значения по умолчанию
    """
    file_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH

    if not file_path.exists():
        logger.debug("typograph.yaml не найден по пути: %s", file_path)
        data = {}
    else:
        logger.debug("typograph.yaml: %s", file_path)
        with file_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    # Extract the 'typograph' section, or use the whole dict if there is none
    # Извлекаем секцию 'typograph' или используем весь словарь, если секции нет
    params = data.get("typograph", data) if isinstance(data, dict) else {}
    cfg = TypographConfig(**params)

    _load_env(env_path)
    override_dict = EnvTypographOverrides().model_dump(exclude_none=True)
    if override_dict:
        # model_validate re-checks the merged values
        # model_validate повторно проверяет объединённые значения
        cfg = TypographConfig.model_validate({**cfg.model_dump(), **override_dict})

    return cfg
