from __future__ import annotations

from typing import Optional


class TypographError(Exception):
    """Базовая ошибка типографа."""


class RuleDefinitionError(TypographError):
    """Правило описано некорректно (нет действия, два действия, неизвестное имя)."""


class RuleCompileError(TypographError):
    """Шаблон правила не компилируется."""

    def __init__(self, rule: str, pattern: str, cause: Exception) -> None:
        super().__init__(f"Правило {rule!r}: не удалось скомпилировать шаблон {pattern!r}: {cause}")
        self.rule = rule
        self.pattern = pattern
        self.__cause__ = cause


class RuleEvaluationError(TypographError):
    """Вычисляемая замена упала на конкретном совпадении."""

    def __init__(self, rule: str, fragment: Optional[str], cause: Exception) -> None:
        super().__init__(f"Правило {rule!r}: ошибка вычисления замены для {fragment!r}: {cause}")
        self.rule = rule
        self.fragment = fragment
        self.__cause__ = cause


class MissingHandlerError(TypographError):
    """Правило ссылается на обработчик, которого нет в реестре."""

    def __init__(self, rule: str, handler_id: str) -> None:
        super().__init__(f"Правило {rule!r}: обработчик {handler_id!r} не зарегистрирован")
        self.rule = rule
        self.handler_id = handler_id
