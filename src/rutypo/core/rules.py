"""
Rule model for the typograph.
Модель правил типографа.

A rule is a named pattern plus exactly one action:
Правило — это именованный шаблон и ровно одно действие:

- ``LiteralTemplate``      — обычная замена по шаблону (``\\1``, ``\\g<name>``)
- ``ComputedReplacement``  — замена вычисляется функцией от совпадения
- ``CustomHandler``        — именованный обработчик переписывает весь буфер

Rules are collected into an ordered ``RuleSet``; order defines application order.
Правила собираются в упорядоченный ``RuleSet``; порядок задаёт порядок применения.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Union

from .errors import (
    MissingHandlerError,
    RuleCompileError,
    RuleDefinitionError,
    RuleEvaluationError,
    TypographError,
)
from .markup import TagRenderer

logger = logging.getLogger(__name__)

# All rules match case-insensitively; str patterns are Unicode-aware in Python 3
# Все правила регистронезависимы; str-шаблоны в Python 3 поддерживают Unicode
DEFAULT_FLAGS = re.IGNORECASE | re.UNICODE


# =============================================================================
# CONTEXT / КОНТЕКСТ
# =============================================================================

@dataclass(frozen=True)
class Symbols:
    """Output symbols used in replacements / Символы, подставляемые в замены."""

    mdash: str
    acute: str

    def as_dict(self) -> Dict[str, str]:
        return {"mdash": self.mdash, "acute": self.acute}


UNICODE_SYMBOLS = Symbols(mdash="\u2014", acute="\u0301")
ENTITY_SYMBOLS = Symbols(mdash="&mdash;", acute="&#769;")


Handler = Callable[[str, "RuleContext"], str]


@dataclass(frozen=True)
class RuleContext:
    """
    Everything a rule may use besides the text itself.
    Всё, что правило может использовать помимо самого текста.
    """

    renderer: TagRenderer = field(default_factory=TagRenderer)
    symbols: Symbols = UNICODE_SYMBOLS
    handlers: Mapping[str, Handler] = field(default_factory=dict)

    def tag(self, content: str, tag_name: str = "span", attributes: Optional[Mapping[str, str]] = None) -> str:
        return self.renderer.tag(content, tag_name, attributes)


# =============================================================================
# PATTERN HELPERS / ПОМОЩНИКИ ДЛЯ ШАБЛОНОВ
# =============================================================================

@lru_cache(maxsize=256)
def _compile(pattern: str, flags: int) -> re.Pattern[str]:
    return re.compile(pattern, flags)


def compile_pattern(rule_name: str, pattern: str, flags: int = DEFAULT_FLAGS) -> re.Pattern[str]:
    try:
        return _compile(pattern, flags)
    except re.error as exc:
        raise RuleCompileError(rule_name, pattern, exc) from exc


def substitute_until_stable(
    regex: re.Pattern[str],
    replacement: Union[str, Callable[[re.Match[str]], str]],
    text: str,
    *,
    max_iterations: Optional[int] = None,
) -> str:
    """
    Apply ``regex.sub`` repeatedly until the text stops changing.
    Применяет ``regex.sub`` повторно, пока текст не перестанет меняться.

    Removing one match can expose another one, so a single pass is not enough.
    The loop is capped by the input length: every productive pass must change
    the text, and a runaway rule is cut off instead of hanging.
    Удаление одного совпадения может открыть следующее, поэтому одного прохода мало.
    Число итераций ограничено длиной входа.
    """
    limit = max_iterations if max_iterations is not None else len(text) + 1
    current = text
    for _ in range(limit):
        updated = regex.sub(replacement, current)
        if updated == current:
            return updated
        current = updated
    logger.warning("Шаблон %r не сошёлся за %s итераций", regex.pattern, limit)
    return current


# =============================================================================
# ACTIONS / ДЕЙСТВИЯ
# =============================================================================

@dataclass(frozen=True)
class LiteralTemplate:
    """
    ``re.sub`` template. ``{mdash}`` and ``{acute}`` are filled from the context
    symbols, so literal braces must be doubled.
    """

    template: str

    def apply(self, text: str, rule: "Rule", ctx: RuleContext) -> str:
        regex = rule.compiled()
        try:
            expanded = self.template.format_map(ctx.symbols.as_dict())
        except (KeyError, IndexError, ValueError) as exc:
            raise RuleCompileError(rule.name, self.template, exc) from exc
        try:
            return regex.sub(expanded, text)
        except re.error as exc:
            raise RuleCompileError(rule.name, self.template, exc) from exc


@dataclass(frozen=True)
class ComputedReplacement:
    """Replacement computed per match by ``fn(match, ctx)``."""

    fn: Callable[[re.Match[str], RuleContext], str]

    def apply(self, text: str, rule: "Rule", ctx: RuleContext) -> str:
        regex = rule.compiled()

        def _replace(match: re.Match[str]) -> str:
            try:
                return self.fn(match, ctx)
            except TypographError:
                raise
            except Exception as exc:
                raise RuleEvaluationError(rule.name, match.group(0), exc) from exc

        return regex.sub(_replace, text)


@dataclass(frozen=True)
class CustomHandler:
    """Delegates the whole buffer to a registered handler."""

    handler_id: str

    def apply(self, text: str, rule: "Rule", ctx: RuleContext) -> str:
        handler = ctx.handlers.get(self.handler_id)
        if handler is None:
            raise MissingHandlerError(rule.name, self.handler_id)
        try:
            return handler(text, ctx)
        except TypographError:
            raise
        except Exception as exc:
            raise RuleEvaluationError(rule.name, None, exc) from exc


RuleAction = Union[LiteralTemplate, ComputedReplacement, CustomHandler]


# =============================================================================
# RULES / ПРАВИЛА
# =============================================================================

@dataclass(frozen=True)
class Rule:
    """
    One named transformation with a fixed position in the rule set.
    Одно именованное преобразование с фиксированным местом в наборе.

    Attributes / Атрибуты:
        name: rule identifier / идентификатор правила
        description: human-readable description / описание для людей
        action: what to do with matches / что делать с совпадениями
        pattern: regex source (absent for custom handlers) / исходник шаблона
        flags: ``re`` flags / флаги ``re``
    """

    name: str
    description: str
    action: RuleAction
    pattern: Optional[str] = None
    flags: int = DEFAULT_FLAGS

    def __post_init__(self) -> None:
        if isinstance(self.action, CustomHandler):
            if self.pattern is not None:
                raise RuleDefinitionError(f"Правило {self.name!r}: у обработчика не должно быть шаблона")
        elif not self.pattern:
            raise RuleDefinitionError(f"Правило {self.name!r}: не задан шаблон")

    @classmethod
    def from_definition(cls, name: str, definition: Mapping[str, Any]) -> "Rule":
        """
        Build a rule from a table entry: ``description``, ``pattern`` and exactly
        one of ``replacement`` (str or callable) / ``function`` (handler id).
        """
        replacement = definition.get("replacement")
        function = definition.get("function")
        if (replacement is None) == (function is None):
            raise RuleDefinitionError(
                f"Правило {name!r}: нужно ровно одно из полей replacement/function"
            )

        action: RuleAction
        if function is not None:
            action = CustomHandler(str(function))
        elif callable(replacement):
            action = ComputedReplacement(replacement)
        else:
            action = LiteralTemplate(str(replacement))

        return cls(
            name=name,
            description=str(definition.get("description", "")),
            action=action,
            pattern=definition.get("pattern"),
            flags=int(definition.get("flags", DEFAULT_FLAGS)),
        )

    @property
    def kind(self) -> str:
        if isinstance(self.action, CustomHandler):
            return "handler"
        if isinstance(self.action, ComputedReplacement):
            return "computed"
        return "template"

    def compiled(self) -> re.Pattern[str]:
        if self.pattern is None:
            raise RuleDefinitionError(f"Правило {self.name!r} не имеет шаблона")
        return compile_pattern(self.name, self.pattern, self.flags)

    def apply(self, text: str, ctx: RuleContext) -> str:
        return self.action.apply(text, self, ctx)


class RuleSet:
    """Ordered ``name → Rule`` mapping / Упорядоченное отображение ``имя → правило``."""

    def __init__(self, rules: Iterable[Rule], *, title: str = "") -> None:
        self.title = title
        self._rules: Dict[str, Rule] = {}
        for rule in rules:
            if rule.name in self._rules:
                raise RuleDefinitionError(f"Правило {rule.name!r} объявлено дважды")
            self._rules[rule.name] = rule

    @classmethod
    def from_table(cls, table: Mapping[str, Mapping[str, Any]], *, title: str = "") -> "RuleSet":
        return cls((Rule.from_definition(name, item) for name, item in table.items()), title=title)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __getitem__(self, name: str) -> Rule:
        return self._rules[name]

    def names(self) -> List[str]:
        return list(self._rules)

    def without(self, names: Iterable[str]) -> "RuleSet":
        """Copy of the set with the given rules removed; order is kept."""
        skip = set(names)
        unknown = sorted(skip - set(self._rules))
        if unknown:
            raise RuleDefinitionError(f"Неизвестные правила: {', '.join(unknown)}")
        return RuleSet((r for r in self._rules.values() if r.name not in skip), title=self.title)
