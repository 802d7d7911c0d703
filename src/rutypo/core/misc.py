"""
Rule group "Прочее": accents, superscript, century and time ranges, nbsp cleanup.
Группа правил «Прочее»: ударения, надстрочный текст, диапазоны веков и времени,
чистка неразрывных пробелов внутри неразрывных блоков.
"""
from __future__ import annotations

import re
from typing import Any, Dict, Mapping

from .markup import NOWRAP
from .rules import (
    DEFAULT_FLAGS,
    Handler,
    RuleContext,
    RuleSet,
    compile_pattern,
    substitute_until_stable,
)

TITLE = "Прочее"

# Non-breaking space as entity or as U+00A0
# Неразрывный пробел сущностью или символом U+00A0
NBSP = r"(?:&nbsp;|\u00a0)"

# Letters a word may consist of; acute marks stay inside the word
# Буквы, из которых состоит слово; знак ударения остаётся внутри слова
_LETTER = r"[a-zа-яё]"
_WORD = r"(?:[a-zа-яё]|\u0301|&#769;)+"

_NBSP_RE = re.compile(NBSP)


def _nowrap(ctx: RuleContext, content: str) -> str:
    return ctx.tag(content, "span", {"class": NOWRAP})


def _inside_nowrap(m: re.Match[str], ctx: RuleContext) -> bool:
    """Совпадение уже лежит внутри неразрывного блока, созданного ранее."""
    opening, closing = ctx.renderer.nowrap_bounds()
    head = m.string[: m.start()]
    return head.rfind(opening) > head.rfind(closing)


def _word_sup(m: re.Match[str], ctx: RuleContext) -> str:
    return ctx.tag(ctx.tag(m.group(1), "small"), "sup")


def _century_period(m: re.Match[str], ctx: RuleContext) -> str:
    if _inside_nowrap(m, ctx):
        return m.group(0)
    return _nowrap(ctx, f"{m.group(1)}{ctx.symbols.mdash}{m.group(2)} вв.")


def _time_interval(m: re.Match[str], ctx: RuleContext) -> str:
    if _inside_nowrap(m, ctx):
        return m.group(0)
    return _nowrap(ctx, f"{m.group(1)}{ctx.symbols.mdash}{m.group(2)}")


def remove_nbsp(text: str, ctx: RuleContext) -> str:
    """
    Убирает неразрывные пробелы вокруг и внутри неразрывных блоков.

    1. ``слово&nbsp;<span class="nowrap">`` → ``<span class="nowrap">слово `` до исчерпания;
    2. ``</span>&nbsp;слово`` → `` слово</span>`` до исчерпания;
    3. внутри каждого блока оставшиеся ``&nbsp;`` заменяются обычными пробелами.

    Теги берутся у того же рендерера, что и у остальных правил, поэтому
    обработчик работает и со ``style``-оформлением, и с ``<nobr>``.
    """
    opening, closing = ctx.renderer.nowrap_bounds()
    b, e = re.escape(opening), re.escape(closing)

    glued_before = compile_pattern(
        "remove_nbsp", rf"(?<![a-zа-яё\u0301&])({_WORD}){NBSP}({b})"
    )
    text = substitute_until_stable(glued_before, r"\2\1 ", text)

    glued_after = compile_pattern(
        "remove_nbsp", rf"({e}){NBSP}({_WORD})(?!{_LETTER}|\u0301|&#769;)"
    )
    text = substitute_until_stable(glued_after, r" \2\1", text)

    inside = compile_pattern("remove_nbsp", rf"{b}.*?{e}", DEFAULT_FLAGS | re.DOTALL)
    return inside.sub(lambda m: _NBSP_RE.sub(" ", m.group(0)), text)


RULES: Dict[str, Dict[str, Any]] = {
    "acute_accent": {
        "description": "Акцент",
        "pattern": r"(у|е|ы|а|о|э|я|и|ю|ё)`(\w)",
        "replacement": r"\1{acute}\2",
    },
    "word_sup": {
        "description": "Надстрочный текст после символа ^",
        "pattern": (
            rf"(?:^|(?:\s|{NBSP})+)\^"
            r"([.:,\-]*[a-zа-яё0-9]+(?:[.:,\-]+[a-zа-яё0-9]+)*)"
            rf"(?=[.:,;!?]*(?:\s|{NBSP}|$))"
        ),
        "replacement": _word_sup,
    },
    "century_period": {
        "description": "Тире между диапазоном веков",
        "pattern": (
            r"(?:(?<=\s)|(?<=&nbsp;)|^)"
            r"([XIV]{1,5})(?:-|—|–|&mdash;)([XIV]{1,5})"
            rf"(?: |{NBSP})?(?:в\.в\.|вв\.|вв|в\.|в)(?![а-яё])"
        ),
        "replacement": _century_period,
    },
    "time_interval": {
        "description": "Тире и отмена переноса между диапазоном времени",
        "pattern": (
            r"(?<![\d>])(\d{1,2}:\d{2})(?:-|—|–|&mdash;|&minus;)(\d{1,2}:\d{2})(?![\d<])"
        ),
        "replacement": _time_interval,
    },
    "expand_no_nbsp_in_nobr": {
        "description": "Удаление nbsp в nobr/nowrap тэгах",
        "function": "remove_nbsp",
    },
}

HANDLERS: Mapping[str, Handler] = {
    "remove_nbsp": remove_nbsp,
}


def build_misc_ruleset() -> RuleSet:
    return RuleSet.from_table(RULES, title=TITLE)
